"""
simulation/control_deck.py

Rewrites a user netlist into an ngspice batch script for one analysis.

The analysis directives of the original netlist are stripped and replaced
by a ``.control`` block that runs the resolved analysis and writes every
vector to a raw file.
"""

import logging

from models.analysis import ANALYSIS_KEYWORDS, AnalysisKind

logger = logging.getLogger(__name__)

# First tokens removed from the netlist body ('.end' is re-added after .endc)
_STRIPPED_DIRECTIVES = frozenset(f".{kw}" for kw in ANALYSIS_KEYWORDS + ("end",))


def _first_token(line):
    tokens = line.split(None, 1)
    return tokens[0].lower() if tokens else ""


class ControlDeckGenerator:
    """Generates an ngspice control deck from netlist text and an analysis kind"""

    def __init__(self, netlist, analysis_kind: AnalysisKind):
        self.netlist = netlist
        self.analysis_kind = analysis_kind
        self._lines = [line.rstrip() for line in netlist.split("\n")]

    def body_lines(self):
        """Netlist lines that survive directive stripping, in original order."""
        return [
            line
            for line in self._lines
            if line.strip() and _first_token(line) not in _STRIPPED_DIRECTIVES
        ]

    def analysis_parameters(self):
        """Parameters of the netlist's own directive for this kind, else the default."""
        directive = f".{self.analysis_kind.keyword}"
        for line in self._lines:
            stripped = line.strip()
            if _first_token(stripped) == directive:
                params = stripped[len(directive):].strip()
                if params:
                    return params
                break
        return self.analysis_kind.default_parameters

    def analysis_command(self):
        """The interactive command line run inside the control block."""
        params = self.analysis_parameters()
        keyword = self.analysis_kind.keyword
        return f"{keyword} {params}" if params else keyword

    def generate(self):
        """Generate the complete control deck text"""
        body = self.body_lines()
        if not body:
            logger.info("Netlist has no body lines; emitting an empty-body control deck")

        lines = list(body)
        lines.append("")
        lines.extend(self._generate_control_block())
        return "\n".join(lines)

    def _generate_control_block(self):
        return [
            ".control",
            self.analysis_command(),
            f"write {self.analysis_kind.output_file} all",
            ".endc",
            ".end",
        ]


def generate_control_deck(netlist, analysis_kind: AnalysisKind) -> str:
    """Convenience wrapper around ControlDeckGenerator.generate()."""
    return ControlDeckGenerator(netlist, analysis_kind).generate()
