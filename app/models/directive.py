"""
Directive and model-card records for dot-prefixed netlist lines.
"""

from dataclasses import dataclass

# Directive keywords kept with their own kind; everything else is "unknown"
KNOWN_DIRECTIVES = ("dc", "ac", "tran", "op", "noise", "tf", "sens")

UNKNOWN_DIRECTIVE = "unknown"


@dataclass(frozen=True)
class Directive:
    """A `.xxx` control line.

    For recognised keywords ``parameters`` is the text after the keyword.
    For unknown directives it is the whole original line, so the UI can show
    it verbatim.
    """

    kind: str
    parameters: str

    @property
    def keyword(self) -> str:
        """Lower-cased directive keyword without the leading dot."""
        if self.kind != UNKNOWN_DIRECTIVE:
            return self.kind
        tokens = self.parameters.split()
        if not tokens:
            return ""
        return tokens[0].lstrip(".").lower()

    def to_dict(self) -> dict:
        return {"kind": self.kind, "parameters": self.parameters}


@dataclass(frozen=True)
class ModelCard:
    """A `.model name type params` line."""

    name: str
    type: str
    parameters: str = ""

    def to_dict(self) -> dict:
        return {"name": self.name, "type": self.type, "parameters": self.parameters}
