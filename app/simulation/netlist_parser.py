"""
simulation/netlist_parser.py

Parses SPICE netlist text into an immutable CircuitModel.

The parser is total: every input, including empty or garbage text, yields a
CircuitModel. Problems on individual lines become ParseError entries; lines
that are simply malformed (unknown prefix, too few tokens) are skipped
without an error so half-typed lines do not flood the diagnostics list
while the user is editing.
"""

import logging
import re
from typing import NamedTuple, Optional, Union

from models.circuit import CircuitModel, ParseError
from models.component import Component, ComponentKind, Connection
from models.directive import KNOWN_DIRECTIVES, UNKNOWN_DIRECTIVE, Directive, ModelCard

logger = logging.getLogger(__name__)

# Transient waveform literals that may stand in for a source value
_WAVEFORM_FUNCTIONS = ("SIN", "PULSE", "PWL", "EXP", "SFFM")
_WAVEFORM_PATTERN = re.compile(
    r"\b(?:" + "|".join(_WAVEFORM_FUNCTIONS) + r")\s*\([^)]*\)?",
    re.IGNORECASE,
)


class NumberedLine(NamedTuple):
    """A surviving netlist line and its 1-based position in the raw text."""

    number: int
    text: str


# ── Line classifier ───────────────────────────────────────────────────


def classify_lines(text):
    """Split netlist text into its title and the remaining logical lines.

    Blank lines and ``*`` comments are dropped, as is any ``.end`` line.
    The first surviving line is the title and is not returned in the list.

    Returns:
        (title, lines) where lines is a list of NumberedLine.
    """
    title = ""
    lines = []
    have_title = False

    for number, raw in enumerate(text.split("\n"), start=1):
        stripped = raw.strip()
        if not stripped or stripped.startswith("*"):
            continue
        if not have_title:
            title = stripped
            have_title = True
            continue
        if stripped.lower() == ".end":
            continue
        lines.append(NumberedLine(number, stripped))

    return title, lines


# ── Source values ─────────────────────────────────────────────────────


class SourceValueRule(NamedTuple):
    """One entry of the ordered source-value rule table."""

    name: str
    pattern: re.Pattern
    group: int

    def matches(self, spec: str) -> bool:
        return self.pattern.search(spec) is not None

    def extract(self, spec: str) -> str:
        return self.pattern.search(spec).group(self.group)


# Tried in order; the first matching rule supplies the representative value.
SOURCE_VALUE_RULES = (
    SourceValueRule("dc", re.compile(r"\bdc\s+(\S+)", re.IGNORECASE), 1),
    SourceValueRule("ac", re.compile(r"\bac\s+(\S+)", re.IGNORECASE), 1),
    SourceValueRule("waveform", _WAVEFORM_PATTERN, 0),
)


def extract_source_value(tokens):
    """Pick the representative value of a V/I source line.

    A source may carry DC, AC and transient specifications at once
    (``V1 in 0 DC 0 AC 1 SIN(0 1 1k)``); only one is surfaced. Falls back to
    the first token after the nodes.
    """
    spec = " ".join(tokens[3:])
    for rule in SOURCE_VALUE_RULES:
        if rule.matches(spec):
            return rule.extract(spec)
    return tokens[3]


# ── Component records ─────────────────────────────────────────────────


def _parse_passive(tokens, kind):
    if len(tokens) < 4:
        return None
    return Component(id=tokens[0], kind=kind, nodes=tuple(tokens[1:3]), value=tokens[3])


def _parse_source(tokens, kind):
    if len(tokens) < 4:
        return None
    return Component(
        id=tokens[0],
        kind=kind,
        nodes=tuple(tokens[1:3]),
        value=extract_source_value(tokens),
    )


def _parse_diode(tokens, kind):
    if len(tokens) < 4:
        return None
    return Component(id=tokens[0], kind=kind, nodes=tuple(tokens[1:3]), model=tokens[3])


def _parse_bjt(tokens, kind):
    # collector base emitter [substrate] model
    if len(tokens) >= 6:
        return Component(id=tokens[0], kind=kind, nodes=tuple(tokens[1:5]), model=tokens[5])
    if len(tokens) == 5:
        return Component(id=tokens[0], kind=kind, nodes=tuple(tokens[1:4]), model=tokens[4])
    return None


def _parse_jfet(tokens, kind):
    if len(tokens) < 5:
        return None
    return Component(id=tokens[0], kind=kind, nodes=tuple(tokens[1:4]), model=tokens[4])


def _parse_mosfet(tokens, kind):
    # drain gate source bulk model name value ...
    if len(tokens) < 7:
        return None
    return Component(
        id=tokens[0],
        kind=kind,
        nodes=tuple(tokens[1:5]),
        model=tokens[5],
        parameters=_parse_parameter_pairs(tokens[6:]),
    )


def _parse_controlled_source(tokens, kind):
    if len(tokens) < 6:
        return None
    return Component(id=tokens[0], kind=kind, nodes=tuple(tokens[1:5]), value=tokens[5])


def _parse_parameter_pairs(tokens):
    """Collect instance parameters given as ``W 1u L 2u`` or ``W=1u L=2u``.

    A trailing name without a value is dropped.
    """
    params = {}
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if "=" in token:
            name, _, value = token.partition("=")
            if name and value:
                params[name] = value
            i += 1
        elif i + 1 < len(tokens):
            params[token] = tokens[i + 1]
            i += 2
        else:
            i += 1
    return params


_COMPONENT_PARSERS = {
    ComponentKind.RESISTOR: _parse_passive,
    ComponentKind.INDUCTOR: _parse_passive,
    ComponentKind.CAPACITOR: _parse_passive,
    ComponentKind.VOLTAGE_SOURCE: _parse_source,
    ComponentKind.CURRENT_SOURCE: _parse_source,
    ComponentKind.DIODE: _parse_diode,
    ComponentKind.BJT: _parse_bjt,
    ComponentKind.JFET: _parse_jfet,
    ComponentKind.MOSFET: _parse_mosfet,
    ComponentKind.VCVS: _parse_controlled_source,
    ComponentKind.CCCS: _parse_controlled_source,
    ComponentKind.VCCS: _parse_controlled_source,
    ComponentKind.CCVS: _parse_controlled_source,
}


def parse_component_line(line) -> Optional[Component]:
    """Parse one non-directive line into a Component.

    Returns None for unknown prefixes and for lines with fewer tokens than
    their kind needs; a component is never partially recorded.
    """
    tokens = line.split()
    if not tokens:
        return None

    kind = ComponentKind.from_prefix(tokens[0][0])
    parser = _COMPONENT_PARSERS.get(kind)
    if parser is None:
        logger.debug("Unknown SPICE prefix '%s' - skipping %s", tokens[0][0], tokens[0])
        return None

    component = parser(tokens, kind)
    if component is None:
        logger.debug("Not enough tokens for %s: %s", tokens[0], line)
    return component


# ── Directives and models ─────────────────────────────────────────────


def parse_model_line(line) -> Optional[ModelCard]:
    """Parse a ``.model name type [params]`` line, or None if too short."""
    tokens = line.split()
    if len(tokens) < 3:
        return None
    return ModelCard(name=tokens[1], type=tokens[2], parameters=" ".join(tokens[3:]))


def parse_directive_line(line) -> Union[Directive, ModelCard, None]:
    """Parse a dot-prefixed line into a Directive or, for .model, a ModelCard."""
    tokens = line.split()
    keyword = tokens[0][1:].lower()

    if keyword == "model":
        return parse_model_line(line)

    if keyword in KNOWN_DIRECTIVES:
        return Directive(kind=keyword, parameters=" ".join(tokens[1:]))

    return Directive(kind=UNKNOWN_DIRECTIVE, parameters=line)


# ── Circuit model builder ─────────────────────────────────────────────


def parse_netlist(text) -> CircuitModel:
    """Parse netlist text into a CircuitModel.

    Each line is parsed inside its own failure boundary: an unexpected
    exception is recorded as a ParseError for that line and parsing
    continues with the next one.
    """
    if isinstance(text, (bytes, bytearray)):
        text = text.decode("utf-8", errors="replace")
    elif text is None:
        text = ""

    title, lines = classify_lines(text)

    components = []
    directives = []
    models = []
    errors = []

    for line in lines:
        try:
            if line.text.startswith("."):
                record = parse_directive_line(line.text)
                if isinstance(record, ModelCard):
                    models.append(record)
                elif record is not None:
                    directives.append(record)
            else:
                component = parse_component_line(line.text)
                if component is not None:
                    components.append(component)
        except Exception as e:
            logger.debug("Line %d failed to parse: %s", line.number, e, exc_info=True)
            errors.append(ParseError(line=line.number, message=str(e), text=line.text))

    connections = [
        Connection(component_id=comp.id, node_name=node, pin_index=pin)
        for comp in components
        for pin, node in enumerate(comp.nodes)
    ]

    return CircuitModel(
        title=title,
        components=tuple(components),
        connections=tuple(connections),
        directives=tuple(directives),
        models=tuple(models),
        errors=tuple(errors),
    )
