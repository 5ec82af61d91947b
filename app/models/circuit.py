"""
CircuitModel - Immutable result of parsing one netlist.

This module contains no parsing logic. A CircuitModel always reflects the
full input text, including lines that failed to parse (see ``errors``);
callers decide whether errors are fatal.
"""

from dataclasses import dataclass, field

from .component import Component, ComponentKind, Connection, is_ground
from .directive import Directive, ModelCard


@dataclass(frozen=True)
class ParseError:
    """A recoverable per-line parse failure."""

    line: int
    message: str
    text: str

    def to_dict(self) -> dict:
        return {"line": self.line, "message": self.message, "text": self.text}


@dataclass(frozen=True)
class CircuitModel:
    """Structured view of a netlist: title, elements, directives and errors."""

    title: str = ""
    components: tuple[Component, ...] = ()
    connections: tuple[Connection, ...] = ()
    directives: tuple[Directive, ...] = ()
    models: tuple[ModelCard, ...] = ()
    errors: tuple[ParseError, ...] = field(default=())

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    @property
    def node_names(self) -> list[str]:
        """Distinct node names in first-seen order (ground included)."""
        seen = {}
        for conn in self.connections:
            seen.setdefault(conn.node_name, None)
        return list(seen)

    @property
    def signal_nodes(self) -> list[str]:
        """Node names excluding the ground/reference node."""
        return [n for n in self.node_names if not is_ground(n)]

    @property
    def voltage_sources(self) -> list[Component]:
        return [c for c in self.components if c.kind is ComponentKind.VOLTAGE_SOURCE]

    def get_component(self, component_id: str):
        """Look up a component by id (case-insensitive), or None."""
        wanted = component_id.upper()
        for comp in self.components:
            if comp.id.upper() == wanted:
                return comp
        return None

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "components": [c.to_dict() for c in self.components],
            "connections": [c.to_dict() for c in self.connections],
            "directives": [d.to_dict() for d in self.directives],
            "models": [m.to_dict() for m in self.models],
            "errors": [e.to_dict() for e in self.errors],
        }
