"""
Component - Pure Python records for parsed netlist elements.

Component kinds are keyed by the SPICE prefix letter of the instance name
('R1' -> Resistor, 'Q3' -> BJT, ...). Records are frozen: a reparse builds
new ones rather than mutating the old ones.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class ComponentKind(Enum):
    """Closed set of element kinds understood by the netlist parser."""

    RESISTOR = "R"
    INDUCTOR = "L"
    CAPACITOR = "C"
    VOLTAGE_SOURCE = "V"
    CURRENT_SOURCE = "I"
    DIODE = "D"
    BJT = "Q"
    JFET = "J"
    MOSFET = "M"
    VCVS = "E"
    CCCS = "F"
    VCCS = "G"
    CCVS = "H"
    UNKNOWN = "?"

    @classmethod
    def from_prefix(cls, prefix: str) -> "ComponentKind":
        """Map a SPICE prefix letter (any case) to its kind, or UNKNOWN."""
        try:
            return cls(prefix.upper())
        except ValueError:
            return cls.UNKNOWN

    @property
    def display_name(self) -> str:
        return DISPLAY_NAMES[self]


DISPLAY_NAMES = {
    ComponentKind.RESISTOR: "Resistor",
    ComponentKind.INDUCTOR: "Inductor",
    ComponentKind.CAPACITOR: "Capacitor",
    ComponentKind.VOLTAGE_SOURCE: "Voltage Source",
    ComponentKind.CURRENT_SOURCE: "Current Source",
    ComponentKind.DIODE: "Diode",
    ComponentKind.BJT: "BJT",
    ComponentKind.JFET: "JFET",
    ComponentKind.MOSFET: "MOSFET",
    ComponentKind.VCVS: "VCVS",
    ComponentKind.CCCS: "CCCS",
    ComponentKind.VCCS: "VCCS",
    ComponentKind.CCVS: "CCVS",
    ComponentKind.UNKNOWN: "Unknown",
}

# Node names treated as the reference node
GROUND_NODES = frozenset({"0", "gnd"})


def is_ground(node: str) -> bool:
    return node.lower() in GROUND_NODES


@dataclass(frozen=True)
class Component:
    """One circuit element parsed from a netlist line."""

    id: str
    kind: ComponentKind
    nodes: tuple[str, ...]
    value: Optional[str] = None
    model: Optional[str] = None
    parameters: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "kind": self.kind.display_name,
            "nodes": list(self.nodes),
            "value": self.value,
            "model": self.model,
            "parameters": dict(self.parameters),
        }


@dataclass(frozen=True)
class Connection:
    """One (component, pin) -> node attachment derived from a component."""

    component_id: str
    node_name: str
    pin_index: int

    def to_dict(self) -> dict:
        return {
            "component_id": self.component_id,
            "node": self.node_name,
            "pin": self.pin_index,
        }
