"""
Trace and SimulationResult records handed to the presentation layer.
"""

from dataclasses import dataclass, field, replace
from typing import Optional

from .analysis import AnalysisKind


@dataclass(frozen=True)
class Trace:
    """One plotted variable: equal-length x/y sample sequences."""

    name: str
    x: tuple[float, ...]
    y: tuple[float, ...]
    visible: bool = True

    def __post_init__(self):
        if len(self.x) != len(self.y):
            raise ValueError(
                f"Trace {self.name}: x has {len(self.x)} samples but y has {len(self.y)}"
            )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "x": list(self.x),
            "y": list(self.y),
            "visible": self.visible,
        }


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of one simulation run.

    Operating point runs carry ``scalar_values`` and no traces; every other
    kind carries traces and leaves ``scalar_values`` as None.
    """

    analysis_kind: AnalysisKind
    variables: tuple[str, ...] = ()
    traces: tuple[Trace, ...] = ()
    scalar_values: Optional[dict[str, str]] = None
    message: str = ""
    variable_source: str = field(default="", compare=False)

    def get_trace(self, name: str) -> Optional[Trace]:
        for trace in self.traces:
            if trace.name == name:
                return trace
        return None

    def with_visible(self, names) -> "SimulationResult":
        """Return a copy whose traces are visible exactly when named in *names*."""
        wanted = set(names)
        traces = tuple(replace(t, visible=t.name in wanted) for t in self.traces)
        return replace(self, traces=traces)

    def to_dict(self) -> dict:
        data = {
            "analysis": self.analysis_kind.value,
            "variables": list(self.variables),
            "traces": [t.to_dict() for t in self.traces],
            "message": self.message,
        }
        if self.scalar_values is not None:
            data["values"] = dict(self.scalar_values)
        return data
