"""
Pure Python data models for the netlist core.

This package contains immutable records produced by the parser and the
output interpreter. No parsing or engine logic lives here.
"""

from .analysis import DEFAULT_ANALYSIS, DETECTION_ORDER, AnalysisKind
from .circuit import CircuitModel, ParseError
from .component import Component, ComponentKind, Connection, is_ground
from .directive import Directive, ModelCard
from .result import SimulationResult, Trace

__all__ = [
    "AnalysisKind",
    "CircuitModel",
    "Component",
    "ComponentKind",
    "Connection",
    "DEFAULT_ANALYSIS",
    "DETECTION_ORDER",
    "Directive",
    "ModelCard",
    "ParseError",
    "SimulationResult",
    "Trace",
    "is_ground",
]
