from .analysis_detector import detect_analysis, detect_analysis_from_text
from .control_deck import ControlDeckGenerator, generate_control_deck
from .netlist_parser import parse_netlist
from .ngspice_runner import (
    EngineAbort,
    EngineError,
    EngineNonZeroExit,
    EngineTimeout,
    NgspiceRunner,
    OfflineRunner,
    create_runner,
)
from .output_interpreter import OutputInterpreter, interpret_output

__all__ = [
    "ControlDeckGenerator",
    "EngineAbort",
    "EngineError",
    "EngineNonZeroExit",
    "EngineTimeout",
    "NgspiceRunner",
    "OfflineRunner",
    "OutputInterpreter",
    "create_runner",
    "detect_analysis",
    "detect_analysis_from_text",
    "generate_control_deck",
    "interpret_output",
    "parse_netlist",
]
