"""
simulation/analysis_detector.py

Resolves which analysis a netlist asks for.

A netlist often carries several analysis directives while it is being
iterated on. Kinds are tested in a fixed order, rarest first, and the first
one present wins; with no analysis directive at all the result is Transient.
"""

from models.analysis import DEFAULT_ANALYSIS, DETECTION_ORDER, AnalysisKind
from simulation.netlist_parser import parse_netlist


def detect_analysis(directives) -> AnalysisKind:
    """Pick the analysis kind from a sequence of Directive records."""
    keywords = {d.keyword.lower() for d in directives}
    for kind in DETECTION_ORDER:
        if kind.keyword in keywords:
            return kind
    return DEFAULT_ANALYSIS


def detect_analysis_from_text(text) -> AnalysisKind:
    """Parse *text* and pick its analysis kind."""
    return detect_analysis(parse_netlist(text).directives)
