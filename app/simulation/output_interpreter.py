"""
simulation/output_interpreter.py

Turns whatever ngspice left behind into a variable list and traces.

Variables are discovered from, in order: a raw-file header, V(...)/I(...)
tokens in free text, the parsed circuit, and finally a fixed default set.
Trace shapes always come from simulation.waveforms.
"""

import logging
import re
from dataclasses import replace
from typing import Mapping, Optional, Union

from models.analysis import AnalysisKind
from models.circuit import CircuitModel
from models.result import SimulationResult
from simulation.waveforms import synthesize

logger = logging.getLogger(__name__)

DEFAULT_VARIABLES = ("V(out)", "V(in)", "I(V1)")

_RAW_MARKERS = ("Title:", "Variables:")
_VARIABLE_TOKEN = re.compile(r"\b[vViI]\([^)]+\)")

OutputData = Union[bytes, bytearray, str]


def _decode(data: OutputData) -> str:
    if isinstance(data, (bytes, bytearray)):
        return bytes(data).decode("utf-8", errors="replace")
    return data


def _unique(names):
    seen = {}
    for name in names:
        seen.setdefault(name, None)
    return list(seen)


class OutputInterpreter:
    """Extracts variable names from ngspice output"""

    @staticmethod
    def is_raw_file(text):
        return any(marker in text for marker in _RAW_MARKERS)

    @staticmethod
    def parse_raw_variables(text, include_scale=False):
        """Variable names declared in a SPICE raw-file header.

        Header entries look like ``<index> <name> <type>``. Index 0 is the
        scale vector (time, frequency, sweep) and is skipped unless
        *include_scale* is set.
        """
        variables = []
        lines = text.split("\n")

        for i, line in enumerate(lines):
            if not line.strip().startswith("Variables:"):
                continue
            for entry in lines[i + 1:]:
                entry = entry.strip()
                if not entry or entry.startswith(("Values:", "Binary:")):
                    break
                parts = entry.split()
                if len(parts) < 2:
                    continue
                if parts[0] == "0" and not include_scale:
                    continue
                variables.append(parts[1])
            break

        return _unique(variables)

    @staticmethod
    def parse_text_variables(text):
        """Upper-cased, de-duplicated V(...) and I(...) tokens found in *text*."""
        return _unique(m.upper() for m in _VARIABLE_TOKEN.findall(text))

    @staticmethod
    def circuit_variables(circuit: Optional[CircuitModel]):
        """V(node) for each non-ground node, I(source) for each voltage source."""
        if circuit is None:
            return []
        variables = [f"V({node})" for node in circuit.signal_nodes]
        variables.extend(f"I({src.id})" for src in circuit.voltage_sources)
        return _unique(variables)

    @classmethod
    def variables_from_output(cls, data: OutputData, analysis_kind: AnalysisKind):
        """Variables from one output file; returns (variables, source_label)."""
        text = _decode(data)
        if cls.is_raw_file(text):
            include_scale = analysis_kind is AnalysisKind.OPERATING_POINT
            return cls.parse_raw_variables(text, include_scale=include_scale), "raw"
        return cls.parse_text_variables(text), "text"


def _ordered_outputs(outputs: Mapping[str, OutputData], analysis_kind: AnalysisKind):
    """Output entries in candidate-file order, then everything else."""
    ordered = [name for name in analysis_kind.output_files if name in outputs]
    ordered.extend(name for name in outputs if name not in ordered)
    return [(name, outputs[name]) for name in ordered]


def discover_variables(
    analysis_kind: AnalysisKind,
    outputs: Optional[Mapping[str, OutputData]] = None,
    circuit: Optional[CircuitModel] = None,
):
    """Resolve the variable list; returns (variables, source_label)."""
    for name, data in _ordered_outputs(outputs or {}, analysis_kind):
        try:
            variables, source = OutputInterpreter.variables_from_output(data, analysis_kind)
        except (TypeError, ValueError) as e:
            logger.warning("Could not read %s: %s", name, e)
            continue
        if variables:
            logger.info("Found %d variables in %s (%s)", len(variables), name, source)
            return variables, source

    variables = OutputInterpreter.circuit_variables(circuit)
    if variables:
        logger.info("No usable output files, derived %d variables from the netlist", len(variables))
        return variables, "netlist"

    logger.info("No variables found, using the default set")
    return list(DEFAULT_VARIABLES), "default"


def interpret_output(
    analysis_kind: AnalysisKind,
    outputs: Optional[Mapping[str, OutputData]] = None,
    circuit: Optional[CircuitModel] = None,
) -> SimulationResult:
    """Build a SimulationResult from engine output files (possibly none).

    Never raises for bad output: every path ends in a well-formed result.
    """
    variables, source = discover_variables(analysis_kind, outputs, circuit)
    result = synthesize(analysis_kind, variables)
    return replace(result, variable_source=source)
