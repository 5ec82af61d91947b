"""
simulation/waveforms.py

Deterministic stand-in waveforms for when no numeric results are available.

None of this is circuit physics. Each synthesizer turns a list of variable
names into plot-ready shapes keyed only by the analysis kind and the name:
voltages whose name mentions ``in`` are treated as the stimulus, other
voltages as a filtered response, and currents get their own curve.
A real solver can replace any synthesizer without touching the parser or
the control deck generator.
"""

import zlib
from abc import ABC, abstractmethod
from typing import Optional

import numpy as np

from models.analysis import AnalysisKind
from models.result import SimulationResult, Trace

# Transient window: 100 samples at 50 us covers 0 .. 5 ms
TRANSIENT_SAMPLES = 100
TRANSIENT_STEP = 0.05e-3
SIGNAL_FREQUENCY = 1000.0
DECAY_TIME_CONSTANT = 1e-3
CURRENT_AMPLITUDE = 1e-3

# AC sweep: 100 log-spaced points, 1 Hz .. 100 kHz, corner at 1 kHz
AC_SAMPLES = 100
AC_START_DECADE = 0
AC_STOP_DECADE = 5
CORNER_FREQUENCY = 1000.0

# DC sweep: 51 points, 0 .. 5 V
DC_SAMPLES = 51
DC_STOP = 5.0
DIVIDER_RATIO = 0.8
SWEEP_RESISTANCE = 1000.0

# Operating point value ranges
OP_VOLTAGE_RANGE = 5.0
OP_CURRENT_RANGE = 0.01


def is_current(name: str) -> bool:
    """True for ``I(...)`` names and ngspice source-current vectors (``v1#branch``)."""
    upper = name.strip().upper()
    return upper.startswith("I(") or upper.endswith("#BRANCH")


def is_voltage(name: str) -> bool:
    return name.strip().upper().startswith("V(")


def is_input(name: str) -> bool:
    """True for variables treated as the circuit's stimulus."""
    return "in" in name.lower()


def stable_unit_value(name: str) -> float:
    """Pseudo-random value in [0, 1) that depends only on *name*."""
    rng = np.random.default_rng(zlib.crc32(name.encode("utf-8")))
    return float(rng.random())


def _to_tuple(values) -> tuple:
    return tuple(float(v) for v in values)


class WaveformSynthesizer(ABC):
    """Produces a SimulationResult for one analysis kind from variable names."""

    kind: AnalysisKind = AnalysisKind.TRANSIENT

    def synthesize(self, variables, kind: Optional[AnalysisKind] = None) -> SimulationResult:
        kind = kind or self.kind
        variables = tuple(variables)
        return SimulationResult(
            analysis_kind=kind,
            variables=variables,
            traces=tuple(self.traces(variables)),
            scalar_values=self.scalar_values(variables),
            message=f"{kind.label} analysis completed with {len(variables)} variables",
        )

    @abstractmethod
    def traces(self, variables) -> list[Trace]:
        """Return one trace per variable (or none for scalar analyses)."""

    def scalar_values(self, variables) -> Optional[dict[str, str]]:
        return None


class TransientSynthesizer(WaveformSynthesizer):
    """1 kHz sine stimulus, exponentially damped responses."""

    kind = AnalysisKind.TRANSIENT

    @staticmethod
    def time_points():
        return np.arange(TRANSIENT_SAMPLES) * TRANSIENT_STEP

    def traces(self, variables):
        t = self.time_points()
        omega = 2 * np.pi * SIGNAL_FREQUENCY
        traces = []
        for index, name in enumerate(variables):
            if is_current(name):
                y = CURRENT_AMPLITUDE * np.sin(omega * t + index * np.pi / 4)
            elif is_input(name):
                y = np.sin(omega * t)
            else:
                y = np.sin(omega * t) * np.exp(-t / DECAY_TIME_CONSTANT)
            traces.append(Trace(name=name, x=_to_tuple(t), y=_to_tuple(y)))
        return traces


class AcSynthesizer(WaveformSynthesizer):
    """Flat input, single-pole low-pass outputs, steeper current roll-off (dB)."""

    kind = AnalysisKind.AC

    @staticmethod
    def frequencies():
        return np.logspace(AC_START_DECADE, AC_STOP_DECADE, AC_SAMPLES)

    def traces(self, variables):
        f = self.frequencies()
        ratio = f / CORNER_FREQUENCY
        traces = []
        for name in variables:
            if is_current(name):
                y = -40 * np.log10(ratio) - 20
            elif is_input(name):
                y = np.zeros_like(f)
            else:
                y = -20 * np.log10(np.sqrt(1 + ratio**2))
            traces.append(Trace(name=name, x=_to_tuple(f), y=_to_tuple(y)))
        return traces


class DcSynthesizer(WaveformSynthesizer):
    """Input follows the sweep, outputs sit on a fixed divider, currents obey 1k."""

    kind = AnalysisKind.DC

    @staticmethod
    def sweep_points():
        return np.linspace(0.0, DC_STOP, DC_SAMPLES)

    def traces(self, variables):
        v = self.sweep_points()
        traces = []
        for name in variables:
            if is_current(name):
                y = v / SWEEP_RESISTANCE
            elif is_input(name):
                y = v
            else:
                y = v * DIVIDER_RATIO
            traces.append(Trace(name=name, x=_to_tuple(v), y=_to_tuple(y)))
        return traces


class OperatingPointSynthesizer(WaveformSynthesizer):
    """No traces; one formatted scalar per variable."""

    kind = AnalysisKind.OPERATING_POINT

    def traces(self, variables):
        return []

    def scalar_values(self, variables):
        values = {}
        for name in variables:
            unit = stable_unit_value(name)
            if is_current(name):
                values[name] = f"{unit * OP_CURRENT_RANGE:.6f} A"
            else:
                values[name] = f"{unit * OP_VOLTAGE_RANGE:.3f} V"
        return values


_SYNTHESIZERS = {
    AnalysisKind.TRANSIENT: TransientSynthesizer(),
    AnalysisKind.AC: AcSynthesizer(),
    AnalysisKind.DC: DcSynthesizer(),
    AnalysisKind.OPERATING_POINT: OperatingPointSynthesizer(),
}


def synthesizer_for(kind: AnalysisKind) -> WaveformSynthesizer:
    """Return the synthesizer for *kind*; kinds without one get time-domain shapes."""
    return _SYNTHESIZERS.get(kind, _SYNTHESIZERS[AnalysisKind.TRANSIENT])


def synthesize(kind: AnalysisKind, variables) -> SimulationResult:
    return synthesizer_for(kind).synthesize(variables, kind)
