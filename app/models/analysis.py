"""
AnalysisKind - the analyses the control deck generator knows how to request.

Each kind carries the ngspice keyword used both as the netlist directive
(``.tran``) and as the interactive control command (``tran``), plus the
parameters substituted when the netlist names the analysis without any.
"""

from enum import Enum


class AnalysisKind(Enum):
    """Electrical analysis requested by a netlist."""

    TRANSIENT = "transient"
    AC = "ac"
    DC = "dc"
    OPERATING_POINT = "operating_point"
    NOISE = "noise"
    DISTORTION = "distortion"
    SENSITIVITY = "sensitivity"
    POLE_ZERO = "pole_zero"
    S_PARAMETER = "sp"

    @property
    def keyword(self) -> str:
        return _KEYWORDS[self]

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def default_parameters(self) -> str:
        return _DEFAULT_PARAMETERS[self]

    @property
    def output_file(self) -> str:
        """File name written by the generated ``write`` command."""
        return f"{self.keyword}_output.raw"

    @property
    def output_files(self) -> list[str]:
        """Candidate raw files to look for after a run, most specific first."""
        return [self.output_file, f"{_FILE_ALIASES[self]}.raw", "circuit.raw"]

    @classmethod
    def from_name(cls, name: str) -> "AnalysisKind":
        """Resolve a kind from its value, keyword or enum name (any case)."""
        wanted = name.strip().lower().replace("-", "_").replace(" ", "_")
        for kind in cls:
            if wanted in (kind.value, kind.keyword, kind.name.lower()):
                return kind
        raise ValueError(f"Unknown analysis kind: {name!r}")


_KEYWORDS = {
    AnalysisKind.TRANSIENT: "tran",
    AnalysisKind.AC: "ac",
    AnalysisKind.DC: "dc",
    AnalysisKind.OPERATING_POINT: "op",
    AnalysisKind.NOISE: "noise",
    AnalysisKind.DISTORTION: "disto",
    AnalysisKind.SENSITIVITY: "sens",
    AnalysisKind.POLE_ZERO: "pz",
    AnalysisKind.S_PARAMETER: "sp",
}

_LABELS = {
    AnalysisKind.TRANSIENT: "Transient",
    AnalysisKind.AC: "AC",
    AnalysisKind.DC: "DC",
    AnalysisKind.OPERATING_POINT: "Operating point",
    AnalysisKind.NOISE: "Noise",
    AnalysisKind.DISTORTION: "Distortion",
    AnalysisKind.SENSITIVITY: "Sensitivity",
    AnalysisKind.POLE_ZERO: "Pole-zero",
    AnalysisKind.S_PARAMETER: "S-parameter",
}

_DEFAULT_PARAMETERS = {
    AnalysisKind.TRANSIENT: "0.1m 5m",
    AnalysisKind.AC: "dec 10 1 100k",
    AnalysisKind.DC: "V1 0 5 0.1",
    AnalysisKind.OPERATING_POINT: "",
    AnalysisKind.NOISE: "V(out) V1 dec 10 1 100k",
    AnalysisKind.DISTORTION: "dec 10 1k 100k 1k V1",
    AnalysisKind.SENSITIVITY: "V(out)",
    AnalysisKind.POLE_ZERO: "V(out) V1 cur pol",
    AnalysisKind.S_PARAMETER: "2 1 0 V1 V(out)",
}

_FILE_ALIASES = {
    AnalysisKind.TRANSIENT: "transient",
    AnalysisKind.AC: "ac",
    AnalysisKind.DC: "dc",
    AnalysisKind.OPERATING_POINT: "op",
    AnalysisKind.NOISE: "noise",
    AnalysisKind.DISTORTION: "distortion",
    AnalysisKind.SENSITIVITY: "sensitivity",
    AnalysisKind.POLE_ZERO: "pz",
    AnalysisKind.S_PARAMETER: "sp",
}

# Most specific analyses first; the first one present in a netlist wins
DETECTION_ORDER = (
    AnalysisKind.NOISE,
    AnalysisKind.DISTORTION,
    AnalysisKind.SENSITIVITY,
    AnalysisKind.POLE_ZERO,
    AnalysisKind.S_PARAMETER,
    AnalysisKind.AC,
    AnalysisKind.DC,
    AnalysisKind.OPERATING_POINT,
    AnalysisKind.TRANSIENT,
)

DEFAULT_ANALYSIS = AnalysisKind.TRANSIENT

# Directive keywords stripped from a netlist before the control block is added
ANALYSIS_KEYWORDS = tuple(_KEYWORDS[k] for k in AnalysisKind)
