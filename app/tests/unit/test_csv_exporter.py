"""Tests for CSV export functionality."""

import csv
import io

from models.analysis import AnalysisKind
from models.result import SimulationResult, Trace
from simulation.csv_exporter import (
    export_op_results,
    export_result,
    export_trace_results,
    group_traces,
    write_csv,
)


def _rows(text):
    return list(csv.reader(io.StringIO(text)))


class TestExportOpResults:
    def test_preamble(self):
        rows = _rows(export_op_results({"V(1)": "1.000 V"}, circuit_name="Divider"))
        assert rows[0] == ["# Analysis Type", "Operating point"]
        assert rows[1][0] == "# Date"
        assert rows[2] == ["# Circuit", "Divider"]
        assert rows[3] == []

    def test_values_in_order(self):
        rows = _rows(export_op_results({"V(b)": "2.000 V", "V(a)": "1.000 V"}))
        assert rows[3] == ["Variable", "Value"]
        assert rows[4:] == [["V(b)", "2.000 V"], ["V(a)", "1.000 V"]]


class TestExportTraceResults:
    def test_shared_x_column(self):
        traces = [
            Trace(name="V(in)", x=(0.0, 1.0), y=(1.0, 2.0)),
            Trace(name="V(out)", x=(0.0, 1.0), y=(3.0, 4.0)),
        ]
        rows = _rows(export_trace_results(AnalysisKind.TRANSIENT, traces))
        assert rows[3] == ["Time (s)", "V(in)", "V(out)"]
        assert rows[4] == ["0.0", "1.0", "3.0"]
        assert rows[5] == ["1.0", "2.0", "4.0"]

    def test_separate_x_groups(self):
        traces = [
            Trace(name="A", x=(0.0,), y=(1.0,)),
            Trace(name="B", x=(5.0, 6.0), y=(2.0, 3.0)),
        ]
        assert len(group_traces(traces)) == 2
        rows = _rows(export_trace_results(AnalysisKind.AC, traces))
        assert rows[3] == ["Frequency (Hz)", "A"]
        assert rows[5] == []
        assert rows[6] == ["Frequency (Hz)", "B"]

    def test_unlabelled_kind(self):
        rows = _rows(export_trace_results(AnalysisKind.POLE_ZERO, [Trace(name="A", x=(0.0,), y=(1.0,))]))
        assert rows[3][0] == "x"


class TestExportResult:
    def test_operating_point_layout(self):
        result = SimulationResult(analysis_kind=AnalysisKind.OPERATING_POINT, scalar_values={"V(1)": "1.000 V"})
        assert "Variable,Value" in export_result(result)

    def test_visible_only(self):
        traces = (
            Trace(name="V(in)", x=(0.0,), y=(1.0,), visible=False),
            Trace(name="V(out)", x=(0.0,), y=(2.0,)),
        )
        result = SimulationResult(analysis_kind=AnalysisKind.DC, traces=traces)
        rows = _rows(export_result(result, visible_only=True))
        assert rows[3] == ["Sweep (V)", "V(out)"]


class TestWriteCsv:
    def test_writes_file(self, tmp_path):
        path = tmp_path / "out.csv"
        write_csv("a,b\n", str(path))
        assert path.read_text() == "a,b\n"
