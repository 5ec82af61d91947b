"""
simulation/csv_exporter.py

Export simulation results to CSV format.
"""

import csv
import io
from datetime import datetime

from models.analysis import AnalysisKind

X_LABELS = {
    AnalysisKind.TRANSIENT: "Time (s)",
    AnalysisKind.AC: "Frequency (Hz)",
    AnalysisKind.DC: "Sweep (V)",
    AnalysisKind.NOISE: "Frequency (Hz)",
}


def _write_preamble(writer, analysis_label, circuit_name=""):
    writer.writerow(["# Analysis Type", analysis_label])
    writer.writerow(["# Date", datetime.now().strftime("%Y-%m-%d %H:%M:%S")])
    if circuit_name:
        writer.writerow(["# Circuit", circuit_name])
    writer.writerow([])


def group_traces(traces):
    """Group traces that share the same x samples, keeping first-seen order."""
    groups = []
    for trace in traces:
        for group in groups:
            if group[0].x == trace.x:
                group.append(trace)
                break
        else:
            groups.append([trace])
    return groups


def export_op_results(scalar_values, circuit_name=""):
    """
    Export operating point values to CSV string.

    Args:
        scalar_values: dict mapping variable name -> formatted value
        circuit_name: optional circuit title

    Returns:
        str: CSV content
    """
    output = io.StringIO()
    writer = csv.writer(output)
    _write_preamble(writer, AnalysisKind.OPERATING_POINT.label, circuit_name)

    writer.writerow(["Variable", "Value"])
    for name, value in scalar_values.items():
        writer.writerow([name, value])

    return output.getvalue()


def export_trace_results(analysis_kind, traces, circuit_name=""):
    """
    Export traces to CSV string.

    Traces sharing an x axis are written side by side under one x column;
    each further x axis starts a new block after a blank row.
    """
    output = io.StringIO()
    writer = csv.writer(output)
    _write_preamble(writer, analysis_kind.label, circuit_name)

    x_label = X_LABELS.get(analysis_kind, "x")
    for index, group in enumerate(group_traces(traces)):
        if index:
            writer.writerow([])
        writer.writerow([x_label] + [t.name for t in group])
        for i, x in enumerate(group[0].x):
            writer.writerow([x] + [t.y[i] for t in group])

    return output.getvalue()


def export_result(result, circuit_name="", visible_only=False):
    """Export a SimulationResult, choosing the layout by its content."""
    if result.scalar_values is not None:
        return export_op_results(result.scalar_values, circuit_name)
    traces = [t for t in result.traces if t.visible] if visible_only else list(result.traces)
    return export_trace_results(result.analysis_kind, traces, circuit_name)


def write_csv(csv_content, filepath):
    """
    Write CSV content string to a file.

    Args:
        csv_content: str from one of the export_* functions
        filepath: path to write to
    """
    with open(filepath, "w", newline="") as f:
        f.write(csv_content)
