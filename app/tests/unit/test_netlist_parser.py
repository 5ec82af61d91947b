"""Tests for the SPICE netlist parser."""

from unittest.mock import patch

import pytest
from models.analysis import AnalysisKind
from models.component import ComponentKind
from models.directive import ModelCard
from simulation.analysis_detector import detect_analysis
from simulation.netlist_parser import (
    classify_lines,
    extract_source_value,
    parse_component_line,
    parse_directive_line,
    parse_model_line,
    parse_netlist,
)

# ── Line classifier ───────────────────────────────────────────────────


class TestClassifyLines:
    def test_first_line_is_title(self):
        title, lines = classify_lines("My Circuit\nR1 1 0 1k\n")
        assert title == "My Circuit"
        assert [l.text for l in lines] == ["R1 1 0 1k"]

    def test_comments_and_blanks_dropped(self):
        title, lines = classify_lines("T\n\n* comment\n   \nR1 1 0 1k\n")
        assert [l.text for l in lines] == ["R1 1 0 1k"]

    def test_leading_comment_is_not_title(self):
        title, _ = classify_lines("* header comment\nReal Title\nR1 1 0 1k")
        assert title == "Real Title"

    def test_end_line_dropped(self):
        _, lines = classify_lines("T\nR1 1 0 1k\n.END\n")
        assert [l.text for l in lines] == ["R1 1 0 1k"]

    def test_ends_is_not_end(self):
        _, lines = classify_lines("T\n.ends\n")
        assert [l.text for l in lines] == [".ends"]

    def test_line_numbers_refer_to_raw_text(self):
        _, lines = classify_lines("T\n\n* c\nR1 1 0 1k\n")
        assert lines[0].number == 4

    def test_lines_are_trimmed(self):
        _, lines = classify_lines("T\n   R1 1 0 1k   \n")
        assert lines[0].text == "R1 1 0 1k"

    def test_empty_text(self):
        assert classify_lines("") == ("", [])


# ── Source values ─────────────────────────────────────────────────────


class TestExtractSourceValue:
    def test_dc_value(self):
        assert extract_source_value("V1 in 0 DC 5".split()) == "5"

    def test_dc_is_case_insensitive(self):
        assert extract_source_value("V1 in 0 dc 3.3".split()) == "3.3"

    def test_ac_value(self):
        assert extract_source_value("V1 in 0 AC 1".split()) == "1"

    def test_dc_wins_over_ac(self):
        assert extract_source_value("V1 in 0 AC 1 DC 2".split()) == "2"

    def test_sine_literal_kept_verbatim(self):
        assert extract_source_value("V1 in 0 SIN(0 1 1k)".split()) == "SIN(0 1 1k)"

    def test_pulse_literal(self):
        tokens = "V1 in 0 PULSE(0 5 0 1n 1n 1m 2m)".split()
        assert extract_source_value(tokens) == "PULSE(0 5 0 1n 1n 1m 2m)"

    def test_plain_value_fallback(self):
        assert extract_source_value("V1 in 0 12".split()) == "12"

    def test_dc_wins_over_ac_and_waveform(self):
        assert extract_source_value("V1 in 0 DC 0 AC 1 SIN(0 1 1k)".split()) == "0"


# ── Component records ─────────────────────────────────────────────────


class TestParseComponentLine:
    def test_resistor(self):
        comp = parse_component_line("R1 in out 1k")
        assert comp.id == "R1"
        assert comp.kind is ComponentKind.RESISTOR
        assert comp.nodes == ("in", "out")
        assert comp.value == "1k"

    def test_lowercase_prefix(self):
        assert parse_component_line("c1 out 0 1u").kind is ComponentKind.CAPACITOR

    def test_inductor(self):
        assert parse_component_line("L1 a b 10m").value == "10m"

    def test_too_few_tokens_dropped(self):
        assert parse_component_line("R1 in out") is None

    def test_unknown_prefix_dropped(self):
        assert parse_component_line("Z1 a b c") is None

    def test_voltage_source_value(self):
        comp = parse_component_line("V1 in 0 DC 5")
        assert comp.kind is ComponentKind.VOLTAGE_SOURCE
        assert comp.value == "5"

    def test_current_source(self):
        comp = parse_component_line("I1 0 n1 1m")
        assert comp.kind is ComponentKind.CURRENT_SOURCE
        assert comp.nodes == ("0", "n1")

    def test_diode(self):
        comp = parse_component_line("D1 a k 1N4148")
        assert comp.model == "1N4148"
        assert comp.value is None

    def test_bjt_three_nodes(self):
        comp = parse_component_line("Q1 c b e 2N2222")
        assert comp.nodes == ("c", "b", "e")
        assert comp.model == "2N2222"

    def test_bjt_with_substrate(self):
        comp = parse_component_line("Q1 c b e s 2N2222")
        assert comp.nodes == ("c", "b", "e", "s")
        assert comp.model == "2N2222"

    def test_bjt_too_short(self):
        assert parse_component_line("Q1 c b e") is None

    def test_jfet(self):
        comp = parse_component_line("J1 d g s J2N3819")
        assert comp.nodes == ("d", "g", "s")
        assert comp.model == "J2N3819"

    def test_mosfet_parameter_pairs(self):
        comp = parse_component_line("M1 d g s b NMOS W 1u L 2u")
        assert comp.nodes == ("d", "g", "s", "b")
        assert comp.model == "NMOS"
        assert comp.parameters == {"W": "1u", "L": "2u"}

    def test_mosfet_equals_parameters(self):
        comp = parse_component_line("M1 d g s b NMOS W=1u L=2u")
        assert comp.parameters == {"W": "1u", "L": "2u"}

    def test_mosfet_trailing_name_dropped(self):
        comp = parse_component_line("M1 d g s b NMOS W 1u L")
        assert comp.parameters == {"W": "1u"}

    def test_mosfet_without_parameters_dropped(self):
        assert parse_component_line("M1 d g s b NMOS") is None

    @pytest.mark.parametrize(
        "line, kind",
        [
            ("E1 out 0 in 0 10", ComponentKind.VCVS),
            ("F1 out 0 in 0 10", ComponentKind.CCCS),
            ("G1 out 0 in 0 10", ComponentKind.VCCS),
            ("H1 out 0 in 0 10", ComponentKind.CCVS),
        ],
    )
    def test_controlled_sources(self, line, kind):
        comp = parse_component_line(line)
        assert comp.kind is kind
        assert comp.nodes == ("out", "0", "in", "0")
        assert comp.value == "10"

    def test_controlled_source_too_short(self):
        assert parse_component_line("E1 out 0 in 0") is None


# ── Directives and models ─────────────────────────────────────────────


class TestParseDirectives:
    def test_tran(self):
        d = parse_directive_line(".tran 0.1m 5m")
        assert d.kind == "tran"
        assert d.parameters == "0.1m 5m"

    def test_keyword_case_insensitive(self):
        assert parse_directive_line(".AC dec 10 1 100k").kind == "ac"

    def test_op_without_parameters(self):
        d = parse_directive_line(".op")
        assert d.kind == "op"
        assert d.parameters == ""

    def test_unknown_keeps_whole_line(self):
        d = parse_directive_line(".param R=1k")
        assert d.kind == "unknown"
        assert d.parameters == ".param R=1k"
        assert d.keyword == "param"

    def test_options_is_not_op(self):
        d = parse_directive_line(".options reltol=1e-4")
        assert d.kind == "unknown"

    def test_model_line_routes_to_model_card(self):
        m = parse_directive_line(".model 1N4148 D (Is=2.52n)")
        assert isinstance(m, ModelCard)
        assert m.name == "1N4148"
        assert m.type == "D"
        assert m.parameters == "(Is=2.52n)"

    def test_short_model_line(self):
        assert parse_model_line(".model X") is None


# ── Circuit model builder ─────────────────────────────────────────────


class TestParseNetlist:
    def test_rc_lowpass(self, rc_lowpass):
        circuit = parse_netlist(rc_lowpass)
        assert circuit.title == "RC Low-pass Filter"
        assert [c.id for c in circuit.components] == ["V1", "R1", "C1"]
        assert circuit.components[0].value == "SIN(0 1 1k)"
        assert len(circuit.directives) == 1
        assert circuit.directives[0].kind == "tran"
        assert not circuit.has_errors

    def test_connections_follow_component_order(self, rc_lowpass):
        circuit = parse_netlist(rc_lowpass)
        triples = [(c.component_id, c.node_name, c.pin_index) for c in circuit.connections]
        assert triples == [
            ("V1", "in", 0),
            ("V1", "0", 1),
            ("R1", "in", 0),
            ("R1", "out", 1),
            ("C1", "out", 0),
            ("C1", "0", 1),
        ]

    def test_node_names(self, rc_lowpass):
        circuit = parse_netlist(rc_lowpass)
        assert circuit.node_names == ["in", "0", "out"]
        assert circuit.signal_nodes == ["in", "out"]

    def test_models_collected(self):
        circuit = parse_netlist("T\nD1 a 0 DMOD\n.model DMOD D\n")
        assert [m.name for m in circuit.models] == ["DMOD"]
        assert circuit.directives == ()

    def test_malformed_lines_are_silently_dropped(self):
        circuit = parse_netlist("T\nR1 a\nZ9 x y z\nR2 a 0 1k\n")
        assert [c.id for c in circuit.components] == ["R2"]
        assert circuit.errors == ()

    def test_empty_input(self):
        circuit = parse_netlist("")
        assert circuit.title == ""
        assert circuit.components == ()
        assert circuit.errors == ()

    def test_none_input(self):
        assert parse_netlist(None).components == ()

    def test_bytes_input(self):
        circuit = parse_netlist(b"T\nR1 1 0 1k\n")
        assert circuit.components[0].id == "R1"

    def test_binary_garbage(self):
        circuit = parse_netlist(b"\xff\xfe\x00\x01\n\x80\x81\x82 \x00\n\xc3\x28\xa0\n")
        assert circuit.components == ()
        assert circuit.errors == ()

    def test_whitespace_only(self):
        circuit = parse_netlist("   \n\t\n  ")
        assert circuit.components == ()
        assert circuit.errors == ()

    def test_filter_without_source(self):
        circuit = parse_netlist("Title\nR1 in out 1k\nC1 out 0 1u\n.tran 0.1m 5m\n.end")
        assert [(c.id, c.kind, c.nodes, c.value) for c in circuit.components] == [
            ("R1", ComponentKind.RESISTOR, ("in", "out"), "1k"),
            ("C1", ComponentKind.CAPACITOR, ("out", "0"), "1u"),
        ]
        assert len(circuit.connections) == 4
        assert circuit.errors == ()
        assert detect_analysis(circuit.directives) is AnalysisKind.TRANSIENT

    def test_source_with_dc_ac_and_waveform(self):
        circuit = parse_netlist("T\nV1 in 0 DC 0 AC 1 SIN(0 1 1k)\n")
        source = circuit.components[0]
        assert source.nodes == ("in", "0")
        assert source.value == "0"

    def test_title_only(self):
        circuit = parse_netlist("Only a title")
        assert circuit.title == "Only a title"
        assert circuit.components == ()

    def test_unexpected_failure_becomes_parse_error(self):
        original = parse_component_line

        def flaky(line):
            if line.startswith("R2"):
                raise ValueError("boom")
            return original(line)

        with patch("simulation.netlist_parser.parse_component_line", side_effect=flaky):
            circuit = parse_netlist("T\nR1 a 0 1k\nR2 a 0 2k\nR3 a 0 3k\n")

        assert [c.id for c in circuit.components] == ["R1", "R3"]
        assert len(circuit.errors) == 1
        err = circuit.errors[0]
        assert err.line == 3
        assert err.message == "boom"
        assert err.text == "R2 a 0 2k"

    def test_reparse_is_deterministic(self, rc_lowpass):
        assert parse_netlist(rc_lowpass) == parse_netlist(rc_lowpass)
