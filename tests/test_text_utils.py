import math

from billscan.services.parsing.text_utils import round_half_up, segment_lines, to_amount


def test_segment_lines_trims_and_drops_blanks():
    assert segment_lines("  Sharma Traders \n\n\t\nRice 10 800  \n") == ["Sharma Traders", "Rice 10 800"]
    assert segment_lines("") == []


def test_to_amount():
    assert to_amount("1,250.50") == 1250.5
    assert to_amount("80") == 80
    assert to_amount("abc") == 0.0
    assert to_amount(None) == 0.0
    assert to_amount("9" * 400) == 0.0


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(4.4) == 4
    assert round_half_up(0.125, 2) == 0.13
    assert round_half_up(80.0, 2) == 80.0
    assert round_half_up(math.inf) == 0.0
    assert round_half_up(math.nan) == 0.0
