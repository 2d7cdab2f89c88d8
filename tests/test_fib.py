import io

import pytest

from nexusnode.fib import fibonacci, main, parse_inputs


def test_parse_inputs_all_given():
    assert parse_inputs(["10\n", "2\n", "3\n"]) == (10, 2, 3)


def test_parse_inputs_defaults_to_one():
    assert parse_inputs(["7"]) == (7, 1, 1)
    assert parse_inputs(["7", "abc", "-4"]) == (7, 1, 1)


def test_parse_inputs_trims_whitespace():
    assert parse_inputs(["  5  \n", " 9\n"]) == (5, 9, 1)


def test_parse_inputs_empty_raises():
    with pytest.raises(ValueError, match="No first input provided"):
        parse_inputs([])


@pytest.mark.parametrize("bad", ["x", "-1", "", "4294967296"])
def test_parse_inputs_bad_first_raises(bad):
    with pytest.raises(ValueError, match="Failed to parse first input as u32"):
        parse_inputs([bad])


def test_fibonacci_zero_steps_returns_second_init():
    assert fibonacci(0, 4, 9) == 9


def test_fibonacci_recurrence():
    for n in range(2, 30):
        assert fibonacci(n, 1, 1) == fibonacci(n - 1, 1, 1) + fibonacci(n - 2, 1, 1)


def test_fibonacci_one_step_is_sum():
    assert fibonacci(1, 3, 4) == 3 + 4


def test_fibonacci_wraps_at_32_bits():
    assert fibonacci(1, 0xFFFFFFFF, 1) == 0
    for n in range(0, 200, 13):
        assert 0 <= fibonacci(n, 1, 1) <= 0xFFFFFFFF


def test_main_prints_result(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("12\n2\n5\n"))
    assert main() == 0
    assert capsys.readouterr().out == f"{fibonacci(12, 2, 5)}\n"


def test_main_reports_error(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO(""))
    assert main([]) == 1
    assert "No first input provided" in capsys.readouterr().err