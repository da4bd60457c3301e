import numpy as np
import pytest

from waveplot.channel import DEFAULT_SAMPLE_INTERVAL_SEC
from waveplot.errors import InvalidIntervalError
from waveplot.timebase import Timebase, format_interval, parse_interval, validate_interval


def test_time_vector_length_and_values():
    vec = Timebase(0.001).time_vector(5)
    np.testing.assert_allclose(vec, np.array([0.0, 0.001, 0.002, 0.003, 0.004]))


def test_time_vector_empty_when_n_zero():
    assert Timebase().time_vector(0).size == 0
    assert Timebase().time_vector(-2).size == 0


def test_default_interval():
    assert Timebase().sample_interval_s == DEFAULT_SAMPLE_INTERVAL_SEC


@pytest.mark.parametrize("value", [0.0, -1e-3, float("nan"), float("inf"), "abc", None])
def test_invalid_intervals_raise(value):
    with pytest.raises(InvalidIntervalError):
        validate_interval(value)
    with pytest.raises(InvalidIntervalError):
        Timebase(value)


def test_parse_interval():
    assert parse_interval("0.002") == 0.002
    assert parse_interval(" 2.5e-5 ") == 2.5e-5
    for text in ("", "0", "-0.001", "0,001", "1ms", "nan"):
        with pytest.raises(InvalidIntervalError):
            parse_interval(text)


def test_format_interval_six_significant_digits():
    assert format_interval(0.001) == "0.001"
    assert format_interval(2.5e-5) == "2.5e-05"
    assert format_interval(0.1234567) == "0.123457"


def test_interval_too_large_for_float():
    with pytest.raises(InvalidIntervalError):
        validate_interval(10**400)
