from __future__ import annotations

import logging
import math

import pytest

from curve_canvas.errors import InvalidIntervalError
from curve_canvas.expression import CallableExpression, SympyExpressionEvaluator
from curve_canvas.quadrature import METHODS, integrate, integrate_detailed


def _compile(text: str):
    return SympyExpressionEvaluator().compile(text)


@pytest.mark.parametrize("method", ["simpson", "trapezoidal", "midpoint"])
def test_parabola_integral(method: str) -> None:
    assert abs(integrate(_compile("x^2"), 0, 3, method, 1000) - 9) < 1e-3


def test_simpson_is_exact_for_cubics() -> None:
    assert integrate(_compile("x^3 - x"), -1, 2, "simpson", 10) == pytest.approx(2.25, abs=1e-12)


def test_adaptive_quad_matches_closed_form() -> None:
    value = integrate(_compile("exp(-x) * sin(x)"), 0, math.pi, "quad")
    expected = (1 + math.exp(-math.pi)) / 2
    assert value == pytest.approx(expected, rel=1e-8)


def test_simpson_rounds_odd_n_up() -> None:
    result = integrate_detailed(_compile("x"), 0, 1, "simpson", 5)
    assert result.n == 6
    assert result.method == "simpson"
    assert result.value == pytest.approx(0.5)


def test_method_names_are_normalised() -> None:
    assert integrate(_compile("1"), 0, 2, " Trapezoidal ") == pytest.approx(2.0)


def test_unknown_method_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown integration method"):
        integrate(_compile("x"), 0, 1, "romberg")
    assert "simpson" in METHODS


@pytest.mark.parametrize("n", [0, -3, 2.5, "many"])
def test_bad_interval_count(n) -> None:
    with pytest.raises(ValueError):
        integrate(_compile("x"), 0, 1, "midpoint", n)


@pytest.mark.parametrize("a, b", [(1, 1), (2, 1), (float("nan"), 1), (0, float("inf"))])
def test_invalid_interval_raises_before_evaluation(a, b) -> None:
    calls: list[float] = []
    f = CallableExpression(lambda x: calls.append(x) or x)
    with pytest.raises(InvalidIntervalError):
        integrate(f, a, b)
    assert calls == []


def test_undefined_nodes_count_as_zero_and_are_reported(caplog) -> None:
    # 1/x is undefined at the midpoint node x = 0 of the trapezoidal grid.
    with caplog.at_level(logging.INFO, logger="curve_canvas.quadrature"):
        result = integrate_detailed(_compile("1/x"), -1, 1, "trapezoidal", 10)
    assert result.failed_nodes == 1
    assert result.value == pytest.approx(0.0, abs=1e-12)
    assert any("undefined node" in rec.getMessage() for rec in caplog.records)


def test_midpoint_avoids_endpoint_singularity() -> None:
    result = integrate_detailed(_compile("1/sqrt(x)"), 0, 1, "midpoint", 10000)
    assert result.failed_nodes == 0
    assert result.value == pytest.approx(2.0, abs=0.05)


def test_string_bounds_are_accepted() -> None:
    assert integrate(_compile("sin(x)"), "0", "pi") == pytest.approx(2.0, abs=1e-9)
