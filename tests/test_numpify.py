from __future__ import annotations

import logging

import numpy as np
import pytest
import sympy as sp

from curve_canvas.numpify import NumpifiedFunction, numpify, numpify_cached


def test_numpify_uses_cache_by_default() -> None:
    x = sp.Symbol("x")
    numpify_cached.cache_clear()

    f1 = numpify(x + 1, x)
    f2 = numpify(x + 1, x)

    assert f1 is f2
    assert numpify_cached.cache_info().hits >= 1


def test_numpify_cache_false_forces_recompile() -> None:
    x = sp.Symbol("x")

    f1 = numpify(x + 1, x, cache=False)
    f2 = numpify(x + 1, x, cache=False)

    assert f1 is not f2


def test_vectorized_evaluation() -> None:
    x = sp.Symbol("x")
    f = numpify(sp.sin(x) + x**2, x)
    xs = np.array([0.0, 1.0, 2.0])
    np.testing.assert_allclose(f(xs), np.sin(xs) + xs**2)


def test_integer_inputs_are_treated_as_floats() -> None:
    x = sp.Symbol("x")
    f = numpify(1 / x, x, cache=False)
    np.testing.assert_allclose(f(np.array([2, 4])), [0.5, 0.25])


def test_constants_broadcast_to_argument_shape() -> None:
    x = sp.Symbol("x")
    f = numpify(sp.pi, x)
    out = f(np.zeros(4))
    assert out.shape == (4,)
    assert np.allclose(out, np.pi)
    assert float(f(1.0)) == pytest.approx(np.pi)


def test_metadata() -> None:
    x = sp.Symbol("x")
    f = numpify(2 * x, cache=False)
    assert isinstance(f, NumpifiedFunction)
    assert f.variable == x
    assert "def _generated(_x)" in f.source
    assert repr(f) == "NumpifiedFunction(2*x, variable=x)"


def test_symbol_names_need_not_be_identifiers() -> None:
    lam = sp.Symbol("lambda")
    odd = sp.Symbol("x-1")
    assert numpify(lam + 1, lam, cache=False)(1.0) == pytest.approx(2.0)
    assert numpify(2 * odd, odd, cache=False)(3.0) == pytest.approx(6.0)


def test_unbound_symbols_are_rejected() -> None:
    x, y = sp.symbols("x y")
    with pytest.raises(ValueError, match="unbound symbols: y"):
        numpify(x + y, x, cache=False)
    with pytest.raises(ValueError, match="several free symbols"):
        numpify(x + y, cache=False)


def test_undefined_functions_are_rejected() -> None:
    x = sp.Symbol("x")
    g = sp.Function("G")
    with pytest.raises(ValueError, match="undefined function"):
        numpify(g(x), x, cache=False)


def test_variable_must_be_a_symbol() -> None:
    with pytest.raises(TypeError, match="Symbol"):
        numpify(sp.Integer(1), "x", cache=False)  # type: ignore[arg-type]


def test_debug_logging_reports_timings(caplog) -> None:
    x = sp.Symbol("x")
    with caplog.at_level(logging.DEBUG, logger="curve_canvas.numpify"):
        numpify(x**3 - 1, x, cache=False)
    assert any("numpify timings" in rec.getMessage() for rec in caplog.records)
