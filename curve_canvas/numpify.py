"""
numpify: compile a one-variable SymPy expression into a NumPy function
=====================================================================

Purpose
-------
Curves are sampled once per pixel column on every repaint, so evaluating them
through ``sympy.lambdify``-style per-point substitution is far too slow. This
module prints the expression with SymPy's ``NumPyPrinter`` into the body of a
tiny Python function and ``exec``s it once, giving a callable that accepts a
scalar or a whole array of ``x`` values.

Public API
----------
- :func:`numpify` (cached by default)
- :func:`numpify_cached`
- :class:`NumpifiedFunction`

Important gotchas
-----------------
- The argument is always converted with ``numpy.asarray(x, dtype=float)``, so
  integer inputs never hit integer division or overflow paths.
- Constant expressions (``5``, ``pi``) broadcast to the argument's shape.
- Expressions with any free symbol other than the variable, or with undefined
  functions such as ``G(x)``, are rejected with ``ValueError`` before code
  generation.
- Code generation uses ``exec``. Do not compile untrusted expressions.

Examples
--------
>>> import numpy as np
>>> import sympy as sp
>>> x = sp.Symbol("x")
>>> numpify(x**2 + 1, x)(np.array([0.0, 1.0, 2.0]))
array([1., 2., 5.])
>>> numpify(5, x)(np.zeros(3))
array([5., 5., 5.])

Logging
-------
Cache misses and compile timings are logged at DEBUG on
``logging.getLogger("curve_canvas.numpify")``.
"""

from __future__ import annotations

from functools import lru_cache
import logging
import textwrap
import time
from typing import Any, Callable, Dict, Optional

import numpy as np
import sympy as sp
from sympy.core.function import AppliedUndef
from sympy.printing.numpy import NumPyPrinter


__all__ = [
    "numpify",
    "numpify_cached",
    "NumpifiedFunction",
]


logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

_CACHE_SIZE = 256

# Name of the generated parameter. The user's symbol is renamed to it before
# printing, so symbol names never have to be valid Python identifiers.
_ARG = "_x"


class NumpifiedFunction:
    """A compiled ``f(x)`` plus the expression and source it came from."""

    __slots__ = ("_fn", "symbolic", "variable", "source")

    def __init__(
        self,
        fn: Callable[[Any], Any],
        symbolic: sp.Basic,
        variable: sp.Symbol,
        source: str,
    ) -> None:
        self._fn = fn
        self.symbolic = symbolic
        self.variable = variable
        self.source = source

    def __call__(self, x: Any) -> Any:
        return self._fn(x)

    def __repr__(self) -> str:
        return f"NumpifiedFunction({self.symbolic!r}, variable={self.variable})"


def _as_expression(expr: Any) -> sp.Basic:
    try:
        expr_sym = sp.sympify(expr)
    except (sp.SympifyError, TypeError) as exc:
        raise TypeError(f"numpify expects a SymPy-compatible expression, got {type(expr).__name__}") from exc
    if not isinstance(expr_sym, sp.Basic):
        raise TypeError(f"numpify expects a SymPy expression, got {type(expr_sym).__name__}")
    return expr_sym


def _resolve_variable(expr: sp.Basic, variable: Optional[sp.Symbol]) -> sp.Symbol:
    """Pick the argument symbol and check nothing else is free."""
    free = expr.free_symbols
    if variable is None:
        if len(free) > 1:
            names = ", ".join(sorted(s.name for s in free))
            raise ValueError(f"Expression has several free symbols ({names}); pass the variable explicitly.")
        return next(iter(free)) if free else sp.Symbol("x")
    if not isinstance(variable, sp.Symbol):
        raise TypeError(f"variable must be a SymPy Symbol, got {type(variable).__name__}")
    unbound = sorted(s.name for s in free if s != variable)
    if unbound:
        raise ValueError(
            f"Expression contains unbound symbols: {', '.join(unbound)}. Only {variable.name} may vary."
        )
    return variable


def _compile(expr: sp.Basic, variable: sp.Symbol) -> NumpifiedFunction:
    undefined = sorted({type(f).__name__ for f in expr.atoms(AppliedUndef)})
    if undefined:
        raise ValueError("Expression uses undefined function(s): " + ", ".join(undefined))

    log_debug = logger.isEnabledFor(logging.DEBUG)
    t0 = time.perf_counter()

    body = NumPyPrinter().doprint(expr.xreplace({variable: sp.Symbol(_ARG)}))
    t_print = time.perf_counter()

    lines = [
        f"def _generated({_ARG}):",
        f"    {_ARG} = numpy.asarray({_ARG}, dtype=float)",
    ]
    if expr.free_symbols:
        lines.append(f"    return {body}")
    else:
        lines.append(f"    return ({body}) + numpy.zeros({_ARG}.shape)")
    source = "\n".join(lines)

    namespace: Dict[str, Any] = {"numpy": np}
    exec(source, namespace)
    fn = namespace["_generated"]
    fn.__doc__ = textwrap.dedent(
        f"""
        Generated from {expr!r} in {variable.name}.

        {source}
        """
    ).strip()

    if log_debug:
        t_end = time.perf_counter()
        logger.debug(
            "numpify timings (ms): print=%.2f exec=%.2f total=%.2f",
            1000.0 * (t_print - t0),
            1000.0 * (t_end - t_print),
            1000.0 * (t_end - t0),
        )
    return NumpifiedFunction(fn, expr, variable, source)


@lru_cache(maxsize=_CACHE_SIZE)
def _compile_cached(expr: sp.Basic, variable: sp.Symbol) -> NumpifiedFunction:
    logger.debug("numpify_cached: cache MISS for %s", expr)
    return _compile(expr, variable)


def numpify_cached(expr: Any, variable: Optional[sp.Symbol] = None) -> NumpifiedFunction:
    """Like :func:`numpify`, memoised on ``(expression, variable)``.

    Compiled functions hold no state, so curves with equal expressions share
    one. Use ``numpify_cached.cache_clear()`` to drop every entry.
    """
    expr_sym = _as_expression(expr)
    return _compile_cached(expr_sym, _resolve_variable(expr_sym, variable))


numpify_cached.cache_info = _compile_cached.cache_info  # type: ignore[attr-defined]
numpify_cached.cache_clear = _compile_cached.cache_clear  # type: ignore[attr-defined]


def numpify(expr: Any, variable: Optional[sp.Symbol] = None, *, cache: bool = True) -> NumpifiedFunction:
    """Compile ``expr`` into a NumPy function of ``variable``.

    Parameters
    ----------
    expr:
        SymPy expression, or anything :func:`sympy.sympify` accepts.
    variable:
        The argument symbol. Defaults to the expression's only free symbol
        (or ``x`` for constants).
    cache:
        Reuse a previously compiled function for an equal expression.

    Raises
    ------
    TypeError
        If ``expr`` is not SymPy-compatible or ``variable`` is not a Symbol.
    ValueError
        If other symbols are free or the expression uses undefined functions.
    """
    if cache:
        return numpify_cached(expr, variable)
    expr_sym = _as_expression(expr)
    return _compile(expr_sym, _resolve_variable(expr_sym, variable))
