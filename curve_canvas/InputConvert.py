# === SECTION: InputConvert [id: InputConvert]===
from __future__ import annotations

import math
from typing import Any, Type, TypeVar

import sympy as sp

T = TypeVar("T", int, float)


def InputConvert(
    obj: Any,
    dest_type: Type[T] = float,
    *,
    finite: bool = False,
    name: str = "value",
) -> T:
    """
    Convert a user-facing number (bound, width, node count) to `dest_type`.

    Supported destination types:
    - float
    - int (value must be an exact integer, e.g. 4.0 or "8/2")

    Rules:
    - bool is rejected (``True`` is never a valid bound or width).
    - Numbers are cast directly.
    - Strings are tried as plain floats first, then parsed by SymPy
      (so ``"pi/2"`` and ``"2*E"`` work as interval bounds).
    - Complex results are rejected.
    - With `finite=True`, NaN and infinities are rejected.

    Raises
    ------
    NotImplementedError
        If dest_type is unsupported.
    ValueError
        If conversion fails or violates the rules above. The message names
        the argument via `name`.
    """
    if dest_type not in (float, int):
        raise NotImplementedError(
            f"Unsupported destination type: {dest_type!r}. Only float and int are supported."
        )

    if isinstance(obj, bool):
        raise ValueError(f"{name} must be a number, got {obj!r}.")

    if isinstance(obj, (int, float)):
        value = float(obj)
    elif isinstance(obj, str):
        s = obj.strip()
        if s == "":
            raise ValueError(f"{name} cannot be an empty string.")
        try:
            value = float(s)
        except ValueError:
            try:
                evaluated = complex(sp.sympify(s).evalf())
            except Exception as e:
                raise ValueError(
                    f"Could not convert {name}={obj!r} to {dest_type.__name__} (neither directly nor via SymPy)."
                ) from e
            if evaluated.imag != 0:
                raise ValueError(f"{name}={obj!r} is not a real number.")
            value = evaluated.real
    else:
        try:
            value = float(obj)
        except Exception as e:
            raise ValueError(f"Could not convert {name}={obj!r} to {dest_type.__name__}.") from e

    if finite and not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {obj!r}.")

    if dest_type is int:
        if not value.is_integer():
            raise ValueError(f"{name} must be an integer, got {obj!r}.")
        return int(value)  # type: ignore[return-value]
    return value  # type: ignore[return-value]

# === END OF SECTION: InputConvert [id: InputConvert]===
