"""Validators shared by parameter creation, transform options and ``process``.

Every validator either returns quietly or raises one of the exceptions in
:mod:`torchcqt.validation.exceptions`. Comparisons are written so that NaN
always fails a bound.

Examples
--------
>>> from torchcqt.validation import validate_range, validate_tensor_ndim
>>> validate_range(64, "chunk_size", min_value=1)
>>> validate_range(0, "chunk_size", min_value=1)
Traceback (most recent call last):
    ...
torchcqt.validation.exceptions.InvalidRangeError: ...
>>> validate_tensor_ndim(torch.zeros(2, 44100), "samples", expected_ndim=(1, 2))

"""

from __future__ import annotations

import math
from collections.abc import Sequence
from numbers import Integral, Real
from typing import Any, TypeVar

from torch import Tensor

from torchcqt.validation.exceptions import (
    InvalidParameterError,
    InvalidRangeError,
    InvalidShapeError,
    InvalidTypeError,
)

T = TypeVar("T", int, float)

#: Common audio sample rates, for reference in messages and tests
COMMON_SAMPLE_RATES = (
    8000,
    11025,
    16000,
    22050,
    44100,
    48000,
    88200,
    96000,
    176400,
    192000,
)


# =============================================================================
# Numeric bounds
# =============================================================================


def validate_range(
    value: T,
    parameter_name: str,
    *,
    min_value: T | None = None,
    max_value: T | None = None,
    min_inclusive: bool = True,
    max_inclusive: bool = True,
) -> None:
    """Check that ``value`` lies between ``min_value`` and ``max_value``.

    Parameters
    ----------
    value : int | float
        Value to check.
    parameter_name : str
        Name reported in the error.
    min_value, max_value : int | float | None, optional
        Bounds; None leaves that side open.
    min_inclusive, max_inclusive : bool, optional
        Whether each bound itself is allowed. Both default to True.

    Raises
    ------
    InvalidRangeError
        If a bound is violated or ``value`` is NaN and any bound is set.

    """
    ok = True
    if min_value is not None:
        ok = value >= min_value if min_inclusive else value > min_value
    if ok and max_value is not None:
        ok = value <= max_value if max_inclusive else value < max_value

    if not ok:
        raise InvalidRangeError(
            parameter_name=parameter_name,
            actual_value=value,
            min_value=min_value,
            max_value=max_value,
            min_inclusive=min_inclusive,
            max_inclusive=max_inclusive,
        )


def validate_positive(
    value: T,
    parameter_name: str,
    *,
    allow_zero: bool = False,
) -> None:
    """Check that ``value > 0`` (``>= 0`` with ``allow_zero``).

    >>> validate_positive(512, "hop_size")
    >>> validate_positive(0, "hop_size", allow_zero=True)

    """
    validate_range(value, parameter_name, min_value=0, min_inclusive=allow_zero)


def validate_in_set(
    value: Any,
    parameter_name: str,
    valid_values: Sequence[Any],
) -> None:
    """Check that ``value`` is one of ``valid_values``.

    Raises
    ------
    InvalidParameterError
        Listing the allowed values.

    Examples
    --------
    >>> validate_in_set("l2", "norm", ("l1", "l2"))

    """
    if value not in valid_values:
        raise InvalidParameterError(
            message=f"Invalid value for {parameter_name}",
            parameter_name=parameter_name,
            actual_value=value,
            expected=f"one of {list(valid_values)}",
        )


# =============================================================================
# Types
# =============================================================================


def is_integral(value: Any) -> bool:
    """Return True for ints and integral-valued finite reals (``4096.0``), False for bools."""
    if isinstance(value, bool):
        return False
    if isinstance(value, Integral):
        return True
    if isinstance(value, Real):
        as_float = float(value)
        return math.isfinite(as_float) and as_float.is_integer()
    return False


def validate_integer(value: Any, parameter_name: str) -> int:
    """Validate that a value is a true integer (not a bool, not a float) and return it.

    Raises
    ------
    InvalidTypeError
        If the value is not an integer.

    """
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise InvalidTypeError(
            parameter_name=parameter_name,
            actual_type=type(value),
            expected_types=(int,),
        )
    return int(value)


def validate_type(
    value: Any,
    parameter_name: str,
    expected_types: type | tuple[type, ...],
) -> None:
    """Check ``isinstance(value, expected_types)``.

    >>> validate_type(True, "center", bool)
    >>> validate_type(params, "params", CQTParams)

    """
    if isinstance(expected_types, type):
        expected_types = (expected_types,)

    if not isinstance(value, expected_types):
        raise InvalidTypeError(
            parameter_name=parameter_name,
            actual_type=type(value),
            expected_types=expected_types,
        )


# =============================================================================
# Tensors
# =============================================================================


def validate_tensor_ndim(
    tensor: Tensor,
    parameter_name: str,
    *,
    expected_ndim: int | Sequence[int],
) -> None:
    """Check the number of dimensions of ``tensor``.

    Parameters
    ----------
    tensor : Tensor
        Tensor to check.
    parameter_name : str
        Name reported in the error.
    expected_ndim : int | Sequence[int]
        Allowed dimensionality, e.g. ``(1, 2)`` for ``[T]`` or ``[C, T]``.

    Raises
    ------
    InvalidShapeError
        If ``tensor.ndim`` is not allowed.

    """
    allowed = (expected_ndim,) if isinstance(expected_ndim, int) else tuple(expected_ndim)
    if tensor.ndim in allowed:
        return

    if len(allowed) == 1:
        raise InvalidShapeError(
            parameter_name=parameter_name,
            actual_shape=tuple(tensor.shape),
            expected_ndim=allowed[0],
            suggestion=f"Expected {allowed[0]}D tensor",
        )
    raise InvalidShapeError(
        parameter_name=parameter_name,
        actual_shape=tuple(tensor.shape),
        suggestion=f"Expected tensor with {allowed} dimensions",
    )
