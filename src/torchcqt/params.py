"""Validated, immutable parameters of a constant-Q transform.

The five tuning parameters are checked once, in a fixed order, by
:func:`create_parameters`. Everything downstream (filterbank construction,
the transform itself) can then rely on a consistent :class:`CQTParams`.

Bin convention
--------------
``num_bins`` is the number of bins **per octave** ``B``. Bin centers are
``min_frequency * ratio ** k`` with ``ratio = 2 ** (1 / B)``, and the total
number of bins is the largest count whose top center does not exceed
``max_frequency``::

    n_bins = floor(B * log2(max_frequency / min_frequency)) + 1

Examples
--------
>>> params = create_parameters(30.0, 4000.0, 12, 44000.0, 4096)
>>> params.n_bins
85
>>> round(params.q_factor, 3)
16.817

"""

from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Real
from typing import Any

import torch
from torch import Tensor

from torchcqt.calculations import (
    calculate_base_freq_ratio,
    calculate_bin_window_length,
    calculate_q_factor,
)
from torchcqt.typing import Hz
from torchcqt.validation import (
    InvalidBinCountError,
    InvalidFrequencyRangeError,
    InvalidRangeError,
    NyquistViolationError,
    WindowTooShortError,
    is_integral,
)

#: Periods of ``min_frequency`` that the global window must hold
MIN_WINDOW_CYCLES = 2

# Absorbs float rounding when max_frequency sits exactly on a bin center.
_BIN_COUNT_EPSILON = 1e-9


@dataclass(frozen=True)
class CQTParams:
    """Immutable parameter set of a constant-Q transform.

    Instances should be created with :func:`create_parameters` (or
    :meth:`CQTParams.create`), which validates every field. Assigning to a
    field raises :class:`dataclasses.FrozenInstanceError`.

    Attributes
    ----------
    min_frequency : float
        Center frequency of the lowest bin, in Hz.
    max_frequency : float
        Upper bound for bin centers, in Hz.
    bins_per_octave : int
        Number of bins per octave.
    sampling_rate : float
        Sampling rate of the input signal, in Hz.
    window_length : int
        Global analysis window, in samples. Also the FFT size.

    """

    min_frequency: Hz
    max_frequency: Hz
    bins_per_octave: int
    sampling_rate: Hz
    window_length: int

    @classmethod
    def create(
        cls,
        min_frequency: Hz,
        max_frequency: Hz,
        num_bins: int,
        sampling_rate: Hz,
        window_length: int | float,
    ) -> CQTParams:
        """Alias of :func:`create_parameters`."""
        return create_parameters(
            min_frequency, max_frequency, num_bins, sampling_rate, window_length
        )

    @property
    def nyquist(self) -> Hz:
        return self.sampling_rate / 2

    @property
    def ratio(self) -> float:
        """Geometric step between adjacent bin centers, ``2 ** (1 / bins_per_octave)``."""
        return calculate_base_freq_ratio(self.bins_per_octave)

    @property
    def q_factor(self) -> float:
        """Center frequency over bandwidth, identical for every bin."""
        return calculate_q_factor(self.bins_per_octave)

    @property
    def n_bins(self) -> int:
        """Total number of bins between ``min_frequency`` and ``max_frequency``."""
        octaves = math.log2(self.max_frequency / self.min_frequency)
        return math.floor(self.bins_per_octave * octaves + _BIN_COUNT_EPSILON) + 1

    def center_frequency(self, index: int) -> Hz:
        """Center frequency of bin ``index``: ``min_frequency * ratio ** index``."""
        if not 0 <= index < self.n_bins:
            raise InvalidRangeError(
                "index", index, min_value=0, max_value=self.n_bins, max_inclusive=False
            )
        return self.min_frequency * self.ratio**index

    def center_frequencies(self) -> Tensor:
        """Center frequencies of every bin as a float64 tensor of length ``n_bins``."""
        k = torch.arange(self.n_bins, dtype=torch.float64)
        return self.min_frequency * torch.pow(self.ratio, k)

    def bin_window_length(self, index: int) -> int:
        """Analysis window of bin ``index`` in samples, at most ``window_length``."""
        return calculate_bin_window_length(
            self.q_factor,
            self.sampling_rate,
            self.center_frequency(index),
            self.window_length,
        )


def min_window_length(min_frequency: Hz, sampling_rate: Hz) -> int:
    """Smallest global window that holds ``MIN_WINDOW_CYCLES`` periods of ``min_frequency``."""
    return math.ceil(MIN_WINDOW_CYCLES * sampling_rate / min_frequency)


def create_parameters(
    min_frequency: Hz,
    max_frequency: Hz,
    num_bins: int,
    sampling_rate: Hz,
    window_length: int | float,
) -> CQTParams:
    """Validate the tuning parameters and return an immutable :class:`CQTParams`.

    Checks run in this order and stop at the first failure:

    1. ``num_bins`` is a positive integer.
    2. ``0 < min_frequency < max_frequency``.
    3. ``max_frequency < sampling_rate / 2``.
    4. ``window_length`` is integral and holds at least ``MIN_WINDOW_CYCLES``
       periods of ``min_frequency``.

    Parameters
    ----------
    min_frequency : float
        Lowest bin center in Hz.
    max_frequency : float
        Upper bound for bin centers in Hz.
    num_bins : int
        Bins per octave.
    sampling_rate : float
        Sampling rate in Hz.
    window_length : int | float
        Global window in samples; integral floats such as ``4096.0`` are
        accepted.

    Returns
    -------
    CQTParams

    Raises
    ------
    InvalidBinCountError
    InvalidFrequencyRangeError
    NyquistViolationError
    WindowTooShortError

    Examples
    --------
    >>> create_parameters(30.0, 4000.0, 12, 44000.0, 4096.0).window_length
    4096
    >>> create_parameters(30.0, 22050.0, 12, 44100.0, 4096)
    Traceback (most recent call last):
        ...
    torchcqt.validation.exceptions.NyquistViolationError: ...

    """
    if not is_integral(num_bins) or not num_bins > 0:
        raise InvalidBinCountError(num_bins)

    if not (_is_real(min_frequency) and _is_real(max_frequency)):
        raise InvalidFrequencyRangeError(min_frequency, max_frequency)
    if not (min_frequency > 0 and max_frequency > min_frequency):
        raise InvalidFrequencyRangeError(min_frequency, max_frequency)

    if not _is_real(sampling_rate) or not max_frequency < sampling_rate / 2:
        raise NyquistViolationError(max_frequency, sampling_rate)

    if not is_integral(window_length):
        raise WindowTooShortError(
            window_length, reason="Window length must be a whole number of samples"
        )
    required = min_window_length(min_frequency, sampling_rate)
    if not window_length >= required:
        raise WindowTooShortError(window_length, min_length=required)

    return CQTParams(
        min_frequency=float(min_frequency),
        max_frequency=float(max_frequency),
        bins_per_octave=int(num_bins),
        sampling_rate=float(sampling_rate),
        window_length=int(window_length),
    )


def _is_real(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)
