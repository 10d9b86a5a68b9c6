"""Per-parameter derivations behind the constant-Q filterbank.

Each quantity comes in two flavours: a pure ``calculate_*`` function and a
``get_*`` accessor that memoizes it in a :class:`~torchcqt.cache.DerivedCache`
under the minimal key that determines it:

======================  ===================================
quantity                cache key
======================  ===================================
``base_freq_ratio``     ``(bins_per_octave,)``
``q_factor``            ``(bins_per_octave,)``
``phase_factors``       ``(window_length, sampling_rate)``
``hann_window``         ``(window_length,)``
``norm_factor``         ``(window_length, norm)``
======================  ===================================

Tensors handed out by the ``get_*`` accessors are shared between every
caller and must not be modified in place.

"""

from __future__ import annotations

import math

import torch
from torch import Tensor

from torchcqt import fft
from torchcqt.cache import DerivedCache, resolve_cache
from torchcqt.typing import NormType
from torchcqt.validation import validate_in_set, validate_positive

#: Supported kernel normalizations
NORM_TYPES: tuple[NormType, ...] = ("l1", "l2")


# =============================================================================
# Pure derivations
# =============================================================================


def calculate_base_freq_ratio(bins_per_octave: int) -> float:
    """Geometric step between adjacent bins, ``r = 2 ** (1 / B)``."""
    validate_positive(bins_per_octave, "bins_per_octave")
    return 2.0 ** (1.0 / bins_per_octave)


def calculate_q_factor(bins_per_octave: int) -> float:
    r"""Quality factor shared by every bin of the filterbank.

    With ``r = 2 ** (1 / B)`` the bandwidth of a bin centered on ``f`` is
    ``f * (r - 1)``, so

    .. math::

        Q = \frac{f}{f (r - 1)} = \frac{1}{2^{1/B} - 1}

    which does not depend on ``f``. For ``B = 12`` this is about 16.817.

    """
    return 1.0 / (calculate_base_freq_ratio(bins_per_octave) - 1.0)


def calculate_phase_factors(window_length: int, sampling_rate: float) -> Tensor:
    """Phase increments ``-2 * pi * n / sampling_rate`` for ``n`` in ``[0, window_length)``.

    Multiplying by a frequency ``f`` gives the phase of a complex exponential
    at ``f`` sampled at ``sampling_rate``.
    """
    validate_positive(window_length, "window_length")
    validate_positive(sampling_rate, "sampling_rate")
    n = torch.arange(window_length, dtype=torch.float64)
    return (-2.0 * math.pi / sampling_rate) * n


def calculate_norm(window: Tensor, norm: NormType = "l1") -> float:
    """Scale factor that gives every bin the same gain regardless of window length.

    ``"l1"`` divides by the window sum, so a unit-amplitude sinusoid centered
    on a bin yields a coefficient of magnitude 0.5. ``"l2"`` divides by the
    window's Euclidean norm.
    """
    validate_in_set(norm, "norm", NORM_TYPES)
    validate_positive(window.numel(), "window_length")
    if norm == "l1":
        total = float(window.sum())
    else:
        total = math.sqrt(float((window**2).sum()))
    return 1.0 / total


def calculate_bin_window_length(
    q_factor: float,
    sampling_rate: float,
    center_frequency: float,
    window_length: int,
) -> int:
    """Samples needed to hold ``Q`` periods of ``center_frequency``, capped at ``window_length``."""
    ideal = math.ceil(q_factor * sampling_rate / center_frequency)
    return max(1, min(window_length, ideal))


# =============================================================================
# Cached accessors
# =============================================================================


def get_base_freq_ratio(bins_per_octave: int, *, cache: DerivedCache | None = None) -> float:
    return resolve_cache(cache).get_or_compute(
        "base_freq_ratio",
        (bins_per_octave,),
        lambda: calculate_base_freq_ratio(bins_per_octave),
    )


def get_q_factor(bins_per_octave: int, *, cache: DerivedCache | None = None) -> float:
    return resolve_cache(cache).get_or_compute(
        "q_factor",
        (bins_per_octave,),
        lambda: calculate_q_factor(bins_per_octave),
    )


def get_phase_factors(
    window_length: int,
    sampling_rate: float,
    *,
    cache: DerivedCache | None = None,
) -> Tensor:
    return resolve_cache(cache).get_or_compute(
        "phase_factors",
        (window_length, float(sampling_rate)),
        lambda: calculate_phase_factors(window_length, sampling_rate),
    )


def get_hann_window(window_length: int, *, cache: DerivedCache | None = None) -> Tensor:
    return resolve_cache(cache).get_or_compute(
        "hann_window",
        (window_length,),
        lambda: fft.hann(window_length),
    )


def get_norm_factor(
    window_length: int,
    norm: NormType = "l1",
    *,
    cache: DerivedCache | None = None,
) -> float:
    """Normalization factor of the Hann window of ``window_length`` samples."""
    cache = resolve_cache(cache)
    return cache.get_or_compute(
        "norm_factor",
        (window_length, norm),
        lambda: calculate_norm(get_hann_window(window_length, cache=cache), norm),
    )
