"""Constant-Q filterbank construction.

Every bin ``k`` gets an analysis atom: a Hann taper of ``N_k`` samples
modulated by a complex exponential at the bin's center frequency ``f_k``::

    atom_k[n] = norm_k * hann_{N_k}[n] * exp(2j * pi * f_k * (offset_k + n) / fs)

with ``N_k = min(window_length, ceil(Q * fs / f_k))`` so higher bins get
shorter windows, and ``offset_k`` centering the atom in the global window.

The kernel row of bin ``k`` is the conjugated spectrum of the zero-padded
atom, divided by the FFT size. For any frame ``x`` of ``window_length``
samples, Parseval's theorem then gives::

    (FFT(x) @ kernel.T)[k] == sum_n x[n] * conj(atom_k[n])

which turns the per-frame constant-Q projection into one matrix product
(Brown and Puckette, "An efficient algorithm for the calculation of a
constant Q transform", JASA 1992).

Examples
--------
>>> params = create_parameters(30.0, 4000.0, 12, 44000.0, 4096)
>>> fb = build_filterbank(params)
>>> fb.kernel.shape
torch.Size([85, 4096])
>>> fb.bins[0].window_length, fb.bins[-1].window_length
(4096, 193)

"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import torch
from torch import Tensor

from torchcqt import fft
from torchcqt._parallel import ordered_map
from torchcqt.cache import DerivedCache, resolve_cache
from torchcqt.calculations import (
    NORM_TYPES,
    calculate_bin_window_length,
    get_base_freq_ratio,
    get_hann_window,
    get_norm_factor,
    get_phase_factors,
    get_q_factor,
)
from torchcqt.logging import get_logger, log_performance
from torchcqt.params import CQTParams
from torchcqt.typing import Hz, NormType
from torchcqt.validation import BuildFFTError, FFTFailure, validate_in_set

_logger = get_logger("filterbank")

#: dtype of the frequency-domain kernel
KERNEL_DTYPE = torch.complex64


@dataclass(frozen=True, eq=False)
class BinSpec:
    """Derived description of one constant-Q bin.

    Attributes
    ----------
    index : int
        0-based bin ordinal.
    center_frequency : float
        ``min_frequency * ratio ** index`` in Hz.
    q_factor : float
        Center frequency over bandwidth, shared by every bin.
    window_length : int
        Length of the bin's own analysis window in samples.
    offset : int
        Start of the bin window inside the global window.
    norm_factor : float
        Gain applied to the Hann taper.
    complex_window : Tensor
        complex128 atom of ``window_length`` samples.

    """

    index: int
    center_frequency: Hz
    q_factor: float
    window_length: int
    offset: int
    norm_factor: float
    complex_window: Tensor

    @property
    def bandwidth(self) -> Hz:
        return self.center_frequency / self.q_factor


def derive_bin(
    params: CQTParams,
    index: int,
    norm: NormType = "l1",
    *,
    cache: DerivedCache | None = None,
) -> BinSpec:
    """Derive the :class:`BinSpec` of bin ``index``, reading shared quantities from ``cache``."""
    cache = resolve_cache(cache)
    ratio = get_base_freq_ratio(params.bins_per_octave, cache=cache)
    q_factor = get_q_factor(params.bins_per_octave, cache=cache)
    center_frequency = params.min_frequency * ratio**index

    length = calculate_bin_window_length(
        q_factor, params.sampling_rate, center_frequency, params.window_length
    )
    offset = (params.window_length - length) // 2

    taper = get_hann_window(length, cache=cache)
    norm_factor = get_norm_factor(length, norm, cache=cache)
    phase = get_phase_factors(params.window_length, params.sampling_rate, cache=cache)

    # phase holds -2*pi*m/fs, so negating gives a positive-frequency atom.
    angle = -center_frequency * phase[offset : offset + length]
    complex_window = torch.polar(taper * norm_factor, angle)

    return BinSpec(
        index=index,
        center_frequency=center_frequency,
        q_factor=q_factor,
        window_length=length,
        offset=offset,
        norm_factor=norm_factor,
        complex_window=complex_window,
    )


def kernel_row(spec: BinSpec, window_length: int) -> Tensor:
    """Frequency-domain kernel row of one bin.

    Raises
    ------
    FFTFailure
        Propagated from the FFT primitive.

    """
    padded = torch.zeros(window_length, dtype=torch.complex128)
    padded[spec.offset : spec.offset + spec.window_length] = spec.complex_window
    spectrum = fft.transform(padded, window_length)
    return (spectrum.conj() / window_length).to(KERNEL_DTYPE)


@dataclass(frozen=True, eq=False)
class Filterbank:
    """Frequency-domain constant-Q kernel, one row per bin.

    The kernel is built once and only read afterwards; it is shared by every
    transform call of the owning :class:`~torchcqt.transform.Cqt`, which
    exposes the same tensor as its ``kernel`` buffer. Do not modify ``kernel``
    or any ``BinSpec.complex_window`` in place; clone first.

    Attributes
    ----------
    params : CQTParams
        Parameters the filterbank was built from.
    norm : {"l1", "l2"}
        Normalization of the bin atoms.
    bins : tuple[BinSpec, ...]
        Per-bin derivations, in bin order.
    kernel : Tensor
        complex64 tensor of shape ``(n_bins, window_length)``.

    """

    params: CQTParams
    norm: NormType
    bins: tuple[BinSpec, ...]
    kernel: Tensor

    @property
    def n_bins(self) -> int:
        return len(self.bins)

    @property
    def window_length(self) -> int:
        return self.params.window_length

    @property
    def q_factor(self) -> float:
        return self.bins[0].q_factor

    @property
    def center_frequencies(self) -> Tensor:
        """Center frequency of each bin as a float64 tensor."""
        return torch.tensor([b.center_frequency for b in self.bins], dtype=torch.float64)

    def time_kernel(self) -> Tensor:
        """Zero-padded time-domain atoms, complex128 of shape ``(n_bins, window_length)``."""
        atoms = torch.zeros(self.n_bins, self.window_length, dtype=torch.complex128)
        for spec in self.bins:
            atoms[spec.index, spec.offset : spec.offset + spec.window_length] = spec.complex_window
        return atoms

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(n_bins={self.n_bins}, "
            f"window_length={self.window_length}, norm={self.norm!r})"
        )


def build_filterbank(
    params: CQTParams,
    *,
    norm: NormType = "l1",
    cache: DerivedCache | None = None,
    num_workers: int | None = None,
) -> Filterbank:
    """Build the constant-Q filterbank for ``params``.

    Parameters
    ----------
    params : CQTParams
        Validated transform parameters.
    norm : {"l1", "l2"}, optional
        Atom normalization. Default is "l1".
    cache : DerivedCache | None, optional
        Cache for the shared derivations. Defaults to the process-wide cache.
    num_workers : int | None, optional
        Threads used to build kernel rows. ``1`` builds inline.

    Returns
    -------
    Filterbank

    Raises
    ------
    BuildFFTError
        If the FFT primitive fails on any kernel row. No filterbank is
        returned.

    """
    validate_in_set(norm, "norm", NORM_TYPES)
    cache = resolve_cache(cache)
    window_length = params.window_length

    def build_row(index: int) -> tuple[BinSpec, Tensor]:
        spec = derive_bin(params, index, norm, cache=cache)
        try:
            row = kernel_row(spec, window_length)
        except FFTFailure as exc:
            raise BuildFFTError(index, exc.reason) from exc
        return spec, row

    with log_performance("build_filterbank", level=logging.DEBUG, logger=_logger):
        built = ordered_map(build_row, params.n_bins, num_workers)
        bins = tuple(spec for spec, _ in built)
        kernel = torch.stack([row for _, row in built])

    _logger.debug(
        "Built filterbank: %d bins x %d samples (norm=%s)", len(bins), window_length, norm
    )
    return Filterbank(params=params, norm=norm, bins=bins, kernel=kernel)
