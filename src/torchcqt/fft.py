"""Thin wrappers over the FFT and Hann-window primitives provided by torch.

Everything numeric in torchcqt goes through these two functions, so the
failure contract of the transform lives in one place: :func:`transform`
raises :class:`~torchcqt.validation.FFTFailure` instead of returning a
spectrum that cannot be trusted.
"""

from __future__ import annotations

import torch
from torch import Tensor

from torchcqt.validation import FFTFailure


def transform(buffer: Tensor, size: int) -> Tensor:
    """Compute the complex spectrum of ``buffer`` along its last axis.

    Parameters
    ----------
    buffer : Tensor
        Real or complex tensor whose last dimension holds ``size`` samples.
        Leading dimensions are batched.
    size : int
        Expected transform size.

    Returns
    -------
    Tensor
        Complex tensor with the same shape as ``buffer``.

    Raises
    ------
    FFTFailure
        If the last dimension does not match ``size``, if torch fails, or if
        the spectrum contains NaN or infinite values.

    """
    if buffer.ndim == 0 or buffer.shape[-1] != size:
        actual = tuple(buffer.shape)
        raise FFTFailure(f"buffer shape {actual} does not match transform size", size=size)

    try:
        spectrum = torch.fft.fft(buffer, n=size, dim=-1)
    except RuntimeError as exc:
        raise FFTFailure(str(exc), size=size) from exc

    if not bool(torch.isfinite(spectrum).all()):
        raise FFTFailure("spectrum contains non-finite values", size=size)
    return spectrum


def hann(length: int, dtype: torch.dtype = torch.float64) -> Tensor:
    """Symmetric Hann taper of ``length`` samples.

    ``w[n] = 0.5 - 0.5 * cos(2 * pi * n / (length - 1))``; a single-sample
    window is ``[1.0]``.
    """
    return torch.hann_window(length, periodic=False, dtype=dtype)
