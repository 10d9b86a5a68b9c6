"""Constant-Q transform of finite audio buffers.

:class:`Cqt` owns a :class:`~torchcqt.filterbank.Filterbank` built once at
construction and applies it to any number of signals:

1. the signal is cut into frames of ``window_length`` samples, ``hop_size``
   apart (``1 + (T - window_length) // hop_size`` frames),
2. each frame is transformed with the FFT primitive,
3. each spectrum is projected on the kernel (``spectra @ kernel.T``).

Frames are processed in fixed-size chunks on a thread pool. Chunks are
gathered by index, so the output is always in temporal order, and the
partition depends only on ``chunk_size``.

Output layout
-------------
Frame-major: ``[n_frames, n_bins]`` for ``[T]`` input and
``[C, n_frames, n_bins]`` for ``[C, T]`` input. Magnitudes (float32) by
default, complex64 coefficients with ``output="complex"``.

Examples
--------
>>> import torch
>>> from torchcqt import create_parameters, create_transform
>>> params = create_parameters(30.0, 4000.0, 12, 44000.0, 4096)
>>> cqt = create_transform(params)
>>> t = torch.arange(44100) / 44000.0
>>> features = cqt.process(torch.sin(2 * torch.pi * 440.0 * t), hop_size=512)
>>> features.shape
torch.Size([79, 85])

"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from numbers import Integral
from typing import Any

import numpy as np
import torch
from torch import Tensor
from torch.nn import functional as F  # noqa: N812
from typing_extensions import Self, override

from torchcqt import fft
from torchcqt._parallel import chunk_ranges, ordered_chunk_map
from torchcqt.cache import DerivedCache
from torchcqt.calculations import NORM_TYPES
from torchcqt.effect import FX
from torchcqt.filterbank import Filterbank, build_filterbank
from torchcqt.logging import get_logger, log_performance
from torchcqt.params import CQTParams
from torchcqt.typing import NormType, OutputType, Samples
from torchcqt.validation import (
    FFTFailure,
    InsufficientSamplesError,
    InvalidHopSizeError,
    InvalidTypeError,
    ProcessFFTError,
    validate_in_set,
    validate_integer,
    validate_positive,
    validate_range,
    validate_tensor_ndim,
    validate_type,
)

_logger = get_logger("transform")

#: Default distance between frame starts, in samples
DEFAULT_HOP_SIZE = 512

#: Default number of frames per parallel work unit
DEFAULT_CHUNK_SIZE = 64

#: Supported output representations
OUTPUT_TYPES: tuple[OutputType, ...] = ("magnitude", "complex")


@dataclass(frozen=True)
class CQTConfig:
    """Options of a :class:`Cqt` that do not change the bin layout.

    Parameters
    ----------
    hop_size : int
        Default distance between frame starts in samples. Default is 512.
    norm : {"l1", "l2"}
        Atom normalization. Default is "l1".
    output : {"magnitude", "complex"}
        Whether ``process`` returns magnitudes or complex coefficients.
    center : bool
        Zero-pad ``window_length // 2`` samples on both sides so frame ``i``
        is centered on sample ``i * hop_size``. Default is False.
    num_workers : int | None
        Threads used for filterbank rows and frame chunks. None picks
        ``min(8, os.cpu_count())``; 1 runs everything inline.
    chunk_size : int
        Frames per parallel work unit. Default is 64.

    Examples
    --------
    >>> config = CQTConfig(hop_size=256, output="complex")
    >>> cqt = Cqt.from_config(params, config)

    """

    hop_size: int = DEFAULT_HOP_SIZE
    norm: NormType = "l1"
    output: OutputType = "magnitude"
    center: bool = False
    num_workers: int | None = None
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self) -> None:
        validate_positive(validate_integer(self.hop_size, "hop_size"), "hop_size")
        validate_in_set(self.norm, "norm", NORM_TYPES)
        validate_in_set(self.output, "output", OUTPUT_TYPES)
        validate_type(self.center, "center", bool)
        if self.num_workers is not None:
            validate_range(validate_integer(self.num_workers, "num_workers"), "num_workers", min_value=1)
        validate_positive(validate_integer(self.chunk_size, "chunk_size"), "chunk_size")


class Cqt(FX):
    """Constant-Q transform with a precomputed filterbank.

    Construction builds the filterbank and either succeeds completely or
    raises; a half-built instance is never returned.

    Parameters
    ----------
    params : CQTParams
        Validated parameters from :func:`~torchcqt.params.create_parameters`.
    hop_size, norm, output, center, num_workers, chunk_size
        See :class:`CQTConfig`.
    cache : DerivedCache | None, optional
        Cache for the per-parameter derivations. Defaults to the process-wide
        cache.

    Raises
    ------
    InvalidParameterError
        If an option is invalid.
    BuildFFTError
        If the filterbank cannot be built.

    Examples
    --------
    The transform is a ``torch.nn.Module``; calling it uses the configured
    hop size:

    >>> cqt = Cqt(params, hop_size=1024)
    >>> features = cqt(samples)

    """

    def __init__(
        self,
        params: CQTParams,
        *,
        hop_size: int = DEFAULT_HOP_SIZE,
        norm: NormType = "l1",
        output: OutputType = "magnitude",
        center: bool = False,
        num_workers: int | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        cache: DerivedCache | None = None,
    ) -> None:
        super().__init__()
        validate_type(params, "params", CQTParams)
        self.params = params
        self.config = CQTConfig(
            hop_size=hop_size,
            norm=norm,
            output=output,
            center=center,
            num_workers=num_workers,
            chunk_size=chunk_size,
        )
        self.filterbank: Filterbank = build_filterbank(
            params, norm=norm, cache=cache, num_workers=num_workers
        )
        self.kernel: Tensor
        self.register_buffer("kernel", self.filterbank.kernel, persistent=False)

    @classmethod
    def from_config(
        cls,
        params: CQTParams,
        config: CQTConfig,
        *,
        cache: DerivedCache | None = None,
    ) -> Self:
        """Create a transform from a :class:`CQTConfig`."""
        return cls(
            params,
            hop_size=config.hop_size,
            norm=config.norm,
            output=config.output,
            center=config.center,
            num_workers=config.num_workers,
            chunk_size=config.chunk_size,
            cache=cache,
        )

    @property
    def n_bins(self) -> int:
        return self.filterbank.n_bins

    @property
    def window_length(self) -> int:
        return self.params.window_length

    @property
    def center_frequencies(self) -> Tensor:
        return self.filterbank.center_frequencies

    def n_frames(self, n_samples: int, hop_size: int | None = None) -> int:
        """Number of frames ``process`` produces for ``n_samples`` samples (0 if none fit)."""
        hop = self.config.hop_size if hop_size is None else hop_size
        if self.config.center:
            n_samples += 2 * (self.window_length // 2)
        if n_samples < self.window_length:
            return 0
        return 1 + (n_samples - self.window_length) // hop

    def frame_times(self, n_frames: int, hop_size: int | None = None) -> Tensor:
        """Time in seconds of the center of each frame, as a float64 tensor."""
        hop = self.config.hop_size if hop_size is None else hop_size
        centers = torch.arange(n_frames, dtype=torch.float64) * hop
        if not self.config.center:
            centers = centers + self.window_length / 2
        return centers / self.params.sampling_rate

    def process(self, samples: Samples, hop_size: int | None = None) -> Tensor:
        """Compute the constant-Q transform of ``samples``.

        Parameters
        ----------
        samples : Tensor | np.ndarray | ArrayLike
            Real signal of shape ``[T]`` or ``[C, T]``.
        hop_size : int | None, optional
            Distance between frame starts. Defaults to the configured hop.

        Returns
        -------
        Tensor
            ``[n_frames, n_bins]`` or ``[C, n_frames, n_bins]``; float32
            magnitudes or complex64 coefficients depending on ``output``.

        Raises
        ------
        InvalidShapeError
            If ``samples`` is not 1-D or 2-D.
        InvalidHopSizeError
            If ``hop_size`` is not a positive integer.
        InsufficientSamplesError
            If the (padded) signal is shorter than ``window_length``.
        ProcessFFTError
            If any frame cannot be transformed. No partial result is returned.

        """
        hop = self.config.hop_size if hop_size is None else hop_size
        window_length = self.window_length

        x = self._as_tensor(samples)
        validate_tensor_ndim(x, "samples", expected_ndim=(1, 2))

        if isinstance(hop, bool) or not isinstance(hop, Integral) or hop <= 0:
            raise InvalidHopSizeError(hop, x.shape[-1], window_length)
        hop = int(hop)

        if self.config.center:
            half = window_length // 2
            x = F.pad(x, (half, half))

        n_samples = x.shape[-1]
        if n_samples < window_length:
            raise InsufficientSamplesError(n_samples, window_length)

        frames = x.unfold(-1, window_length, hop)
        n_frames = frames.shape[-2]
        chunks = chunk_ranges(n_frames, self.config.chunk_size)
        kernel_t = self.kernel.T
        magnitude = self.config.output == "magnitude"

        def project(frame_range: range) -> Tensor:
            block = frames[..., frame_range.start : frame_range.stop, :]
            try:
                spectra = fft.transform(block, window_length)
            except FFTFailure as exc:
                raise ProcessFFTError(exc.reason) from exc
            coefficients = spectra @ kernel_t
            return coefficients.abs() if magnitude else coefficients

        with torch.no_grad(), log_performance(
            "cqt_process", level=logging.DEBUG, logger=_logger
        ):
            parts = ordered_chunk_map(project, chunks, self.config.num_workers)
            features = torch.cat(parts, dim=-2)

        _logger.debug(
            "Processed %d samples into %d frames x %d bins (hop=%d)",
            n_samples,
            n_frames,
            self.n_bins,
            hop,
        )
        return features

    @override
    def forward(self, x: Tensor) -> Tensor:
        return self.process(x)

    def _as_tensor(self, samples: Any) -> Tensor:
        if isinstance(samples, Tensor):
            x = samples
        else:
            x = torch.as_tensor(np.asarray(samples))
        if x.is_complex():
            raise InvalidTypeError("samples", actual_type=type(samples), expected_types=(Tensor,))
        return x.detach().to(device=self.kernel.device, dtype=torch.float32)

    @override
    def extra_repr(self) -> str:
        p = self.params
        return (
            f"min_frequency={p.min_frequency}, max_frequency={p.max_frequency}, "
            f"bins_per_octave={p.bins_per_octave}, sampling_rate={p.sampling_rate}, "
            f"window_length={p.window_length}, n_bins={self.n_bins}, "
            f"hop_size={self.config.hop_size}, output={self.config.output!r}"
        )


def create_transform(
    params: CQTParams,
    *,
    cache: DerivedCache | None = None,
    **options: Any,
) -> Cqt:
    """Build a :class:`Cqt` for ``params``.

    ``options`` are the :class:`CQTConfig` fields. Raises instead of returning
    a transform whenever the filterbank cannot be built.
    """
    return Cqt(params, cache=cache, **options)
