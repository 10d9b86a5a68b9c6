"""Base class for torch modules that transform audio tensors."""

from __future__ import annotations

import abc

from torch import Tensor, nn
from typing_extensions import override


class FX(nn.Module, abc.ABC):
    """Abstract base class for all torchcqt transforms.

    Subclasses are ``torch.nn.Module`` objects, so they compose with
    ``nn.Sequential`` and move between devices with ``.to()``.
    """

    @abc.abstractmethod
    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)

    @override
    @abc.abstractmethod
    def forward(self, x: Tensor) -> Tensor: ...
