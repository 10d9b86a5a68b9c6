"""Type aliases shared across torchcqt."""

import typing as tp

import numpy as np
from numpy.typing import ArrayLike
from torch import Tensor

Hz = float

NormType = tp.Literal["l1", "l2"]
OutputType = tp.Literal["magnitude", "complex"]

#: Anything ``process`` accepts as audio samples
Samples = tp.Union[Tensor, np.ndarray, ArrayLike]

__all__ = ["Hz", "NormType", "OutputType", "Samples"]
