import torchcqt.logging as logging  # noqa: A004
import torchcqt.typing as typing
import torchcqt.validation as validation
from torchcqt.cache import DerivedCache, get_default_cache, warm_cache
from torchcqt.effect import FX
from torchcqt.filterbank import BinSpec, Filterbank, build_filterbank
from torchcqt.params import CQTParams, create_parameters
from torchcqt.transform import CQTConfig, Cqt, create_transform
from torchcqt.validation import CQTError

__all__ = [
    "FX",
    "Cqt",
    "CQTConfig",
    "CQTParams",
    "CQTError",
    "BinSpec",
    "Filterbank",
    "DerivedCache",
    "build_filterbank",
    "create_parameters",
    "create_transform",
    "get_default_cache",
    "warm_cache",
    "logging",
    "typing",
    "validation",
]
