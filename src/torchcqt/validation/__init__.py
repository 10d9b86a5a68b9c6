"""Input validation utilities and exceptions for torchcqt.

Exceptions
----------
CQTError
    Base exception for all torchcqt errors.
InvalidParameterError
    Raised when a parameter value is invalid.
InvalidRangeError
    Raised when a value is out of range.
InvalidShapeError
    Raised when tensor shape is invalid.
InvalidTypeError
    Raised when a parameter has wrong type.
ParameterError
    Base of the parameter-creation errors below.
InvalidBinCountError, InvalidFrequencyRangeError, NyquistViolationError, WindowTooShortError
    Raised by :func:`torchcqt.create_parameters`.
FFTFailure
    Raised by the FFT primitive wrapper.
AudioProcessingError
    Base of the build and process errors.
BuildError, BuildFFTError
    Raised while assembling the filterbank.
ProcessError, InsufficientSamplesError, InvalidHopSizeError, ProcessFFTError
    Raised by :meth:`torchcqt.Cqt.process`.

Validators
----------
validate_positive
    Validate positive values.
validate_range
    Validate values within a range.
validate_in_set
    Validate values from a set of options.
validate_integer
    Validate true integers.
validate_type
    Validate parameter types.
validate_tensor_ndim
    Validate tensor dimensionality.
is_integral
    Check for integral-valued numbers.

Examples
--------
Catch all torchcqt errors:

>>> from torchcqt.validation import CQTError
>>> try:
...     # torchcqt operations
...     pass
... except CQTError as e:
...     print(f"Error: {e}")

"""

from torchcqt.validation.exceptions import (
    AudioProcessingError,
    BuildError,
    BuildFFTError,
    CQTError,
    FFTFailure,
    InsufficientSamplesError,
    InvalidBinCountError,
    InvalidFrequencyRangeError,
    InvalidHopSizeError,
    InvalidParameterError,
    InvalidRangeError,
    InvalidShapeError,
    InvalidTypeError,
    NyquistViolationError,
    ParameterError,
    ProcessError,
    ProcessFFTError,
    WindowTooShortError,
)
from torchcqt.validation.validators import (
    COMMON_SAMPLE_RATES,
    is_integral,
    validate_in_set,
    validate_integer,
    validate_positive,
    validate_range,
    validate_tensor_ndim,
    validate_type,
)

__all__ = [
    # Exceptions
    "CQTError",
    "InvalidParameterError",
    "InvalidRangeError",
    "InvalidShapeError",
    "InvalidTypeError",
    "ParameterError",
    "InvalidBinCountError",
    "InvalidFrequencyRangeError",
    "NyquistViolationError",
    "WindowTooShortError",
    "FFTFailure",
    "AudioProcessingError",
    "BuildError",
    "BuildFFTError",
    "ProcessError",
    "InsufficientSamplesError",
    "InvalidHopSizeError",
    "ProcessFFTError",
    # Validators
    "validate_positive",
    "validate_range",
    "validate_in_set",
    "validate_integer",
    "validate_type",
    "validate_tensor_ndim",
    "is_integral",
    # Constants
    "COMMON_SAMPLE_RATES",
]
