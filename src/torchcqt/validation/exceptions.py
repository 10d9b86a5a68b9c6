"""Custom exceptions for torchcqt validation and error handling.

This module provides a hierarchical exception system for torchcqt, enabling
specific error handling and context-aware error messages.

Exception Hierarchy
-------------------
CQTError (base)
    Base exception for all torchcqt library errors.
InvalidParameterError
    Raised when a parameter value is invalid.
InvalidRangeError
    Raised when a value is out of range.
InvalidShapeError
    Raised when tensor shape is invalid.
InvalidTypeError
    Raised when a parameter has wrong type.
ParameterError
    Base class for the errors raised while creating transform parameters.
InvalidBinCountError
    Raised when the bins-per-octave count is not a positive integer.
InvalidFrequencyRangeError
    Raised when the frequency range is empty or not positive.
NyquistViolationError
    Raised when the maximum frequency reaches the Nyquist frequency.
WindowTooShortError
    Raised when the analysis window cannot resolve the minimum frequency.
FFTFailure
    Raised by the FFT primitive on size mismatch or numeric failure.
AudioProcessingError
    Raised during filterbank construction or transform failures.
BuildError, BuildFFTError
    Raised when the filterbank cannot be assembled.
ProcessError, InsufficientSamplesError, InvalidHopSizeError, ProcessFFTError
    Raised when a single transform call fails.

Examples
--------
Catch all torchcqt errors:

>>> try:
...     # torchcqt operations
...     pass
... except CQTError as e:
...     print(f"torchcqt error: {e}")

Catch specific parameter errors:

>>> try:
...     create_parameters(30.0, 30000.0, 12, 44100.0, 4096)
... except NyquistViolationError as e:
...     print(f"Invalid parameter: {e.parameter_name} = {e.actual_value}")

"""

from __future__ import annotations

from typing import Any


class CQTError(Exception):
    """Base exception for all torchcqt library errors.

    All custom exceptions in torchcqt inherit from this class, enabling
    users to catch all library-specific errors with a single except clause.

    Parameters
    ----------
    message : str
        Human-readable error message.
    parameter_name : str | None, optional
        Name of the parameter that caused the error, if applicable.
    actual_value : Any | None, optional
        The actual value that caused the error.
    suggestion : str | None, optional
        A suggestion for fixing the error.

    Examples
    --------
    >>> try:
    ...     raise CQTError("Something went wrong")
    ... except CQTError as e:
    ...     print(f"Error: {e}")
    Error: Something went wrong

    """

    def __init__(
        self,
        message: str,
        parameter_name: str | None = None,
        actual_value: Any | None = None,
        suggestion: str | None = None,
    ) -> None:
        self.message = message
        self.parameter_name = parameter_name
        self.actual_value = actual_value
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message with context."""
        parts = [self.message]
        if self.parameter_name is not None:
            parts.append(f"Parameter: {self.parameter_name}")
        if self.actual_value is not None:
            parts.append(f"Got: {self.actual_value!r}")
        if self.suggestion is not None:
            parts.append(f"Suggestion: {self.suggestion}")
        return " | ".join(parts)


class InvalidParameterError(CQTError):
    """Exception raised when a parameter value is invalid.

    This is the base class for all parameter validation errors.
    Use more specific subclasses when possible.

    Parameters
    ----------
    message : str
        Human-readable error message.
    parameter_name : str
        Name of the invalid parameter.
    actual_value : Any
        The actual value that was provided.
    expected : str | None, optional
        Description of what was expected.
    suggestion : str | None, optional
        A suggestion for fixing the error.

    Examples
    --------
    >>> raise InvalidParameterError(
    ...     "Hop size must be positive",
    ...     parameter_name="hop_size",
    ...     actual_value=-512,
    ...     expected="positive integer",
    ... )
    Traceback (most recent call last):
        ...
    torchcqt.validation.exceptions.InvalidParameterError: ...

    """

    def __init__(
        self,
        message: str,
        parameter_name: str,
        actual_value: Any,
        expected: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        self.expected = expected
        super().__init__(
            message=message,
            parameter_name=parameter_name,
            actual_value=actual_value,
            suggestion=suggestion,
        )

    def _format_message(self) -> str:
        """Format the full error message with context."""
        parts = [self.message]
        parts.append(f"Parameter: {self.parameter_name}")
        parts.append(f"Got: {self.actual_value!r}")
        if self.expected is not None:
            parts.append(f"Expected: {self.expected}")
        if self.suggestion is not None:
            parts.append(f"Suggestion: {self.suggestion}")
        return " | ".join(parts)


class InvalidRangeError(InvalidParameterError):
    """Exception raised when a value is outside expected bounds.

    Parameters
    ----------
    parameter_name : str
        Name of the parameter.
    actual_value : float | int
        The actual value that was provided.
    min_value : float | int | None, optional
        Minimum allowed value. None means no minimum.
    max_value : float | int | None, optional
        Maximum allowed value. None means no maximum.
    min_inclusive : bool, optional
        If True, min_value is included in the range. Default is True.
    max_inclusive : bool, optional
        If True, max_value is included in the range. Default is True.

    Examples
    --------
    >>> raise InvalidRangeError("chunk_size", 0, min_value=1)
    Traceback (most recent call last):
        ...
    torchcqt.validation.exceptions.InvalidRangeError: ...

    """

    def __init__(
        self,
        parameter_name: str,
        actual_value: float | int,
        min_value: float | int | None = None,
        max_value: float | int | None = None,
        min_inclusive: bool = True,
        max_inclusive: bool = True,
    ) -> None:
        self.min_value = min_value
        self.max_value = max_value

        left = "[" if min_inclusive else "("
        right = "]" if max_inclusive else ")"
        min_str = str(min_value) if min_value is not None else "-inf"
        max_str = str(max_value) if max_value is not None else "inf"
        expected = f"{left}{min_str}, {max_str}{right}"

        super().__init__(
            message=f"Value out of range for {parameter_name}",
            parameter_name=parameter_name,
            actual_value=actual_value,
            expected=expected,
        )


class InvalidShapeError(InvalidParameterError):
    """Exception raised when tensor shape is invalid.

    Parameters
    ----------
    parameter_name : str
        Name of the parameter.
    actual_shape : tuple[int, ...]
        The actual shape of the tensor.
    expected_ndim : int | None, optional
        Expected number of dimensions.
    expected_shape : tuple[int | None, ...] | None, optional
        Expected shape (None elements are wildcards).
    suggestion : str | None, optional
        A suggestion for fixing the error.

    Examples
    --------
    >>> raise InvalidShapeError(
    ...     "samples",
    ...     actual_shape=(4, 2, 1000),
    ...     suggestion="Samples should be [T] or [C, T]"
    ... )
    Traceback (most recent call last):
        ...
    torchcqt.validation.exceptions.InvalidShapeError: ...

    """

    def __init__(
        self,
        parameter_name: str,
        actual_shape: tuple[int, ...],
        expected_ndim: int | None = None,
        expected_shape: tuple[int | None, ...] | None = None,
        suggestion: str | None = None,
    ) -> None:
        if expected_ndim is not None:
            expected = f"{expected_ndim}D tensor"
        elif expected_shape is not None:
            expected = f"shape {expected_shape}"
        else:
            expected = "valid tensor shape"

        super().__init__(
            message=f"Invalid tensor shape for {parameter_name}",
            parameter_name=parameter_name,
            actual_value=f"shape {actual_shape}",
            expected=expected,
            suggestion=suggestion,
        )


class InvalidTypeError(InvalidParameterError):
    """Exception raised when a parameter has an invalid type.

    Parameters
    ----------
    parameter_name : str
        Name of the parameter.
    actual_type : type
        The actual type of the value.
    expected_types : tuple[type, ...]
        Tuple of expected types.

    """

    def __init__(
        self,
        parameter_name: str,
        actual_type: type,
        expected_types: tuple[type, ...],
    ) -> None:
        expected_names = ", ".join(t.__name__ for t in expected_types)
        super().__init__(
            message=f"Invalid type for {parameter_name}",
            parameter_name=parameter_name,
            actual_value=actual_type.__name__,
            expected=expected_names,
        )


# =============================================================================
# Parameter creation errors
# =============================================================================


class ParameterError(InvalidParameterError):
    """Base class for errors raised while creating transform parameters.

    These are always raised synchronously by
    :func:`torchcqt.params.create_parameters`, never later.

    """

    pass


class InvalidBinCountError(ParameterError):
    """Raised when the bins-per-octave count is not a positive integer.

    Examples
    --------
    >>> raise InvalidBinCountError(0)
    Traceback (most recent call last):
        ...
    torchcqt.validation.exceptions.InvalidBinCountError: ...

    """

    def __init__(self, actual_value: Any) -> None:
        super().__init__(
            message="Bins per octave must be a positive integer",
            parameter_name="num_bins",
            actual_value=actual_value,
            expected="integer > 0",
            suggestion="12 bins per octave gives semitone resolution",
        )


class InvalidFrequencyRangeError(ParameterError):
    """Raised when ``min_frequency`` is not positive or not below ``max_frequency``."""

    def __init__(self, min_frequency: float, max_frequency: float) -> None:
        self.min_frequency = min_frequency
        self.max_frequency = max_frequency
        super().__init__(
            message="Frequency range must satisfy 0 < min_frequency < max_frequency",
            parameter_name="min_frequency, max_frequency",
            actual_value=(min_frequency, max_frequency),
            expected="0 < min_frequency < max_frequency",
        )


class NyquistViolationError(ParameterError):
    """Raised when ``max_frequency`` is not below half the sampling rate."""

    def __init__(self, max_frequency: float, sampling_rate: float) -> None:
        self.max_frequency = max_frequency
        self.sampling_rate = sampling_rate
        super().__init__(
            message="Maximum frequency must be below the Nyquist frequency",
            parameter_name="max_frequency",
            actual_value=max_frequency,
            expected=f"< {sampling_rate / 2} (sampling_rate / 2)",
            suggestion="Lower max_frequency or raise sampling_rate",
        )


class WindowTooShortError(ParameterError):
    """Raised when the analysis window cannot resolve the minimum frequency.

    Parameters
    ----------
    actual_value : Any
        The window length that was provided.
    min_length : int | None, optional
        The smallest acceptable window length, when it could be derived.
    reason : str | None, optional
        Overrides the default message.

    """

    def __init__(
        self,
        actual_value: Any,
        min_length: int | None = None,
        reason: str | None = None,
    ) -> None:
        self.min_length = min_length
        expected = f"integer >= {min_length}" if min_length is not None else "positive integer"
        super().__init__(
            message=reason or "Window length is too short to resolve min_frequency",
            parameter_name="window_length",
            actual_value=actual_value,
            expected=expected,
            suggestion="Increase window_length or raise min_frequency",
        )


# =============================================================================
# FFT primitive errors
# =============================================================================


class FFTFailure(CQTError):
    """Raised by :func:`torchcqt.fft.transform` when a transform cannot be computed.

    Parameters
    ----------
    reason : str
        What went wrong (size mismatch, non-finite output, backend error).
    size : int | None, optional
        The requested transform size.

    """

    def __init__(self, reason: str, size: int | None = None) -> None:
        self.reason = reason
        self.size = size
        message = f"FFT failed: {reason}"
        if size is not None:
            message += f" (size={size})"
        super().__init__(message=message)


# =============================================================================
# Processing errors
# =============================================================================


class AudioProcessingError(CQTError):
    """Exception raised during filterbank construction or transform operations.

    This error indicates a problem during the actual processing of audio,
    not during parameter validation.

    Parameters
    ----------
    message : str
        Human-readable error message.
    suggestion : str | None, optional
        A suggestion for fixing the error.

    """

    pass


class BuildError(AudioProcessingError):
    """Raised when the constant-Q filterbank cannot be assembled.

    The construction attempt is abandoned; create a new transform.

    """

    pass


class BuildFFTError(BuildError):
    """Raised when the FFT primitive fails while assembling a kernel row.

    Parameters
    ----------
    bin_index : int
        The bin whose kernel row could not be transformed.
    reason : str
        The underlying failure.

    """

    def __init__(self, bin_index: int, reason: str) -> None:
        self.bin_index = bin_index
        super().__init__(
            message=f"FFT failed while building kernel row for bin {bin_index}: {reason}",
            suggestion="Recreate the transform; the filterbank was not built",
        )


class ProcessError(AudioProcessingError):
    """Base class for errors of a single transform call.

    The transform instance and its filterbank stay valid and reusable.

    """

    pass


class InsufficientSamplesError(ProcessError):
    """Raised when the input is shorter than one analysis window.

    Parameters
    ----------
    num_samples : int
        Number of samples available for framing.
    window_length : int
        Samples required for a single frame.

    Examples
    --------
    >>> raise InsufficientSamplesError(1024, 4096)
    Traceback (most recent call last):
        ...
    torchcqt.validation.exceptions.InsufficientSamplesError: ...

    """

    def __init__(
        self,
        num_samples: int,
        window_length: int,
        message: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        self.num_samples = num_samples
        self.window_length = window_length
        super().__init__(
            message=message
            or f"Need at least {window_length} samples for one frame, got {num_samples}",
            suggestion=suggestion or "Provide a longer signal or use center=True",
        )


class InvalidHopSizeError(InsufficientSamplesError):
    """Raised when the hop size is not a positive integer.

    No frame can be formed without a positive hop, so this is reported as a
    special case of :class:`InsufficientSamplesError`.

    """

    def __init__(self, hop_size: Any, num_samples: int, window_length: int) -> None:
        self.hop_size = hop_size
        super().__init__(
            num_samples=num_samples,
            window_length=window_length,
            message=f"Hop size must be a positive integer, got {hop_size!r}",
            suggestion=f"A quarter of the window ({max(window_length // 4, 1)}) is a common choice",
        )


class ProcessFFTError(ProcessError):
    """Raised when the FFT primitive fails on any frame of a transform call.

    No partial feature matrix is returned.

    """

    def __init__(self, reason: str) -> None:
        super().__init__(
            message=f"FFT failed while transforming frames: {reason}",
            suggestion="Check the input for NaN or infinite samples",
        )
