"""Specialized exceptions raised by cph.

Exception hierarchy::

    CphError (base for all cph errors)
        ConfigError (invalid configuration file, also ValueError)
        SessionError (AWS session or credentials cannot be established)
        RemoteCallError (a CodePipeline/STS API call failed)
        SelectionError (user selection could not be parsed, also ValueError)
            UnrecognizedInputError (input matches no known form)
            InvalidRangeError (range is reversed or wider than the listing)
            OutOfRangeError (index outside the listed pipelines)
"""

from __future__ import annotations


class CphError(Exception):
    """Base exception for all cph errors.

    All cph-specific exceptions inherit from this class, allowing the CLI
    to catch and render any of them in one place.
    """


class ConfigError(CphError, ValueError):
    """Configuration file is invalid.

    Raised when the YAML file cannot be parsed or a value has the wrong
    type or is out of bounds.
    """


class SessionError(CphError):
    """An AWS session could not be established.

    Raised when the profile does not exist, credentials cannot be resolved
    or no region is configured. Always fatal for the invocation.
    """


class RemoteCallError(CphError):
    """A remote API call failed.

    Attributes:
        operation: Name of the API operation (e.g. ``StartPipelineExecution``).
        pipeline_name: Pipeline the call targeted, if any.
        reason: Description of the failure.
    """

    def __init__(self, operation: str, reason: str, *, pipeline_name: str | None = None) -> None:
        """Initialize RemoteCallError.

        Args:
            operation: Name of the API operation that failed.
            reason: Description of the failure.
            pipeline_name: Pipeline the call targeted, if any.
        """
        target = f" for pipeline '{pipeline_name}'" if pipeline_name else ""
        super().__init__(f"{operation} failed{target}: {reason}")
        self.operation = operation
        self.pipeline_name = pipeline_name
        self.reason = reason


class SelectionError(CphError, ValueError):
    """The user's selection could not be turned into pipeline indices.

    Attributes:
        raw: The input line as typed by the user.
    """

    def __init__(self, message: str, raw: str) -> None:
        """Initialize SelectionError.

        Args:
            message: Human-readable error message.
            raw: The input line as typed by the user.
        """
        super().__init__(message)
        self.raw = raw


class UnrecognizedInputError(SelectionError):
    """Input is not yes/no/reject, a number, a range or a list."""

    def __init__(self, raw: str) -> None:
        """Initialize UnrecognizedInputError.

        Args:
            raw: The input line as typed by the user.
        """
        super().__init__(f"Input not recognised: {raw!r}", raw)


class InvalidRangeError(SelectionError):
    """Range is reversed, empty, or wider than the number of pipelines.

    Attributes:
        start: Lower bound as typed.
        end: Upper bound as typed.
    """

    def __init__(self, raw: str, start: int, end: int, reason: str) -> None:
        """Initialize InvalidRangeError.

        Args:
            raw: The input line as typed by the user.
            start: Lower bound as typed.
            end: Upper bound as typed.
            reason: Why the range was rejected.
        """
        super().__init__(f"Invalid range {start}-{end}: {reason}", raw)
        self.start = start
        self.end = end


class OutOfRangeError(SelectionError):
    """A selected index lies outside ``[1, count]``.

    Attributes:
        index: The offending index.
        count: Number of pipelines currently listed.
    """

    def __init__(self, raw: str, index: int, count: int) -> None:
        """Initialize OutOfRangeError.

        Args:
            raw: The input line as typed by the user.
            index: The offending index.
            count: Number of pipelines currently listed.
        """
        super().__init__(f"Selection {index} is out of bounds (1-{count})", raw)
        self.index = index
        self.count = count


__all__ = [
    "ConfigError",
    "CphError",
    "InvalidRangeError",
    "OutOfRangeError",
    "RemoteCallError",
    "SelectionError",
    "SessionError",
    "UnrecognizedInputError",
]
