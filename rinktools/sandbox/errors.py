"""Errors raised while managing a sandboxed child process."""

from __future__ import annotations

from dataclasses import dataclass


def _format_duration(seconds: float) -> str:
    """Render a duration compactly, e.g. ``2s``, ``1.5s`` or ``500ms``."""
    if seconds >= 1:
        value, unit = seconds, "s"
    elif seconds >= 1e-3:
        value, unit = seconds * 1e3, "ms"
    elif seconds >= 1e-6:
        value, unit = seconds * 1e6, "µs"
    else:
        value, unit = seconds * 1e9, "ns"
    text = f"{value:.9f}".rstrip("0").rstrip(".")
    return f"{text}{unit}"


class SandboxError(Exception):
    """Base class for every failure of the sandbox machinery."""


class _SourcedError(SandboxError):
    """An error with a fixed message that wraps an underlying exception."""

    message = ""

    def __init__(self, source: BaseException | None = None) -> None:
        super().__init__(self.message)
        self.source = source
        self.__cause__ = source


class IoFailure(_SourcedError):
    """A generic input/output failure."""

    message = "IO error"


class ReceiveFailed(SandboxError):
    """The channel carrying responses was closed."""

    def __init__(self, message: str = "receiving from an empty and closed channel") -> None:
        super().__init__(message)
        self.message = message


class SendFailed(SandboxError):
    """Something could not be handed over to the other side."""

    def __init__(self, what: str) -> None:
        super().__init__(f"Failed to send {what}")
        self.what = what


class TimeoutExpired(SandboxError):
    """The child did not answer within the allowed time (in seconds)."""

    def __init__(self, duration: float) -> None:
        super().__init__(f"Timed out after {_format_duration(duration)}")
        self.duration = duration


class DecodeFailed(_SourcedError):
    """A value could not be serialized or deserialized."""

    message = "Serialization failed"


class ChildPanic(SandboxError):
    """The child process failed unexpectedly while handling a request."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Panic: {message}")
        self.message = message


class InitFailure(_SourcedError):
    """The child process could not be started."""

    message = "Failed to start child process"


class ReadFailed(_SourcedError):
    """Reading from the child failed."""

    message = "Failed to read from child"


class WriteFailed(_SourcedError):
    """Writing to the child failed."""

    message = "Failed to write to child"


class HandshakeFailure(SandboxError):
    """The child rejected its configuration during start-up."""

    def __init__(self, message: str) -> None:
        super().__init__(f"Failed to start child process: {message}")
        self.message = message


class Crashed(SandboxError):
    """The child process exited while a request was pending."""

    def __init__(self) -> None:
        super().__init__("Child process crashed")


class Interrupted(SandboxError):
    """The user interrupted the pending request."""

    def __init__(self) -> None:
        super().__init__("Interrupted")


@dataclass(frozen=True)
class PanicResponse:
    """Failure report sent by the child in place of a result."""

    message: str

    def to_error(self) -> ChildPanic:
        """Turn the report into the exception the parent raises."""
        return ChildPanic(self.message)