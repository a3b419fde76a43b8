"""Error kinds raised by avweaver operations.

Every error is terminal for the operation that raised it. The command
dispatcher reports the message and exits with status 1.
"""


class WeaverError(Exception):
    """Base error for avweaver."""


class ConfigError(WeaverError, ValueError):
    """Missing or unreadable config table, malformed header or settings."""


class SegmentError(WeaverError, ValueError):
    """Out-of-order, overlapping or otherwise unresolvable time ranges."""


class ProbeError(WeaverError, RuntimeError):
    """Duration lookup via ffprobe failed."""


class ArgumentError(WeaverError, ValueError):
    """A required command argument is absent."""


class ExternalToolError(WeaverError, RuntimeError):
    """ffmpeg exited with a non-zero status (or could not be started)."""

    def __init__(self, message: str, returncode: int | None = None, command=None):
        super().__init__(message)
        self.returncode = returncode
        self.command = list(command) if command else []
