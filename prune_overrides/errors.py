"""Error types raised by prune-overrides.

Every error carries a stable machine-readable ``code`` next to the human
message so the CLI can print structured JSON errors.
"""


class PruneOverridesError(Exception):
    """Base error for all domain failures."""

    def __init__(self, message: str, code: str):
        super().__init__(message)
        self.message = message
        self.code = code


class PackageJsonError(PruneOverridesError):
    """package.json cannot be found, parsed or written."""

    def __init__(self, message: str):
        super().__init__(message, "PACKAGE_JSON_ERROR")


class LockfileError(PruneOverridesError):
    """package-lock.json cannot be found or parsed."""

    def __init__(self, message: str):
        super().__init__(message, "LOCKFILE_ERROR")


class NpmError(PruneOverridesError):
    """npm could not be run, or a required npm command failed."""

    def __init__(self, message: str, command: str, stderr: str | None = None):
        super().__init__(message, "NPM_ERROR")
        self.command = command
        self.stderr = stderr


class WorkspaceError(PruneOverridesError):
    """A temporary trial workspace could not be created."""

    def __init__(self, message: str):
        super().__init__(message, "WORKSPACE_ERROR")


class ConfigError(PruneOverridesError):
    """Invalid command-line input."""

    def __init__(self, message: str):
        super().__init__(message, "CONFIG_ERROR")


class DecodeError(PruneOverridesError):
    """A share token could not be turned back into a report.

    ``code`` tells corrupted tokens (``DECOMPRESS_FAILED``,
    ``DECODE_INVALID_JSON``) apart from well-formed payloads of an
    unexpected shape (``DECODE_INVALID_STRUCTURE``, ``DECODE_UNKNOWN_FORMAT``).
    """

    DECOMPRESS_FAILED = "DECOMPRESS_FAILED"
    INVALID_JSON = "DECODE_INVALID_JSON"
    INVALID_STRUCTURE = "DECODE_INVALID_STRUCTURE"
    UNKNOWN_FORMAT = "DECODE_UNKNOWN_FORMAT"
