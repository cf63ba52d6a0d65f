"""Shared constants for prune-overrides."""

from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit codes for the CLI."""

    SUCCESS = 0  # no redundant overrides, or fixes were applied
    REDUNDANT_FOUND = 1
    ERROR = 2


# Timeout for a single npm invocation, in seconds
DEFAULT_NPM_TIMEOUT = 120.0

TEMP_DIR_PREFIX = "prune-overrides-"

PACKAGE_JSON = "package.json"
PACKAGE_LOCK = "package-lock.json"
INSTALL_ROOT = "node_modules"

SHARE_BASE_URL = "https://pkief.github.io/prune-overrides/"
