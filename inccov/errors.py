"""Inccov-specific exceptions."""


class InccovError(Exception):
    """Base class for failures that abort an inccov run.

    The CLI prints the message and exits non-zero so that CI treats the
    incremental coverage step as failed.
    """


class ManifestError(InccovError):
    """Raised when the module manifest is missing or declares no module."""


class DiffError(InccovError):
    """Raised when the diff text cannot be obtained."""


class ProfileParseError(InccovError):
    """Raised when the coverage profile is missing or malformed."""


class OutputError(InccovError):
    """Raised when the incremental profile cannot be written."""


class ConfigError(InccovError):
    """Raised when a configuration file sets an option to the wrong type."""
