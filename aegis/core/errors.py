"""Aegis exception hierarchy."""


class ScanError(Exception):
    """Base class for errors surfaced to callers of a scan."""


class ProjectRootError(ScanError):
    """The project root does not exist or is not a directory."""


class RuleValidationError(ScanError):
    """A detection rule definition is malformed."""
