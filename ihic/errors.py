"""Exceptions raised while building the item pages."""


class BuildError(RuntimeError):
    """Base class for failures that abort a build run."""


class SourceNotFoundError(BuildError):
    """The configured source file does not exist."""

    def __init__(self, path):
        self.path = path
        super().__init__(f"Missing source file at {path}")


class SourceFormatError(BuildError):
    """The source file could not be read as a table of item records."""
