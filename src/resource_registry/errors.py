"""Exceptions raised while building the resource registry."""


class RegistryError(Exception):
    """Base class for registry build errors."""


class DocumentLoadError(RegistryError):
    """A single document could not be read or parsed.

    Raised per document; callers log it and move on to the next one.
    """

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load {path}: {reason}")


class InputRootError(RegistryError):
    """The input directory itself is unusable. This halts the whole build."""
