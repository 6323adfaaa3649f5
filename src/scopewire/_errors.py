from __future__ import annotations


class ScopewireError(Exception):
    """Base class for errors raised by scopewire."""


class InvalidKeyError(ScopewireError, TypeError):
    """Raised when a container is asked to register something that cannot be a key."""


class ModuleLoadError(ScopewireError, ImportError):
    """Raised when a module identifier cannot be turned into a value."""
