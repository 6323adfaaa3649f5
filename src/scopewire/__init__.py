"""Hierarchical name-based dependency injection.

This package provides a small inversion-of-control container for Python. Values,
factories, classes and module identifiers are registered under string keys, and
parameters are resolved by matching their names against other keys.

Exports:
- `Container`: registry supporting singletons, literal ("intact") bindings, aliases,
  setter/property injection ("inflectors"), scopes, sub-containers and partial
  application (`prepare`).
- `create`: build a root container, or a scope of an existing one.
- `ModuleLoader` / `SignatureReflector`: default collaborators turning module
  identifiers into values and reading parameter names. Any object following the
  `Loader` / `Reflector` protocols can replace them.
"""

from ._binding import Binding, BindingState
from ._container import Container, create
from ._errors import InvalidKeyError, ModuleLoadError, ScopewireError
from ._loader import Loader, ModuleLoader
from ._reflect import Reflector, SignatureReflector


__all__ = [
    "Binding",
    "BindingState",
    "Container",
    "InvalidKeyError",
    "Loader",
    "ModuleLoadError",
    "ModuleLoader",
    "Reflector",
    "ScopewireError",
    "SignatureReflector",
    "create",
]
