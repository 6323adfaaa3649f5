from __future__ import annotations

import hashlib
import importlib
import importlib.util
import logging
import os
import sys
from pathlib import Path
from types import ModuleType
from typing import Protocol

from ._errors import ModuleLoadError


logger = logging.getLogger(__name__)

MODULE_SUFFIX = ".py"


class Loader(Protocol):
    def load(self, identifier: str) -> object: ...


def split_identifier(identifier: str) -> tuple[str, str | None]:
    """Split `reference[:attribute]`.

    The colon only counts as a separator when what follows is a dotted Python
    identifier, so drive letters like `C:\\` stay part of the reference.
    """
    reference, sep, attribute = identifier.rpartition(":")
    if sep and reference and all(part.isidentifier() for part in attribute.split(".")):
        return reference, attribute
    return identifier, None


def is_file_reference(reference: str) -> bool:
    return reference.endswith(MODULE_SUFFIX) or "/" in reference or os.sep in reference


def camel_case(stem: str) -> str:
    return "".join(part[:1].upper() + part[1:] for part in stem.split("_") if part)


class ModuleLoader:
    """Turns module identifiers into values.

    Identifiers look like `reference[:attribute]`:

    - `./services/mailer.py`, `/srv/app/mailer.py`: a Python file, executed once and
      cached in `sys.modules` under a name derived from its absolute path.
    - `app.services.mailer`: an importable module.

    Without an explicit attribute, the module's export is picked by convention:
    the CamelCase form of the module stem (`mailer_service` -> `MailerService`),
    then an attribute named exactly like the stem, then the module itself.
    """

    def load(self, identifier: str) -> object:
        reference, attribute = split_identifier(identifier)

        if is_file_reference(reference):
            module = self._load_file(Path(reference))
            stem = Path(reference).stem
        else:
            module = self._import(reference)
            stem = reference.rpartition(".")[2]

        value = self._export(module, stem, attribute, identifier)
        logger.debug("Loaded %r from module %s", identifier, module.__name__)
        return value

    def _import(self, name: str) -> ModuleType:
        try:
            return importlib.import_module(name)
        except ImportError as e:
            msg = f"Cannot import module {name!r}: {e}"
            raise ModuleLoadError(msg, name=name) from e

    def _load_file(self, path: Path) -> ModuleType:
        path = self._find_file(path.resolve())

        digest = hashlib.sha1(str(path).encode(), usedforsecurity=False).hexdigest()[:12]
        module_name = f"_scopewire_{path.stem}_{digest}"
        if module_name in sys.modules:
            return sys.modules[module_name]

        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            msg = f"Cannot load module from {str(path)!r}"
            raise ModuleLoadError(msg, path=str(path))

        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            del sys.modules[module_name]
            msg = f"Error while executing {str(path)!r}: {e}"
            raise ModuleLoadError(msg, path=str(path)) from e

        return module

    def _find_file(self, path: Path) -> Path:
        """Accept `mailer.py`, `mailer` (for `mailer.py`) and package directories."""
        for candidate in (path, path.with_name(path.name + MODULE_SUFFIX), path / "__init__.py"):
            if candidate.is_file():
                return candidate

        msg = f"No module file at {str(path)!r}"
        raise ModuleLoadError(msg, path=str(path))

    def _export(self, module: ModuleType, stem: str, attribute: str | None, identifier: str) -> object:
        if attribute is not None:
            value: object = module
            try:
                for part in attribute.split("."):
                    value = getattr(value, part)
            except AttributeError as e:
                msg = f"{identifier!r}: module {module.__name__} has no attribute {attribute!r}"
                raise ModuleLoadError(msg, name=module.__name__) from e
            return value

        for candidate in (camel_case(stem), stem):
            if candidate and hasattr(module, candidate):
                return getattr(module, candidate)

        return module
