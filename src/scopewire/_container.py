from __future__ import annotations

import functools
import inspect
import logging
import os
from collections import ChainMap
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from ._binding import Binding, BindingState
from ._errors import InvalidKeyError
from ._loader import MODULE_SUFFIX, ModuleLoader, is_file_reference, split_identifier
from ._reflect import SignatureReflector, apply, named_parameters


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from ._loader import Loader
    from ._reflect import Reflector

    Key = str | Sequence[Any] | Mapping[str, Any] | Container

# Marks "nothing registered"; distinct from a binding whose value is None.
_EMPTY = inspect.Parameter.empty

_OMITTED: Any = object()

_SCALARS = (str, bytes, bytearray, int, float, complex, bool)

SELF_KEY = "ioc"


class _NullContainer:
    """Parent of root containers and sub-containers: knows nothing, injects nothing."""

    def has(self, key: object) -> bool:
        return False

    def get(self, key: object, args: Mapping[str, Any] | None = None) -> None:
        return None

    def inflect(self, obj: object, args: Mapping[str, Any] | None = None) -> _NullContainer:
        return self

    def _lookup(self, key: str, args: Mapping[str, Any]) -> Any:
        return _EMPTY


_NULL = _NullContainer()


def normalize_key(key: str, *, identifier: bool = False) -> str:
    """Derive a binding key from a registered key.

    Path decoration is always stripped: `./services/MailerService.py` -> `mailerService`.
    When the key doubles as its own module identifier (`identifier=True`), the
    `:attribute` part or the last dotted module name is used as well:
    `collections:OrderedDict` -> `orderedDict`, `os.path` -> `path`.
    Keys without decoration are kept as is.
    """
    reference, attribute = split_identifier(key) if identifier else (key, None)
    if attribute is not None:
        name = attribute.rpartition(".")[2]
    else:
        name = reference.rpartition("/")[2]
        if os.sep != "/":
            name = name.rpartition(os.sep)[2]
        if name.endswith(MODULE_SUFFIX):
            name = name[: -len(MODULE_SUFFIX)]
        elif identifier and not is_file_reference(reference):
            name = name.rpartition(".")[2]

    if name == key:
        return key
    return name[:1].lower() + name[1:]


def _is_injectable(obj: object) -> bool:
    return not (
        obj is None
        or isinstance(obj, _SCALARS)
        or inspect.isclass(obj)
        or inspect.isroutine(obj)
        or inspect.ismodule(obj)
    )


class Container:
    """Hierarchical name-based DI container.

    - register values, factories, classes or module identifiers under string keys
    - resolve parameters by name, recursively
    - singletons, intact (literal) bindings and aliases
    - setter/property injection through inflectors
    - scopes (child containers with a parent) and sub-containers (owned, isolated).
    """

    def __init__(
        self,
        base_path: str | None = None,
        parent: Container | None = None,
        *,
        loader: Loader | None = None,
        reflector: Reflector | None = None,
    ) -> None:
        self._bindings: dict[str, Binding] = {}
        self._inflectors: list[str] = []
        self._subs: list[Container] = []
        self._loader: Loader = loader or ModuleLoader()
        self._reflector: Reflector = reflector or SignatureReflector()

        if isinstance(parent, Container):
            self._parent: Container | _NullContainer = parent
            self._base_path = base_path or parent._base_path
            self._aliases: ChainMap[str, str] = parent._aliases.new_child()
        else:
            self._parent = _NULL
            self._base_path = base_path or ""
            self._aliases = ChainMap()

        self.register(SELF_KEY, self, singleton=True, intact=True)

    @property
    def base_path(self) -> str:
        return self._base_path

    def parent(self) -> Container | _NullContainer:
        """Return the container this one was scoped from, or a null container."""
        return self._parent

    def register(
        self,
        key: Key,
        definition: Any = _OMITTED,
        singleton: bool = False,  # noqa: FBT001, FBT002
        intact: bool = False,  # noqa: FBT001, FBT002
    ) -> Container:
        """Register a definition under a key.

        - `key` is a container: it becomes a sub-container of this one.
        - `key` is a mapping: each name/definition pair is registered with default flags.
        - `key` is a list or tuple: each key is registered with the same definition and flags.
        - `key` is a string: callables are factories invoked on `get` (unless intact),
          strings are module identifiers loaded on `get` (unless intact), anything
          else is returned as is. Without a definition, the key is its own module
          identifier.

        Example:
          container.register("mailer", Mailer)
          container.register("./services/mailer_service.py")
          container.register({"host": "localhost", "port": 25})

        """
        if isinstance(key, Container):
            self._subs.append(key)
            logger.debug("Attached sub-container (%d total)", len(self._subs))
            return self

        if isinstance(key, str):
            self._register_one(key, definition, singleton=singleton, intact=intact)
            return self

        if isinstance(key, Mapping):
            for name, value in key.items():
                self.register(name, value)
            return self

        if isinstance(key, Sequence) and not isinstance(key, (bytes, bytearray)):
            for item in key:
                self.register(item, definition, singleton, intact)
            return self

        msg = f"Attempt to register invalid key {key!r} (expected str, sequence, mapping or Container)"
        raise InvalidKeyError(msg)

    def _register_one(self, key: str, definition: Any, *, singleton: bool, intact: bool) -> None:
        identifier = definition is _OMITTED
        if identifier:
            definition = key
        key = normalize_key(key, identifier=identifier)

        if isinstance(definition, str) and not intact and definition.startswith("."):
            definition = os.path.abspath(os.path.join(self._base_path, definition))  # noqa: PTH100, PTH118

        if key in self._bindings:
            logger.debug("Replacing binding %r", key)

        self._bindings[key] = Binding(key, definition, singleton=bool(singleton), intact=bool(intact))
        logger.debug("Registered %r (singleton=%s, intact=%s)", key, bool(singleton), bool(intact))

    def singleton(self, key: Key, definition: Any = _OMITTED) -> Container:
        """Register a factory that is invoked at most once; its result is reused."""
        return self.register(key, definition, True, False)  # noqa: FBT003

    def intact(self, key: Key, definition: Any = _OMITTED) -> Container:
        """Register a literal value: strings are never loaded, callables never invoked."""
        return self.register(key, definition, False, True)  # noqa: FBT003

    def alias(self, key: str, aliased_key: str) -> Container:
        """Make `key` resolve to whatever `aliased_key` resolves to at lookup time.

        Inherited by scopes, including aliases added after the scope was created.
        """
        self._aliases[key] = aliased_key
        return self

    def inflector(self, name: str) -> Container:
        """Register a setter method or attribute injected into every invoked object."""
        self._inflectors.append(name)
        return self

    def has(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return key in self._bindings or any(sub.has(key) for sub in self._subs) or self._parent.has(key)

    def get(self, key: object, args: Mapping[str, Any] | None = None) -> Any:
        """Resolve the key to a value.

        - aliases are followed first
        - keys missing locally are looked up in sub-containers, then in the parent
        - module identifiers are loaded once and the loaded value is kept
        - factories are invoked with `args` overriding resolved parameters; singleton
          factories ignore `args` and are invoked only once
        - missing keys resolve to None.
        """
        if not isinstance(key, str):
            return None
        value = self._lookup(key, args or {})
        return None if value is _EMPTY else value

    def _lookup(self, key: str, args: Mapping[str, Any]) -> Any:
        target = self._aliases.get(key)
        if target is not None:
            return self._lookup(target, args)

        binding = self._bindings.get(key)
        if binding is None:
            for sub in self._subs:
                if sub.has(key):
                    return sub._lookup(key, args)  # noqa: SLF001
            return self._parent._lookup(key, args)  # noqa: SLF001

        if binding.state is BindingState.UNRESOLVED:
            binding.loaded(self._loader.load(binding.definition))

        if not binding.is_factory:
            return binding.definition

        if binding.singleton:
            # singletons are never parameterized past their first construction
            result = self.invoke(binding.definition)
            binding.realized(result)
            logger.debug("Realized singleton %r", key)
            return result

        return self.invoke(binding.definition, args)

    def resolve(self, func: Callable[..., Any], args: Mapping[str, Any] | None = None) -> list[Any]:
        """Return the arguments `func` would be called with, in declaration order."""
        resolved = self._resolve_arguments(func, args or {})
        return [None if value is _EMPTY else value for value in resolved.values()]

    def _resolve_arguments(self, func: Callable[..., Any], args: Mapping[str, Any]) -> dict[str, Any]:
        """Resolution precedence per parameter name.

        1. explicit `args`
        2. name-based registration (this container, its sub-containers, its parents)
        3. nothing (`_EMPTY`): the parameter's default, or None, is used on call.
        """
        return {
            name: args[name] if name in args else self._lookup(name, args={})
            for name in self._reflector.parameter_names(func)
        }

    def invoke(self, func: Any, args: Mapping[str, Any] | None = None) -> Any:
        """Call `func` with its parameters resolved from the container.

        Classes are constructed and the new instance is the result; any other
        callable is a factory and its return value is the result. Non-callables are
        returned unchanged. Objects produced this way go through `inflect`.
        """
        if not callable(func):
            return func

        args = args or {}
        result = apply(func, self._resolve_arguments(func, args))

        if _is_injectable(result):
            self.inflect(result, args)

        return result

    def inflect(self, obj: object, args: Mapping[str, Any] | None = None) -> Container:
        """Apply the inflectors of this container and of every ancestor to `obj`.

        A callable attribute is called with its parameters resolved by name; a plain
        attribute is overwritten with the value from `args` or from the container,
        and left alone when neither provides one.
        """
        args = args or {}
        for container in self._lineage():
            container._apply_inflectors(obj, args)  # noqa: SLF001
        return self

    def _lineage(self) -> Iterator[Container]:
        container: Container | _NullContainer = self
        while isinstance(container, Container):
            yield container
            container = container._parent  # noqa: SLF001

    def _apply_inflectors(self, obj: object, args: Mapping[str, Any]) -> None:
        for name in self._inflectors:
            member = getattr(obj, name, _EMPTY)
            if member is _EMPTY:
                continue

            if callable(member):
                apply(member, self._resolve_arguments(member, args))
                continue

            value = args.get(name)
            if value is None:
                value = self.get(name)
            if value is not None:
                setattr(obj, name, value)

    def scope(self, definitions: Key | None = None) -> Container:
        """Create a child container that falls back to this one.

        Useful for per-request/per-test bindings without altering this container.
        """
        child = Container(self._base_path, self, loader=self._loader, reflector=self._reflector)
        return child.register(definitions or {})

    def sub(self, path: str | None = None, definitions: Key | None = None) -> Container:
        """Create an isolated container owned by this one.

        This container can resolve the sub-container's keys; the sub-container
        cannot see this container's keys. Mostly useful for module identifiers
        relative to another base path.
        """
        child = Container(path or self._base_path, loader=self._loader, reflector=self._reflector)
        self.register(child)
        return child.register(definitions or {})

    def prepare(
        self,
        keys: str | Sequence[str] | Callable[..., Any],
        func: Callable[..., Any] | None = None,
    ) -> Callable[..., Any]:
        """Partially apply `func` with values from the container.

        `keys` lists a key per parameter, as a sequence or a comma-separated string.
        An empty key leaves the parameter to be passed positionally when the
        returned function is called. When `keys` is a function, all of its
        parameters are bound by name.

        Example:
          greet = container.prepare(" ,console", greet)  # greet(saying, console)
          greet("hello")

        """
        if callable(keys):
            func = keys
            keys = self._reflector.parameter_names(func)
        elif isinstance(keys, str):
            keys = [key.strip() for key in keys.split(",")]
        else:
            keys = list(keys)

        if func is None:
            msg = "prepare() needs a function to apply"
            raise TypeError(msg)

        names = self._reflector.parameter_names(func)
        slots = [keys[i] if i < len(keys) else "" for i in range(len(names))]

        @functools.wraps(func, updated=())
        def prepared(*passed: Any) -> Any:
            remaining = iter(passed)
            values = {
                name: self.get(key) if key else next(remaining, _EMPTY)
                for name, key in zip(names, slots, strict=True)
            }
            return apply(func, values)

        del prepared.__wrapped__
        unbound = {i for i, key in enumerate(slots) if not key}
        params = [p for i, p in enumerate(named_parameters(func)) if i in unbound]
        prepared.__signature__ = inspect.Signature(params)  # type: ignore[attr-defined]
        return prepared


def create(
    base_path: str | None = None,
    parent: Container | None = None,
    *,
    loader: Loader | None = None,
    reflector: Reflector | None = None,
) -> Container:
    """Create a container; with `parent`, the container is a scope of it."""
    return Container(base_path, parent, loader=loader, reflector=reflector)
