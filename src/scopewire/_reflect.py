from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, Protocol


if TYPE_CHECKING:
    from collections.abc import Callable, Mapping


_NAMED_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.KEYWORD_ONLY,
)


class Reflector(Protocol):
    def parameter_names(self, func: Callable[..., Any]) -> list[str]: ...


class SignatureReflector:
    """Reads declared parameter names with `inspect.signature`.

    `*args` and `**kwargs` are skipped. Callables without an introspectable
    signature (some builtins and C extensions) report no parameters.
    """

    def parameter_names(self, func: Callable[..., Any]) -> list[str]:
        return [p.name for p in named_parameters(func)]


def named_parameters(func: Callable[..., Any]) -> list[inspect.Parameter]:
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return []
    return [p for p in sig.parameters.values() if p.kind in _NAMED_KINDS]


def apply(func: Callable[..., Any], values: Mapping[str, Any]) -> Any:
    """Call `func` with `values` keyed by parameter name.

    A value of `inspect.Parameter.empty` marks a parameter nothing was found for:
    it receives the parameter's default when there is one, otherwise None.
    When every name is a parameter of `func`'s signature, keyword-only parameters
    are passed by keyword and everything else positionally. Otherwise (a reflector
    reporting other names, or no signature at all) the values are passed
    positionally in the order given.
    """
    try:
        sig = inspect.signature(func)
    except (TypeError, ValueError):
        return func(*_positional(values))

    named = {name for name, p in sig.parameters.items() if p.kind in _NAMED_KINDS}
    if not set(values) <= named:
        return func(*_positional(values))

    args: list[Any] = []
    kwargs: dict[str, Any] = {}
    for name, p in sig.parameters.items():
        if p.kind not in _NAMED_KINDS:
            continue

        value = values.get(name, inspect.Parameter.empty)
        if value is inspect.Parameter.empty:
            value = None if p.default is inspect.Parameter.empty else p.default

        if p.kind is inspect.Parameter.KEYWORD_ONLY:
            kwargs[name] = value
        else:
            args.append(value)

    return func(*args, **kwargs)


def _positional(values: Mapping[str, Any]) -> list[Any]:
    return [None if v is inspect.Parameter.empty else v for v in values.values()]
