from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class BindingState(Enum):
    UNRESOLVED = "unresolved"  # module reference not loaded yet
    LOADED = "loaded"
    REALIZED = "realized"  # singleton factory result, terminal


@dataclass
class Binding:
    """A key's definition plus the flags controlling how `get` treats it.

    Transitions only move forward:
    UNRESOLVED -> LOADED -> REALIZED. An intact binding never leaves LOADED.
    """

    key: str
    definition: object
    singleton: bool = False
    intact: bool = False
    state: BindingState = BindingState.LOADED

    def __post_init__(self) -> None:
        if isinstance(self.definition, str) and not self.intact:
            self.state = BindingState.UNRESOLVED

    @property
    def is_factory(self) -> bool:
        return self.state is BindingState.LOADED and not self.intact and callable(self.definition)

    def loaded(self, value: object) -> None:
        if self.state is not BindingState.UNRESOLVED:
            msg = f"Binding {self.key!r} is already loaded"
            raise RuntimeError(msg)
        self.definition = value
        self.state = BindingState.LOADED

    def realized(self, value: object) -> None:
        self.definition = value
        # a factory may return another callable; it must never be invoked again
        self.intact = True
        self.state = BindingState.REALIZED
