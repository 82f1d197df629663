"""Register stores: immutable snapshots of one register's type and value."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any
import z3
from dexspectre.core.types import const_to_z3, sort_for
from dexspectre.core.values import UNRESOLVED_TYPE, UnknownValue
@dataclass(frozen=True)
class RegisterStore:
    """Type and value held by a register at one program point.
    A write never mutates a store; it supersedes it with a new one.
    Attributes:
        type: Type descriptor; always set (``?`` when unresolved).
        value: Concrete value or an ``UnknownValue``.
    """
    type: str
    value: Any = UnknownValue()
    def __post_init__(self) -> None:
        if not self.type:
            raise ValueError("RegisterStore requires a type descriptor")
    @staticmethod
    def unknown(type: str = UNRESOLVED_TYPE, reason: str = "") -> RegisterStore:
        """Store whose value was invalidated by an opaque effect."""
        return RegisterStore(type, UnknownValue.invalidated(reason))
    @property
    def is_known(self) -> bool:
        return not isinstance(self.value, UnknownValue)
    def with_type(self, type: str) -> RegisterStore:
        """Same value viewed under a different declared type."""
        return RegisterStore(type, self.value)
    def to_z3(self, name: str) -> z3.ExprRef | None:
        """Express this store as a z3 term.
        Args:
            name: Prefix for the fresh variable used when the value is unknown.
        Returns:
            A constant for concrete primitives, a fresh variable for unknown
            primitives, or None for reference types.
        """
        sort = sort_for(self.type)
        if sort is None:
            return None
        if isinstance(self.value, UnknownValue):
            return self.value.symbol(name, sort)
        return const_to_z3(self.value, self.type)
    def __repr__(self) -> str:
        return f"RegisterStore({self.type}, {self.value!r})"
