"""Unknown-value marker for the symbolic register file.
An ``UnknownValue`` stands for a value that exists at runtime but cannot be
determined statically. Its origin records why: the register was never
analyzed, or a call with opaque effects invalidated it.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum, auto
import z3
UNRESOLVED_TYPE = "?"
class UnknownOrigin(Enum):
    """Why a value is unknown."""
    NEVER_ANALYZED = auto()
    INVALIDATED = auto()
@dataclass(frozen=True)
class UnknownValue:
    """Marker for a statically unknown value.
    Attributes:
        origin: Whether the value was never analyzed or was invalidated.
        reason: Free-form provenance, usually the method descriptor of the
            call that invalidated it.
    """
    origin: UnknownOrigin = UnknownOrigin.NEVER_ANALYZED
    reason: str = ""
    @staticmethod
    def invalidated(reason: str = "") -> UnknownValue:
        """Create a value invalidated by an opaque effect."""
        return UnknownValue(UnknownOrigin.INVALIDATED, reason)
    @property
    def is_invalidated(self) -> bool:
        return self.origin is UnknownOrigin.INVALIDATED
    def symbol(self, name: str, sort: z3.SortRef) -> z3.ExprRef:
        """Fresh z3 variable standing for this value."""
        return z3.FreshConst(sort, prefix=name)
    def __repr__(self) -> str:
        if self.reason:
            return f"Unknown({self.origin.name.lower()}: {self.reason})"
        return f"Unknown({self.origin.name.lower()})"
def is_unknown(value: object) -> bool:
    """Check whether a register value is an unknown marker."""
    return isinstance(value, UnknownValue)
