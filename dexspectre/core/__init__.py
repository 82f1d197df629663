"""Core data model: register stores, unknown values and execution contexts."""
from dexspectre.core.context import DEFAULT_CALL_DEPTH, ENTRY_POINT, ExecutionContext, create_initial_context
from dexspectre.core.registers import RegisterStore
from dexspectre.core.types import MethodReference
from dexspectre.core.values import UNRESOLVED_TYPE, UnknownOrigin, UnknownValue, is_unknown
__all__ = [
    "DEFAULT_CALL_DEPTH",
    "ENTRY_POINT",
    "ExecutionContext",
    "MethodReference",
    "RegisterStore",
    "UNRESOLVED_TYPE",
    "UnknownOrigin",
    "UnknownValue",
    "create_initial_context",
    "is_unknown",
]
