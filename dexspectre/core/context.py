"""Execution contexts for method activations.
An ``ExecutionContext`` owns the register file of a single method
activation. Registers are indexed by register number and program point, so
the same slot can hold different stores at different points of one method
and lookups can walk backward to the most recent write.
"""
from __future__ import annotations
from bisect import bisect_right, insort
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any
from dexspectre.core.registers import RegisterStore
from dexspectre.core.types import is_wide
from dexspectre.core.values import UNRESOLVED_TYPE, UnknownValue
_UNWRITTEN = RegisterStore(UNRESOLVED_TYPE, UnknownValue())
DEFAULT_CALL_DEPTH = 50
# Parameter bindings precede the first instruction, so a write at point 0
# supersedes them without erasing them.
ENTRY_POINT = -1
@dataclass
class ExecutionContext:
    """Register file, call-depth budget and parameter bindings of one activation.
    Parameters occupy the last ``parameter_size`` registers, starting at
    ``parameter_start``. Parameter bindings are written at ``ENTRY_POINT``.
    Attributes:
        register_count: Number of registers in the frame.
        parameter_size: Number of registers holding incoming arguments.
        remaining_call_depth: How many more nested activations may be built.
        result_register: Value produced by the last invoke, for move-result.
        return_register: Value this activation returns, if computed.
    """
    register_count: int
    parameter_size: int = 0
    remaining_call_depth: int = DEFAULT_CALL_DEPTH
    result_register: RegisterStore | None = None
    return_register: RegisterStore | None = None
    _registers: dict[int, dict[int, RegisterStore]] = field(default_factory=dict, repr=False)
    _points: dict[int, list[int]] = field(default_factory=dict, repr=False)
    def __post_init__(self) -> None:
        if self.remaining_call_depth < 0:
            raise ValueError(f"Negative call-depth budget: {self.remaining_call_depth}")
        if not 0 <= self.parameter_size <= self.register_count:
            raise ValueError(
                f"Parameter region of {self.parameter_size} does not fit "
                f"{self.register_count} registers"
            )
    @property
    def parameter_start(self) -> int:
        """Index of the first parameter register."""
        return self.register_count - self.parameter_size
    def _check_register(self, register: int) -> None:
        if not 0 <= register < self.register_count:
            raise IndexError(f"Register v{register} outside frame of {self.register_count}")
    def set_register(self, register: int, store: RegisterStore, index: int) -> None:
        """Write a store to a register at a program point."""
        self._check_register(register)
        slots = self._registers.setdefault(register, {})
        if index not in slots:
            insort(self._points.setdefault(register, []), index)
        slots[index] = store
    def add_register(self, register: int, type: str, value: Any, index: int) -> None:
        """Write a new typed value to a register at a program point."""
        self.set_register(register, RegisterStore(type, value), index)
    def get_register(self, register: int, index: int) -> RegisterStore:
        """Get the store visible in a register at a program point.
        Returns:
            The store written at the greatest program point not after
            ``index``, or an unresolved, never-analyzed store if the register
            was not written yet.
        """
        self._check_register(register)
        points = self._points.get(register)
        if not points:
            return _UNWRITTEN
        pos = bisect_right(points, index)
        if pos == 0:
            return _UNWRITTEN
        return self._registers[register][points[pos - 1]]
    def get_register_value(self, register: int, index: int) -> Any:
        return self.get_register(register, index).value
    def get_register_type(self, register: int, index: int) -> str:
        return self.get_register(register, index).type
    def get_register_history(self, register: int) -> list[tuple[int, RegisterStore]]:
        """All writes to a register, ordered by program point."""
        self._check_register(register)
        slots = self._registers.get(register, {})
        return [(point, slots[point]) for point in self._points.get(register, [])]
    def is_written(self, register: int) -> bool:
        return bool(self._points.get(register))
    def add_parameter_register(self, parameter: int, store: RegisterStore) -> None:
        """Bind a store into the parameter region.
        Args:
            parameter: Position relative to ``parameter_start``.
            store: Incoming type and value.
        """
        if not 0 <= parameter < self.parameter_size:
            raise IndexError(f"Parameter p{parameter} outside region of {self.parameter_size}")
        self.set_register(self.parameter_start + parameter, store, ENTRY_POINT)
    def get_parameter_register(self, parameter: int) -> RegisterStore:
        return self.get_register(self.parameter_start + parameter, ENTRY_POINT)
    def parameter_registers(self) -> list[tuple[int, RegisterStore]]:
        """(register, store) pairs of the parameter region at entry."""
        return [
            (register, self.get_register(register, ENTRY_POINT))
            for register in range(self.parameter_start, self.register_count)
        ]
    def set_result_register(self, store: RegisterStore | None) -> None:
        self.result_register = store
    def get_result_register(self) -> RegisterStore | None:
        return self.result_register
    def set_return_register(self, store: RegisterStore) -> None:
        self.return_register = store
    def get_return_register(self) -> RegisterStore | None:
        return self.return_register
    def fork(self) -> ExecutionContext:
        """Copy of this context whose register file can be changed independently.
        Stores are immutable, so copying the per-register maps is sufficient.
        """
        return ExecutionContext(
            register_count=self.register_count,
            parameter_size=self.parameter_size,
            remaining_call_depth=self.remaining_call_depth,
            result_register=self.result_register,
            return_register=self.return_register,
            _registers={reg: dict(slots) for reg, slots in self._registers.items()},
            _points={reg: list(points) for reg, points in self._points.items()},
        )
    def snapshot(self, index: int) -> dict[int, RegisterStore]:
        """Stores visible in every written register at a program point."""
        return {
            register: self.get_register(register, index)
            for register in sorted(self._registers)
            if self.get_register(register, index) is not _UNWRITTEN
        }
    def __repr__(self) -> str:
        return (
            f"ExecutionContext(registers={self.register_count}, "
            f"params={self.parameter_size}, depth={self.remaining_call_depth})"
        )
def create_initial_context(
    register_count: int,
    parameter_types: Sequence[str] = (),
    call_depth: int = DEFAULT_CALL_DEPTH,
    instance_type: str | None = None,
    values: Iterable[Any] | None = None,
) -> ExecutionContext:
    """Create the context of a top-level method activation.
    Parameters are laid out at the tail of the register file, the instance
    first for non-static methods; wide parameters take a register pair.
    Args:
        register_count: Total registers of the method.
        parameter_types: Declared parameter descriptors.
        call_depth: Budget for nested activations.
        instance_type: Descriptor of ``this`` for non-static methods.
        values: Optional known incoming values, one per declared parameter
            (instance excluded); defaults to never-analyzed unknowns.
    Returns:
        A fresh ExecutionContext with the parameter region bound.
    """
    types = list(parameter_types)
    incoming = list(values) if values is not None else [UnknownValue()] * len(types)
    if len(incoming) != len(types):
        raise ValueError(f"Expected {len(types)} parameter values, got {len(incoming)}")
    size = sum(2 if is_wide(t) else 1 for t in types)
    if instance_type is not None:
        size += 1
    ctx = ExecutionContext(
        register_count=register_count,
        parameter_size=size,
        remaining_call_depth=call_depth,
    )
    slot = 0
    if instance_type is not None:
        ctx.add_parameter_register(slot, RegisterStore(instance_type, UnknownValue()))
        slot += 1
    for param_type, value in zip(types, incoming):
        store = RegisterStore(param_type, value)
        ctx.add_parameter_register(slot, store)
        slot += 1
        if is_wide(param_type):
            ctx.add_parameter_register(slot, store)
            slot += 1
    return ctx
