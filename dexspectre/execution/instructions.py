"""Invoke instructions and their register addressing.
Two encodings name the argument registers of a call:
- compact (format 35c): up to five individually encoded registers,
  ``vC`` through ``vG``;
- range (format 3rc): a start register and a count.
"""
from __future__ import annotations
from dataclasses import dataclass
from dexspectre.core.types import MethodReference
INVOKE_OPCODES = {
    0x6E: "invoke-virtual",
    0x6F: "invoke-super",
    0x70: "invoke-direct",
    0x71: "invoke-static",
    0x72: "invoke-interface",
    0x74: "invoke-virtual/range",
    0x75: "invoke-super/range",
    0x76: "invoke-direct/range",
    0x77: "invoke-static/range",
    0x78: "invoke-interface/range",
}
INVOKE_OPCODE_NAMES = frozenset(INVOKE_OPCODES.values())
MAX_COMPACT_REGISTERS = 5
# Positional accessors of the compact encoding, by argument slot.
COMPACT_SLOTS = ("register_c", "register_d", "register_e", "register_f", "register_g")
class InvalidInstructionError(ValueError):
    """Raised for a structurally malformed invoke instruction."""
@dataclass(frozen=True)
class InvokeInstruction:
    """A decoded invoke instruction.
    Attributes:
        opcode: Opcode name, e.g. ``invoke-virtual`` or ``invoke-static/range``.
        method: The resolved method reference.
        register_count: Number of argument registers.
        register_c..register_g: Compact-encoding register slots.
        start_register: First register of the range encoding.
    """
    opcode: str
    method: MethodReference
    register_count: int = 0
    register_c: int = 0
    register_d: int = 0
    register_e: int = 0
    register_f: int = 0
    register_g: int = 0
    start_register: int = 0
    def __post_init__(self) -> None:
        if self.opcode not in INVOKE_OPCODE_NAMES:
            raise InvalidInstructionError(f"Not an invoke opcode: {self.opcode}")
        if self.register_count < 0 or self.start_register < 0:
            raise InvalidInstructionError(f"Negative register field in {self.opcode}")
        if not self.is_range and self.register_count > MAX_COMPACT_REGISTERS:
            raise InvalidInstructionError(
                f"{self.opcode} encodes at most {MAX_COMPACT_REGISTERS} registers, "
                f"got {self.register_count}"
            )
    @property
    def is_range(self) -> bool:
        return self.opcode.endswith("/range")
    @property
    def is_static(self) -> bool:
        return self.opcode.startswith("invoke-static")
    @property
    def format(self) -> str:
        return "3rc" if self.is_range else "35c"
    @classmethod
    def from_registers(cls, opcode: str, method: MethodReference, *registers: int) -> InvokeInstruction:
        """Build a compact-encoded invoke from its argument registers."""
        if len(registers) > MAX_COMPACT_REGISTERS:
            raise InvalidInstructionError(f"Too many registers for {opcode}: {len(registers)}")
        slots = dict(zip(COMPACT_SLOTS, registers))
        return cls(opcode=opcode, method=method, register_count=len(registers), **slots)
    @classmethod
    def from_range(cls, opcode: str, method: MethodReference, start: int, count: int) -> InvokeInstruction:
        """Build a range-encoded invoke."""
        if not opcode.endswith("/range"):
            opcode = f"{opcode}/range"
        return cls(opcode=opcode, method=method, register_count=count, start_register=start)
    def __str__(self) -> str:
        regs = ", ".join(f"v{r}" for r in get_invoke_registers(self))
        return f"{self.opcode} {{{regs}}}, {self.method.descriptor}"
def get_invoke_registers(instruction: InvokeInstruction) -> list[int]:
    """Decode the caller registers supplying a call's arguments.
    The instance register, if any, comes first. Range encoding yields
    ``start .. start + count - 1``. Compact encoding fills the result from
    the declared count downward: the highest present slot is assigned
    first and every lower slot is filled after it, so a count of ``n``
    always yields slots ``vC`` through the ``n``-th accessor.
    Args:
        instruction: The invoke instruction.
    Returns:
        Register indices in argument order.
    """
    count = instruction.register_count
    if instruction.is_range:
        start = instruction.start_register
        return [start + i for i in range(count)]
    if count > MAX_COMPACT_REGISTERS:
        raise InvalidInstructionError(f"Compact invoke with {count} registers")
    result = [0] * count
    for slot in range(count - 1, -1, -1):
        result[slot] = getattr(instruction, COMPACT_SLOTS[slot])
    return result
