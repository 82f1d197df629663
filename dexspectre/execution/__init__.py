"""Instruction execution: decoding, dispatch and call-site effects."""
from dexspectre.execution.dispatcher import OpcodeDispatcher, OpcodeResult, opcode_handler
from dexspectre.execution.instructions import (
    INVOKE_OPCODES,
    InvalidInstructionError,
    InvokeInstruction,
    get_invoke_registers,
)
from dexspectre.execution.invocation import (
    Disposition,
    InvocationDispatcher,
    InvocationResult,
    build_callee_context,
)
import dexspectre.execution.opcodes
__all__ = [
    "INVOKE_OPCODES",
    "Disposition",
    "InvalidInstructionError",
    "InvocationDispatcher",
    "InvocationResult",
    "InvokeInstruction",
    "OpcodeDispatcher",
    "OpcodeResult",
    "build_callee_context",
    "get_invoke_registers",
    "opcode_handler",
]
