"""Invoke opcodes."""
from __future__ import annotations
from typing import TYPE_CHECKING
from dexspectre.execution.dispatcher import OpcodeResult, opcode_handler
from dexspectre.execution.instructions import INVOKE_OPCODE_NAMES, InvokeInstruction
if TYPE_CHECKING:
    from dexspectre.core.context import ExecutionContext
    from dexspectre.execution.dispatcher import OpcodeDispatcher
@opcode_handler(*sorted(INVOKE_OPCODE_NAMES))
def handle_invoke(
    instr: InvokeInstruction, ctx: ExecutionContext, index: int, dispatcher: OpcodeDispatcher
) -> OpcodeResult:
    """Apply a call's effect on the caller's registers."""
    outcome = dispatcher.invoker.execute(ctx, instr, index)
    return OpcodeResult.continue_with(ctx, outcome)
