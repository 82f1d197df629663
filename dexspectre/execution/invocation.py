"""Invocation dispatch: the effect of a call site on the caller's registers.
For every invoke instruction the dispatcher builds the callee's register
context from the caller's state, classifies the call, and applies the
classification's effect to the caller:
- EMULATED: the return value is computed exactly by the emulation registry;
  no other caller register is touched.
- DEFERRED_KNOWN: the callee is declared in the class catalog but is not
  executed; the opaque effects apply.
- OPAQUE: the return value becomes unknown and every argument register of
  a mutable type is invalidated, since the callee may have changed any
  object reachable through it.
"""
from __future__ import annotations
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum, auto
from dexspectre.analysis.mutability import MutabilityOracle
from dexspectre.catalog import ClassCatalog
from dexspectre.core.context import ExecutionContext
from dexspectre.core.registers import RegisterStore
from dexspectre.core.types import MethodReference, is_wide
from dexspectre.core.values import UNRESOLVED_TYPE
from dexspectre.emulate.registry import EmulationRegistry, default_registry
from dexspectre.execution.instructions import (
    InvalidInstructionError,
    InvokeInstruction,
    get_invoke_registers,
)
from dexspectre.logging import DexSpectreLogger, get_logger
class Disposition(Enum):
    """How a call site is handled."""
    EMULATED = auto()
    DEFERRED_KNOWN = auto()
    OPAQUE = auto()
@dataclass
class InvocationResult:
    """Outcome of dispatching one invoke instruction.
    Attributes:
        disposition: How the call was classified.
        method: The invoked method.
        callee: The callee context built for the call.
        argument_registers: Caller registers supplying the arguments.
        result: Store written to the caller's result register, if any.
        invalidated: Caller registers replaced by unknown values.
        retained: Caller registers kept because their type is immutable.
        depth_exhausted: Whether the call-depth budget forced OPAQUE.
    """
    disposition: Disposition
    method: MethodReference
    callee: ExecutionContext
    argument_registers: list[int]
    result: RegisterStore | None = None
    invalidated: list[int] = field(default_factory=list)
    retained: list[int] = field(default_factory=list)
    depth_exhausted: bool = False
def build_callee_context(
    ctx: ExecutionContext,
    instruction: InvokeInstruction,
    method: MethodReference,
    index: int,
    registers: Sequence[int] | None = None,
) -> ExecutionContext:
    """Build the register context of the invoked method.
    The callee has one register per argument register, all of them in its
    parameter region. For non-static calls register 0 receives the caller's
    instance store unchanged; the remaining registers take the caller's
    values under the declared parameter types. A wide parameter fills a
    register pair with the same store.
    Args:
        ctx: The caller context.
        instruction: The invoke instruction.
        method: The invoked method.
        index: Current program point in the caller.
        registers: Pre-decoded argument registers, if already available.
    Returns:
        A new context whose call-depth budget is one less than the caller's,
        floored at zero.
    Raises:
        InvalidInstructionError: If the argument registers do not match the
            declared parameters.
    """
    args = list(get_invoke_registers(instruction) if registers is None else registers)
    expected = method.parameter_register_count(instruction.is_static)
    if len(args) != expected:
        raise InvalidInstructionError(
            f"{instruction.opcode} passes {len(args)} registers to "
            f"{method.descriptor}, which takes {expected}"
        )
    callee = ExecutionContext(
        register_count=len(args),
        parameter_size=len(args),
        remaining_call_depth=max(ctx.remaining_call_depth - 1, 0),
    )
    slot = 0
    if not instruction.is_static:
        callee.add_parameter_register(0, ctx.get_register(args[0], index))
        args = args[1:]
        slot = 1
    position = 0
    for param_type in method.parameter_types:
        store = RegisterStore(param_type, ctx.get_register_value(args[position], index))
        callee.add_parameter_register(slot, store)
        slot += 1
        position += 1
        if is_wide(param_type):
            callee.add_parameter_register(slot, store)
            slot += 1
            position += 1
    return callee
class InvocationDispatcher:
    """Applies the effect of invoke instructions to caller contexts.
    Example:
        dispatcher = InvocationDispatcher(catalog, logger=logger)
        outcome = dispatcher.execute(ctx, instruction, index=12)
        outcome.disposition  # Disposition.OPAQUE
    """
    def __init__(
        self,
        catalog: ClassCatalog,
        emulator: EmulationRegistry | None = None,
        oracle: MutabilityOracle | None = None,
        logger: DexSpectreLogger | None = None,
        emulation_enabled: bool = True,
    ) -> None:
        self.catalog = catalog
        self.emulator = emulator if emulator is not None else default_registry
        self.logger = logger or get_logger()
        self.oracle = oracle or MutabilityOracle(catalog, logger=self.logger)
        self.emulation_enabled = emulation_enabled
    def resolve_disposition(self, ctx: ExecutionContext, descriptor: str) -> Disposition:
        """Classify a call site by its method descriptor."""
        if ctx.remaining_call_depth <= 0:
            return Disposition.OPAQUE
        if self.emulation_enabled and self.emulator.can_emulate(descriptor):
            return Disposition.EMULATED
        if self.catalog.find_method(descriptor) is not None:
            return Disposition.DEFERRED_KNOWN
        return Disposition.OPAQUE
    def execute(
        self,
        ctx: ExecutionContext,
        instruction: InvokeInstruction,
        index: int,
    ) -> InvocationResult:
        """Dispatch one invoke instruction, mutating the caller context.
        Args:
            ctx: The caller context; its result register and argument
                registers may be rewritten at ``index``.
            instruction: The invoke instruction.
            index: Program point of the instruction.
        Returns:
            The disposition and the registers it touched.
        """
        method = instruction.method
        descriptor = method.descriptor
        self.logger.info(f"{instruction.opcode} {descriptor}", "invoke", index=index)
        self.logger.count("invokes")
        registers = get_invoke_registers(instruction)
        # The callee context is needed even when the call is not emulated:
        # its parameter types decide which caller registers to invalidate.
        callee = build_callee_context(ctx, instruction, method, index, registers)
        disposition = self.resolve_disposition(ctx, descriptor)
        outcome = InvocationResult(
            disposition=disposition,
            method=method,
            callee=callee,
            argument_registers=registers,
            depth_exhausted=ctx.remaining_call_depth <= 0,
        )
        if outcome.depth_exhausted:
            self.logger.warning(f"Call depth exhausted at {descriptor}, treating as opaque", "invoke")
        if disposition is Disposition.EMULATED:
            store = self.emulator.emulate(callee, descriptor)
            if not method.returns_void:
                ctx.set_result_register(store)
                outcome.result = store
            return outcome
        if disposition is Disposition.DEFERRED_KNOWN:
            self.logger.warning(f"Found {descriptor} but holding off on executing it.", "invoke")
        if not method.returns_void:
            outcome.result = RegisterStore.unknown(UNRESOLVED_TYPE, descriptor)
            ctx.set_result_register(outcome.result)
        self._invalidate_parameters(ctx, outcome, index)
        return outcome
    def _invalidate_parameters(
        self,
        ctx: ExecutionContext,
        outcome: InvocationResult,
        index: int,
    ) -> None:
        """Invalidate caller registers passed to the callee under a mutable type."""
        callee = outcome.callee
        descriptor = outcome.method.descriptor
        for register in range(callee.parameter_start, callee.register_count):
            store = callee.get_register(register, 0)
            caller_register = outcome.argument_registers[register - callee.parameter_start]
            if self.oracle.is_immutable(store.type):
                self.logger.fine(
                    f"v{caller_register} ({store.type}) is immutable and passed as param, "
                    "retaining value",
                    "invoke",
                )
                outcome.retained.append(caller_register)
                continue
            self.logger.fine(
                f"v{caller_register} ({store.type}) is mutable and passed as param, "
                "marking as unknown",
                "invoke",
            )
            prior_type = ctx.get_register_type(caller_register, index)
            ctx.set_register(caller_register, RegisterStore.unknown(prior_type, descriptor), index)
            outcome.invalidated.append(caller_register)
