"""Opcode dispatcher with registration system.
This module provides a decorator-based system for registering instruction
handlers, so each instruction family lives in its own module under
``dexspectre.execution.opcodes``.
"""
from __future__ import annotations
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
if TYPE_CHECKING:
    from dexspectre.core.context import ExecutionContext
    from dexspectre.execution.invocation import InvocationDispatcher, InvocationResult
@dataclass
class OpcodeResult:
    """Result of executing one instruction.
    Attributes:
        context: The (mutated) execution context.
        invocation: Call-site outcome, for invoke instructions.
    """
    context: ExecutionContext
    invocation: InvocationResult | None = None
    @staticmethod
    def continue_with(
        ctx: ExecutionContext, invocation: InvocationResult | None = None
    ) -> OpcodeResult:
        """Continue execution with the same context."""
        return OpcodeResult(context=ctx, invocation=invocation)
OpcodeHandler = Callable[[Any, "ExecutionContext", int, "OpcodeDispatcher"], OpcodeResult]
class OpcodeDispatcher:
    """Dispatches instructions to registered handlers.
    Handlers receive the instruction, the current context, the program point
    and this dispatcher, through which they reach the shared collaborators.
    Example:
        dispatcher = OpcodeDispatcher(invoker)
        @dispatcher.register("nop")
        def handle_nop(instr, ctx, index, dispatcher):
            return OpcodeResult.continue_with(ctx)
    """
    _global_handlers: dict[str, OpcodeHandler] = {}
    def __init__(self, invoker: InvocationDispatcher) -> None:
        """Initialize the dispatcher.
        Args:
            invoker: Applies the effect of invoke instructions.
        """
        self.invoker = invoker
        self._handlers: dict[str, OpcodeHandler] = {}
        self._fallback_handler: OpcodeHandler | None = None
    def register(self, *opcodes: str) -> Callable[[OpcodeHandler], OpcodeHandler]:
        """Decorator to register a handler for one or more opcodes on this dispatcher."""
        def decorator(handler: OpcodeHandler) -> OpcodeHandler:
            for opcode in opcodes:
                self._handlers[opcode] = handler
            return handler
        return decorator
    def set_fallback(self, handler: OpcodeHandler) -> None:
        """Set a fallback handler for unregistered opcodes."""
        self._fallback_handler = handler
    def dispatch(self, instr: Any, ctx: ExecutionContext, index: int) -> OpcodeResult:
        """Dispatch an instruction to its handler.
        Args:
            instr: The instruction; must expose ``opcode``.
            ctx: The current execution context.
            index: Program point of the instruction.
        Returns:
            OpcodeResult with the context after the instruction.
        Raises:
            NotImplementedError: If no handler is registered and no fallback exists.
        """
        handler = self._handlers.get(instr.opcode)
        if handler is None:
            handler = OpcodeDispatcher._global_handlers.get(instr.opcode)
        if handler is None:
            if self._fallback_handler is not None:
                return self._fallback_handler(instr, ctx, index, self)
            raise NotImplementedError(f"Opcode not supported: {instr.opcode}")
        return handler(instr, ctx, index, self)
    def has_handler(self, opcode: str) -> bool:
        return opcode in self._handlers or opcode in OpcodeDispatcher._global_handlers
    def registered_opcodes(self) -> set[str]:
        return set(self._handlers) | set(OpcodeDispatcher._global_handlers)
    def __repr__(self) -> str:
        return f"OpcodeDispatcher({len(self.registered_opcodes())} handlers)"
def opcode_handler(*opcodes: str) -> Callable[[OpcodeHandler], OpcodeHandler]:
    """Decorator to register a handler for every OpcodeDispatcher."""
    def decorator(handler: OpcodeHandler) -> OpcodeHandler:
        for opcode in opcodes:
            OpcodeDispatcher._global_handlers[opcode] = handler
        return handler
    return decorator
