"""DexSpectre: symbolic call-site handling for Dalvik bytecode.
DexSpectre propagates known register values through method bodies and
conservatively invalidates values whose provenance becomes uncertain. Its
core decides, for each invoke instruction, whether the callee's effect can
be computed exactly, and which caller registers remain trustworthy after
the call.
Example:
    >>> from dexspectre import create_initial_context, create_invocation_dispatcher
    >>> from dexspectre import InvokeInstruction, MethodReference
    >>> ctx = create_initial_context(register_count=4)
    >>> ctx.add_register(0, "Ljava/lang/String;", "hello", 0)
    >>> length = MethodReference.from_descriptor("Ljava/lang/String;->length()I")
    >>> instr = InvokeInstruction.from_registers("invoke-virtual", length, 0)
    >>> create_invocation_dispatcher().execute(ctx, instr, 1).result.value
    5
"""

from dexspectre.analysis.mutability import MutabilityOracle, StaticTypeMetadata, TypeMetadataProvider
from dexspectre.api import (
    create_dispatcher,
    create_invocation_dispatcher,
    create_method_context,
    execute_invoke,
)
from dexspectre.catalog import AccessFlags, ClassCatalog, ClassDef, MethodDef
from dexspectre.config import DexSpectreConfig, load_config
from dexspectre.core.context import ExecutionContext, create_initial_context
from dexspectre.core.registers import RegisterStore
from dexspectre.core.types import MethodReference
from dexspectre.core.values import UNRESOLVED_TYPE, UnknownOrigin, UnknownValue
from dexspectre.emulate.registry import EmulatedMethod, EmulationRegistry, default_registry
from dexspectre.execution.dispatcher import OpcodeDispatcher, OpcodeResult
from dexspectre.execution.instructions import InvalidInstructionError, InvokeInstruction
from dexspectre.execution.invocation import (
    Disposition,
    InvocationDispatcher,
    InvocationResult,
    build_callee_context,
)
from dexspectre.logging import DexSpectreLogger, LogLevel, configure_logging, get_logger

__version__ = "0.1.0"

__all__ = [
    "AccessFlags",
    "ClassCatalog",
    "ClassDef",
    "DexSpectreConfig",
    "DexSpectreLogger",
    "Disposition",
    "EmulatedMethod",
    "EmulationRegistry",
    "ExecutionContext",
    "InvalidInstructionError",
    "InvocationDispatcher",
    "InvocationResult",
    "InvokeInstruction",
    "LogLevel",
    "MethodDef",
    "MethodReference",
    "MutabilityOracle",
    "OpcodeDispatcher",
    "OpcodeResult",
    "RegisterStore",
    "StaticTypeMetadata",
    "TypeMetadataProvider",
    "UNRESOLVED_TYPE",
    "UnknownOrigin",
    "UnknownValue",
    "build_callee_context",
    "configure_logging",
    "create_dispatcher",
    "create_initial_context",
    "create_invocation_dispatcher",
    "create_method_context",
    "default_registry",
    "execute_invoke",
    "get_logger",
    "load_config",
]
