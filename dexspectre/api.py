"""Public API for DexSpectre."""
from __future__ import annotations
from collections.abc import Iterable
from pathlib import Path
from dexspectre.analysis.mutability import MutabilityOracle, StaticTypeMetadata, TypeMetadataProvider
from dexspectre.catalog import ClassCatalog, ClassDef, MethodDef
from dexspectre.config import DexSpectreConfig, load_config
from dexspectre.core.context import ExecutionContext, create_initial_context
from dexspectre.emulate.registry import EmulationRegistry, default_registry
from dexspectre.execution.dispatcher import OpcodeDispatcher
from dexspectre.execution.instructions import InvokeInstruction
from dexspectre.execution.invocation import InvocationDispatcher, InvocationResult
from dexspectre.logging import DexSpectreLogger
def _as_catalog(classes: ClassCatalog | Iterable[ClassDef]) -> ClassCatalog:
    if isinstance(classes, ClassCatalog):
        return classes
    return ClassCatalog(classes)
def create_invocation_dispatcher(
    classes: ClassCatalog | Iterable[ClassDef] = (),
    config: DexSpectreConfig | None = None,
    *,
    logger: DexSpectreLogger | None = None,
    emulator: EmulationRegistry | None = None,
    metadata: TypeMetadataProvider | None = None,
) -> InvocationDispatcher:
    """
    Wire an InvocationDispatcher from configuration.
    Args:
        classes: The classes under analysis.
        config: Settings; defaults apply when omitted.
        logger: Diagnostics sink; built from ``config.output`` when omitted.
        emulator: Emulation registry; the bundled ``java.lang`` registry
                  when omitted.
        metadata: Runtime type metadata for classes outside the catalog;
                  the bundled table extended by ``config.analysis`` when
                  omitted.
    Returns:
        A dispatcher sharing one catalog, oracle and logger.
    """
    config = config or DexSpectreConfig()
    catalog = _as_catalog(classes)
    logger = logger or config.output.create_logger()
    if metadata is None:
        metadata = StaticTypeMetadata(
            final=config.analysis.final_classes,
            non_final=config.analysis.non_final_classes,
        )
    oracle = MutabilityOracle(
        catalog,
        metadata=metadata,
        cache_size=config.analysis.cache_size if config.analysis.cache_mutability else None,
        logger=logger,
    )
    return InvocationDispatcher(
        catalog,
        emulator=emulator if emulator is not None else default_registry,
        oracle=oracle,
        logger=logger,
        emulation_enabled=config.analysis.emulation,
    )
def create_dispatcher(
    classes: ClassCatalog | Iterable[ClassDef] = (),
    config: DexSpectreConfig | None = None,
    **kwargs,
) -> OpcodeDispatcher:
    """Create an OpcodeDispatcher with the invoke handlers bound."""
    return OpcodeDispatcher(create_invocation_dispatcher(classes, config, **kwargs))
def create_method_context(method: MethodDef, config: DexSpectreConfig | None = None) -> ExecutionContext:
    """Create the top-level context for analyzing a catalog method."""
    config = config or DexSpectreConfig()
    return create_initial_context(
        register_count=method.registers_size,
        parameter_types=method.parameter_types,
        call_depth=config.limits.max_call_depth,
        instance_type=None if method.is_static else method.owner,
    )
def execute_invoke(
    ctx: ExecutionContext,
    instruction: InvokeInstruction,
    index: int,
    classes: ClassCatalog | Iterable[ClassDef] = (),
    config_path: Path | None = None,
) -> InvocationResult:
    """
    Dispatch a single invoke instruction with a one-off dispatcher.
    Hosts processing many instructions should build one dispatcher with
    ``create_invocation_dispatcher`` and reuse it.
    """
    config = load_config(config_path) if config_path is not None else None
    return create_invocation_dispatcher(classes, config).execute(ctx, instruction, index)
