"""Method emulation."""
from dexspectre.emulate.registry import (
    EmulatedMethod,
    EmulationError,
    EmulationRegistry,
    create_default_registry,
    default_registry,
)
__all__ = [
    "EmulatedMethod",
    "EmulationError",
    "EmulationRegistry",
    "create_default_registry",
    "default_registry",
]
