"""Registry of emulated methods.
An emulated method computes the return value of a known, side-effect free
method directly from the callee's parameter registers, without executing
its body. Lookups use the exact method descriptor string.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import Any
from dexspectre.core.context import ExecutionContext
from dexspectre.core.registers import RegisterStore
from dexspectre.core.types import MethodReference, is_wide
from dexspectre.core.values import UnknownValue
class EmulationError(Exception):
    """Raised by an emulation that cannot produce a concrete result.
    Covers inputs of the wrong shape and calls the real method would answer
    with an exception. The registry turns it into an unknown return value.
    """
class EmulatedMethod(ABC):
    """Base class for emulated methods.
    Subclasses set ``descriptor`` and ``is_static`` and implement
    ``compute``, which receives the concrete argument values (instance
    first for non-static methods).
    """
    descriptor: str = ""
    is_static: bool = True
    @property
    def reference(self) -> MethodReference:
        return MethodReference.from_descriptor(self.descriptor)
    def arguments(self, ctx: ExecutionContext) -> list[RegisterStore]:
        """Argument stores of a callee context, one per declared parameter."""
        stores = []
        slot = 0
        if not self.is_static:
            stores.append(ctx.get_parameter_register(slot))
            slot += 1
        for param_type in self.reference.parameter_types:
            stores.append(ctx.get_parameter_register(slot))
            slot += 2 if is_wide(param_type) else 1
        return stores
    def apply(self, ctx: ExecutionContext) -> RegisterStore:
        """Compute the return store from a callee context."""
        return_type = self.reference.return_type
        values = [store.value for store in self.arguments(ctx)]
        if any(isinstance(value, UnknownValue) for value in values):
            return RegisterStore(return_type, UnknownValue(reason=self.descriptor))
        try:
            result = self.compute(*values)
        except EmulationError as e:
            return RegisterStore(return_type, UnknownValue(reason=f"{self.descriptor}: {e}"))
        return RegisterStore(return_type, result)
    @abstractmethod
    def compute(self, *args: Any) -> Any:
        """Compute the concrete return value.
        Raises:
            EmulationError: If the arguments do not allow a concrete answer.
        """
class EmulationRegistry:
    """Emulated methods keyed by descriptor."""
    def __init__(self, methods: Iterable[EmulatedMethod] = ()):
        self._methods: dict[str, EmulatedMethod] = {}
        for method in methods:
            self.register(method)
    def register(self, method: EmulatedMethod) -> None:
        if not method.descriptor:
            raise ValueError(f"{type(method).__name__} has no descriptor")
        self._methods[method.descriptor] = method
    def can_emulate(self, descriptor: str) -> bool:
        return descriptor in self._methods
    def emulate(self, ctx: ExecutionContext, descriptor: str) -> RegisterStore:
        """Emulate a method against a callee context.
        The computed store is also written to the context's return register.
        Raises:
            KeyError: If the descriptor is not registered.
        """
        store = self._methods[descriptor].apply(ctx)
        ctx.set_return_register(store)
        return store
    def descriptors(self) -> list[str]:
        return sorted(self._methods)
    def __len__(self) -> int:
        return len(self._methods)
    def __contains__(self, descriptor: object) -> bool:
        return descriptor in self._methods
def create_default_registry() -> EmulationRegistry:
    """Registry with the bundled ``java.lang`` emulations."""
    from dexspectre.emulate.java_lang import JAVA_LANG_METHODS
    return EmulationRegistry(cls() for cls in JAVA_LANG_METHODS)
default_registry = create_default_registry()
