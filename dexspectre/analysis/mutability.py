"""Mutability oracle for type descriptors.
Decides whether values of a type are immutable, in order:
1. single-character descriptors (primitives and the unresolved placeholder)
   are immutable;
2. catalog classes are immutable iff declared final;
3. other classes are resolved against runtime type metadata;
4. anything unresolved is treated as mutable.
"""
from __future__ import annotations
from collections.abc import Iterable
from typing import Protocol, runtime_checkable
from dexspectre.analysis.cache import CacheStats, LRUCache
from dexspectre.catalog import ClassCatalog
from dexspectre.core.types import qualified_name
from dexspectre.logging import DexSpectreLogger, get_logger
@runtime_checkable
class TypeMetadataProvider(Protocol):
    """Runtime type metadata for classes outside the catalog."""
    def is_final(self, qualified_name: str) -> bool | None:
        """Return the final bit of a class, or None if it cannot be resolved.
        Implementations may also raise LookupError for unresolvable names.
        """
        ...
# Classes of the platform runtime that are declared final and hold no
# mutable state. Final classes with mutable state (StringBuilder,
# StringBuffer) are left out so they resolve as mutable.
JAVA_FINAL_CLASSES = frozenset(
    {
        "java.lang.String",
        "java.lang.Boolean",
        "java.lang.Byte",
        "java.lang.Character",
        "java.lang.Short",
        "java.lang.Integer",
        "java.lang.Long",
        "java.lang.Float",
        "java.lang.Double",
        "java.lang.Void",
        "java.lang.Class",
        "java.lang.Math",
        "java.lang.StrictMath",
        "java.lang.System",
        "java.util.UUID",
        "java.util.Optional",
        "java.util.regex.Pattern",
        "java.time.Duration",
        "java.time.Instant",
        "java.time.LocalDate",
        "java.time.LocalDateTime",
        "java.time.LocalTime",
    }
)
JAVA_NON_FINAL_CLASSES = frozenset(
    {
        "java.lang.Object",
        "java.lang.Number",
        "java.lang.Thread",
        "java.lang.Throwable",
        "java.lang.Exception",
        "java.lang.RuntimeException",
        "java.math.BigInteger",
        "java.math.BigDecimal",
        "java.util.ArrayList",
        "java.util.HashMap",
        "java.util.HashSet",
        "java.util.LinkedList",
        "java.util.Random",
        "java.util.Date",
        "android.content.Context",
        "android.app.Activity",
        "android.os.Bundle",
    }
)
class StaticTypeMetadata:
    """Type metadata from a table of known class names.
    Names in neither set are unresolved. Example:
        metadata = StaticTypeMetadata(final={"com.example.Token"})
        metadata.is_final("com.example.Token")  # True
    """
    def __init__(
        self,
        final: Iterable[str] = (),
        non_final: Iterable[str] = (),
        include_platform: bool = True,
    ) -> None:
        final = set(final)
        non_final = set(non_final)
        self._final = final
        self._non_final = non_final
        # Caller entries override the bundled tables in both directions.
        if include_platform:
            self._final |= JAVA_FINAL_CLASSES - non_final
            self._non_final |= JAVA_NON_FINAL_CLASSES - final
        self._non_final -= final
    def is_final(self, qualified_name: str) -> bool | None:
        if qualified_name in self._final:
            return True
        if qualified_name in self._non_final:
            return False
        return None
class MutabilityOracle:
    """Answers whether values of a type can be mutated through a reference."""
    def __init__(
        self,
        catalog: ClassCatalog,
        metadata: TypeMetadataProvider | None = None,
        cache_size: int | None = 1024,
        logger: DexSpectreLogger | None = None,
    ) -> None:
        """Initialize the oracle.
        Args:
            catalog: Classes under analysis, consulted first.
            metadata: Fallback for classes outside the catalog.
            cache_size: Maximum cached answers, or None to disable caching.
            logger: Diagnostics sink.
        """
        self.catalog = catalog
        self.metadata = metadata if metadata is not None else StaticTypeMetadata()
        self.logger = logger or get_logger()
        self._cache: LRUCache[str, bool] | None = LRUCache(cache_size) if cache_size else None
    def is_immutable(self, descriptor: str) -> bool:
        """Check whether values of ``descriptor`` are immutable."""
        if len(descriptor) == 1:
            return True
        if self._cache is not None:
            cached = self._cache.get(descriptor)
            if cached is not None:
                return cached
        result = self._resolve(descriptor)
        if self._cache is not None:
            self._cache.put(descriptor, result)
        return result
    def is_mutable(self, descriptor: str) -> bool:
        return not self.is_immutable(descriptor)
    def _resolve(self, descriptor: str) -> bool:
        class_def = self.catalog.find_class(descriptor)
        if class_def is not None:
            return class_def.is_final
        name = qualified_name(descriptor)
        if name is None:
            self.logger.fine(f"{descriptor} is not a class type, assuming mutable", "mutability")
            return False
        try:
            final = self.metadata.is_final(name)
        except (LookupError, ValueError) as e:
            self.logger.fine(f"Could not resolve {name}: {e}", "mutability")
            return False
        if final is None:
            self.logger.fine(f"No metadata for {name}, assuming mutable", "mutability")
            return False
        return final
    def cache_stats(self) -> CacheStats | None:
        return self._cache.stats() if self._cache is not None else None
