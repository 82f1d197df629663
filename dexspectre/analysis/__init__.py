"""Type analyses supporting call-site handling."""
from dexspectre.analysis.cache import CacheStats, LRUCache
from dexspectre.analysis.mutability import (
    MutabilityOracle,
    StaticTypeMetadata,
    TypeMetadataProvider,
)
__all__ = [
    "CacheStats",
    "LRUCache",
    "MutabilityOracle",
    "StaticTypeMetadata",
    "TypeMetadataProvider",
]
