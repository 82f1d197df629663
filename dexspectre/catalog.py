"""Class catalog: the classes and methods under analysis.
The catalog is closed-world only for the classes it holds. It is indexed
once by class type and by method descriptor so call sites resolve without
scanning every class.
"""
from __future__ import annotations
import enum
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from dexspectre.core.types import VOID, MethodReference
class AccessFlags(enum.IntFlag):
    """Access flags of classes and methods."""
    PUBLIC = 0x1
    PRIVATE = 0x2
    PROTECTED = 0x4
    STATIC = 0x8
    FINAL = 0x10
    SYNCHRONIZED = 0x20
    VOLATILE = 0x40
    TRANSIENT = 0x80
    NATIVE = 0x100
    INTERFACE = 0x200
    ABSTRACT = 0x400
    STRICT = 0x800
    SYNTHETIC = 0x1000
    ANNOTATION = 0x2000
    ENUM = 0x4000
    CONSTRUCTOR = 0x10000
    DECLARED_SYNCHRONIZED = 0x20000
    def __str__(self) -> str:
        return ", ".join(flag.name.lower() for flag in AccessFlags if flag & self.value)
@dataclass(frozen=True)
class MethodDef:
    """A method declared by a catalog class."""
    owner: str
    name: str
    parameter_types: tuple[str, ...] = ()
    return_type: str = VOID
    access_flags: AccessFlags = AccessFlags.PUBLIC
    registers_size: int = 0
    @property
    def reference(self) -> MethodReference:
        return MethodReference(self.owner, self.name, self.parameter_types, self.return_type)
    @property
    def descriptor(self) -> str:
        return self.reference.descriptor
    @property
    def is_static(self) -> bool:
        return bool(self.access_flags & AccessFlags.STATIC)
@dataclass
class ClassDef:
    """A class definition available for analysis.
    Attributes:
        type: Class descriptor, e.g. ``Lcom/example/Foo;``.
        access_flags: Class access flags; the FINAL bit drives immutability.
        methods: Declared methods.
        superclass: Descriptor of the superclass, if known.
    """
    type: str
    access_flags: AccessFlags = AccessFlags.PUBLIC
    methods: list[MethodDef] = field(default_factory=list)
    superclass: str | None = "Ljava/lang/Object;"
    @property
    def is_final(self) -> bool:
        return bool(self.access_flags & AccessFlags.FINAL)
    def add_method(
        self,
        name: str,
        parameter_types: Iterable[str] = (),
        return_type: str = VOID,
        access_flags: AccessFlags = AccessFlags.PUBLIC,
        registers_size: int = 0,
    ) -> MethodDef:
        """Declare a method on this class."""
        method = MethodDef(
            owner=self.type,
            name=name,
            parameter_types=tuple(parameter_types),
            return_type=return_type,
            access_flags=access_flags,
            registers_size=registers_size,
        )
        self.methods.append(method)
        return method
class ClassCatalog:
    """Read-only view over the classes under analysis, indexed for lookups.
    Example:
        catalog = ClassCatalog([ClassDef("Lcom/example/Foo;", AccessFlags.FINAL)])
        catalog.find_class("Lcom/example/Foo;").is_final  # True
    """
    def __init__(self, classes: Iterable[ClassDef] = ()) -> None:
        self._classes: list[ClassDef] = []
        self._by_type: dict[str, ClassDef] = {}
        self._by_descriptor: dict[str, MethodDef] = {}
        for class_def in classes:
            self.add(class_def)
    def add(self, class_def: ClassDef) -> None:
        """Add a class and index its methods.
        Raises:
            ValueError: If a class of the same type is already present.
        """
        if class_def.type in self._by_type:
            raise ValueError(f"Duplicate class in catalog: {class_def.type}")
        self._classes.append(class_def)
        self._by_type[class_def.type] = class_def
        for method in class_def.methods:
            self._by_descriptor.setdefault(method.descriptor, method)
    def find_class(self, type: str) -> ClassDef | None:
        return self._by_type.get(type)
    def find_method(self, descriptor: str) -> MethodDef | None:
        """Find a declared method by its exact descriptor string."""
        return self._by_descriptor.get(descriptor)
    def __contains__(self, type: object) -> bool:
        return type in self._by_type
    def __iter__(self) -> Iterator[ClassDef]:
        return iter(self._classes)
    def __len__(self) -> int:
        return len(self._classes)
    def __repr__(self) -> str:
        return f"ClassCatalog({len(self._classes)} classes, {len(self._by_descriptor)} methods)"
