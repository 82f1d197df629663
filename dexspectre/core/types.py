"""Type descriptors and method references.
Descriptors follow the bytecode's own notation: a single character for
primitives (``I``, ``Z``, ``J`` ...), ``Lpkg/Name;`` for classes and a
``[`` prefix for arrays. Method descriptors are rendered as
``Lowner;->name(params)ret`` and compared as exact strings.
This module also maps primitive descriptors onto z3 sorts so integer
arithmetic can be evaluated with the VM's two's-complement semantics.
"""
from __future__ import annotations
from dataclasses import dataclass
import z3
VOID = "V"
PRIMITIVE_TYPES = frozenset("ZBSCIJFD")
WIDE_TYPES = frozenset("JD")
BITVEC_WIDTHS = {"B": 8, "S": 16, "C": 16, "I": 32, "J": 64}
def is_primitive(descriptor: str) -> bool:
    """Check whether a descriptor names a primitive (non-void) type."""
    return len(descriptor) == 1 and descriptor in PRIMITIVE_TYPES
def is_wide(descriptor: str) -> bool:
    """Check whether a value of this type occupies a register pair."""
    return descriptor in WIDE_TYPES
def is_array(descriptor: str) -> bool:
    return descriptor.startswith("[")
def is_class(descriptor: str) -> bool:
    return len(descriptor) > 2 and descriptor.startswith("L") and descriptor.endswith(";")
def qualified_name(descriptor: str) -> str | None:
    """Convert a class descriptor to its dotted name.
    Returns:
        ``java.lang.String`` for ``Ljava/lang/String;``, or None for
        primitives, arrays and malformed descriptors.
    """
    if not is_class(descriptor):
        return None
    return descriptor[1:-1].replace("/", ".")
def class_descriptor(name: str) -> str:
    """Convert a dotted class name to a descriptor."""
    return f"L{name.replace('.', '/')};"
def parse_type_list(signature: str) -> list[str]:
    """Split a concatenated parameter list such as ``IJ[Ljava/lang/String;``.
    Raises:
        ValueError: If the list contains a malformed descriptor.
    """
    types: list[str] = []
    i = 0
    while i < len(signature):
        start = i
        while i < len(signature) and signature[i] == "[":
            i += 1
        if i >= len(signature):
            raise ValueError(f"Dangling array marker in {signature!r}")
        if signature[i] == "L":
            end = signature.find(";", i)
            if end < 0:
                raise ValueError(f"Unterminated class descriptor in {signature!r}")
            i = end + 1
        elif signature[i] in PRIMITIVE_TYPES:
            i += 1
        else:
            raise ValueError(f"Invalid type character {signature[i]!r} in {signature!r}")
        types.append(signature[start:i])
    return types
@dataclass(frozen=True)
class MethodReference:
    """A resolved reference to a method.
    Attributes:
        owner: Descriptor of the declaring class.
        name: Method name (``<init>`` for constructors).
        parameter_types: Declared parameter descriptors, in order.
        return_type: Declared return descriptor (``V`` for void).
    """
    owner: str
    name: str
    parameter_types: tuple[str, ...] = ()
    return_type: str = VOID
    @property
    def descriptor(self) -> str:
        """Full descriptor string used for exact-match lookups."""
        params = "".join(self.parameter_types)
        return f"{self.owner}->{self.name}({params}){self.return_type}"
    @property
    def returns_void(self) -> bool:
        return self.return_type == VOID
    def parameter_register_count(self, is_static: bool) -> int:
        """Number of argument registers a call to this method consumes."""
        count = 0 if is_static else 1
        for param in self.parameter_types:
            count += 2 if is_wide(param) else 1
        return count
    @classmethod
    def from_descriptor(cls, descriptor: str) -> MethodReference:
        """Parse ``Lowner;->name(params)ret``.
        Raises:
            ValueError: If the descriptor is malformed.
        """
        owner, sep, rest = descriptor.partition("->")
        if not sep or not owner:
            raise ValueError(f"Not a method descriptor: {descriptor!r}")
        open_paren = rest.find("(")
        close_paren = rest.find(")", open_paren + 1)
        if open_paren <= 0 or close_paren < 0:
            raise ValueError(f"Not a method descriptor: {descriptor!r}")
        return_type = rest[close_paren + 1 :]
        if return_type != VOID and len(parse_type_list(return_type)) != 1:
            raise ValueError(f"Invalid return type in {descriptor!r}")
        return cls(
            owner=owner,
            name=rest[:open_paren],
            parameter_types=tuple(parse_type_list(rest[open_paren + 1 : close_paren])),
            return_type=return_type,
        )
    def __str__(self) -> str:
        return self.descriptor
def sort_for(descriptor: str) -> z3.SortRef | None:
    """z3 sort modelling values of a primitive type, or None for references."""
    if descriptor == "Z":
        return z3.BoolSort()
    if descriptor in BITVEC_WIDTHS:
        return z3.BitVecSort(BITVEC_WIDTHS[descriptor])
    if descriptor == "F":
        return z3.Float32()
    if descriptor == "D":
        return z3.Float64()
    return None
def to_bitvec(value: int, descriptor: str = "I") -> z3.BitVecNumRef:
    """Concrete integer as a bit-vector of the descriptor's width."""
    return z3.BitVecVal(value, BITVEC_WIDTHS[descriptor])
def from_bitvec(expr: z3.BitVecRef) -> int:
    """Evaluate a closed bit-vector expression to a signed Python int."""
    result = z3.simplify(expr)
    if not z3.is_bv_value(result):
        raise ValueError(f"Expression is not constant: {expr}")
    return result.as_signed_long()
def const_to_z3(value: object, descriptor: str) -> z3.ExprRef | None:
    """Concrete primitive value as a z3 constant, or None if not representable."""
    if descriptor == "Z" and isinstance(value, bool):
        return z3.BoolVal(value)
    if descriptor in BITVEC_WIDTHS:
        if descriptor == "C" and isinstance(value, str) and len(value) == 1:
            return to_bitvec(ord(value), "C")
        if isinstance(value, int) and not isinstance(value, bool):
            return to_bitvec(value, descriptor)
        return None
    if descriptor in ("F", "D") and isinstance(value, (int, float)) and not isinstance(value, bool):
        return z3.FPVal(float(value), sort_for(descriptor))
    return None
