"""Emulations of side-effect free ``java.lang`` methods.
Integer results follow the VM's 32-bit two's-complement arithmetic, which
is evaluated with z3 bit-vectors.
"""
from __future__ import annotations
import re
from typing import Any
import z3
from dexspectre.core.types import from_bitvec, to_bitvec
from dexspectre.emulate.registry import EmulatedMethod, EmulationError
INT_MIN = -(2**31)
INT_MAX = 2**31 - 1
_DECIMAL = re.compile(r"[+-]?[0-9]+")
def _int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise EmulationError(f"expected int, got {value!r}")
    return value
def _str(value: Any) -> str:
    if not isinstance(value, str):
        raise EmulationError(f"expected String, got {value!r}")
    return value
def _utf16(value: str) -> bytes:
    return value.encode("utf-16-le", "surrogatepass")
class StringLength(EmulatedMethod):
    descriptor = "Ljava/lang/String;->length()I"
    is_static = False
    def compute(self, instance: Any) -> int:
        return len(_utf16(_str(instance))) // 2
class StringIsEmpty(EmulatedMethod):
    descriptor = "Ljava/lang/String;->isEmpty()Z"
    is_static = False
    def compute(self, instance: Any) -> bool:
        return len(_str(instance)) == 0
class StringCharAt(EmulatedMethod):
    descriptor = "Ljava/lang/String;->charAt(I)C"
    is_static = False
    def compute(self, instance: Any, index: Any) -> str:
        units = _utf16(_str(instance))
        i = _int(index)
        if not 0 <= i < len(units) // 2:
            raise EmulationError(f"index {i} out of bounds")
        return chr(int.from_bytes(units[2 * i : 2 * i + 2], "little"))
class StringConcat(EmulatedMethod):
    descriptor = "Ljava/lang/String;->concat(Ljava/lang/String;)Ljava/lang/String;"
    is_static = False
    def compute(self, instance: Any, other: Any) -> str:
        return _str(instance) + _str(other)
class StringEquals(EmulatedMethod):
    descriptor = "Ljava/lang/String;->equals(Ljava/lang/Object;)Z"
    is_static = False
    def compute(self, instance: Any, other: Any) -> bool:
        if other is None:
            return False
        return _str(instance) == _str(other)
class StringHashCode(EmulatedMethod):
    """``s[0]*31^(n-1) + ... + s[n-1]`` in 32-bit arithmetic."""
    descriptor = "Ljava/lang/String;->hashCode()I"
    is_static = False
    def compute(self, instance: Any) -> int:
        units = _utf16(_str(instance))
        h = to_bitvec(0)
        for i in range(0, len(units), 2):
            h = h * 31 + int.from_bytes(units[i : i + 2], "little")
        return from_bitvec(h)
class StringValueOfInt(EmulatedMethod):
    descriptor = "Ljava/lang/String;->valueOf(I)Ljava/lang/String;"
    def compute(self, value: Any) -> str:
        return str(_int(value))
class StringValueOfBoolean(EmulatedMethod):
    descriptor = "Ljava/lang/String;->valueOf(Z)Ljava/lang/String;"
    def compute(self, value: Any) -> str:
        if not isinstance(value, bool):
            raise EmulationError(f"expected boolean, got {value!r}")
        return "true" if value else "false"
class StringValueOfChar(EmulatedMethod):
    descriptor = "Ljava/lang/String;->valueOf(C)Ljava/lang/String;"
    def compute(self, value: Any) -> str:
        if not isinstance(value, str) or len(value) != 1:
            raise EmulationError(f"expected char, got {value!r}")
        return value
class IntegerParseInt(EmulatedMethod):
    descriptor = "Ljava/lang/Integer;->parseInt(Ljava/lang/String;)I"
    def compute(self, text: Any) -> int:
        text = _str(text)
        if not _DECIMAL.fullmatch(text):
            raise EmulationError(f"not a decimal int: {text!r}")
        value = int(text)
        if not INT_MIN <= value <= INT_MAX:
            raise EmulationError(f"{text} overflows int")
        return value
class IntegerValueOf(EmulatedMethod):
    descriptor = "Ljava/lang/Integer;->valueOf(I)Ljava/lang/Integer;"
    def compute(self, value: Any) -> int:
        return _int(value)
class IntegerIntValue(EmulatedMethod):
    descriptor = "Ljava/lang/Integer;->intValue()I"
    is_static = False
    def compute(self, instance: Any) -> int:
        return _int(instance)
class IntegerToString(EmulatedMethod):
    descriptor = "Ljava/lang/Integer;->toString(I)Ljava/lang/String;"
    def compute(self, value: Any) -> str:
        return str(_int(value))
class MathAbs(EmulatedMethod):
    """``Math.abs(Integer.MIN_VALUE)`` is ``Integer.MIN_VALUE``."""
    descriptor = "Ljava/lang/Math;->abs(I)I"
    def compute(self, value: Any) -> int:
        x = to_bitvec(_int(value))
        return from_bitvec(z3.If(x < 0, -x, x))
class MathMax(EmulatedMethod):
    descriptor = "Ljava/lang/Math;->max(II)I"
    def compute(self, a: Any, b: Any) -> int:
        x, y = to_bitvec(_int(a)), to_bitvec(_int(b))
        return from_bitvec(z3.If(x >= y, x, y))
class MathMin(EmulatedMethod):
    descriptor = "Ljava/lang/Math;->min(II)I"
    def compute(self, a: Any, b: Any) -> int:
        x, y = to_bitvec(_int(a)), to_bitvec(_int(b))
        return from_bitvec(z3.If(x <= y, x, y))
JAVA_LANG_METHODS: list[type[EmulatedMethod]] = [
    StringLength,
    StringIsEmpty,
    StringCharAt,
    StringConcat,
    StringEquals,
    StringHashCode,
    StringValueOfInt,
    StringValueOfBoolean,
    StringValueOfChar,
    IntegerParseInt,
    IntegerValueOf,
    IntegerIntValue,
    IntegerToString,
    MathAbs,
    MathMax,
    MathMin,
]
