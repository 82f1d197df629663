"""Opcode handlers module.
Importing this package registers every handler with the global dispatcher.
"""
from dexspectre.execution.opcodes import invoke
__all__ = ["invoke"]
