"""
Symbol and diagnostic sinks fed by the compiler oracle.

Each sink is replaced wholesale at the end of every completed compiler
invocation; contents are never merged across invocations.
"""

from .table import SymbolTable
from .diagnostics import DiagnosticList

__all__ = [
    "SymbolTable",
    "DiagnosticList"
]
