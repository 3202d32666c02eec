"""
Core data models for pawn-context

Pydantic models for compiler oracle records, symbols and configuration.
"""

from .records import (
    RECORD_KINDS,
    ParsedRecord,
    Diagnostic,
    IncludedFile,
    ConstantSymbol,
    TagSymbol,
    EnumeratorSymbol,
    VariableSymbol,
    FunctionSymbol,
    SubstituteSymbol,
)
from .config import CompilerSettings, ClientCapabilities, WorkspaceFolder, GlobalSettings

__all__ = [
    # Records
    "RECORD_KINDS",
    "ParsedRecord",
    "Diagnostic",
    "IncludedFile",

    # Symbols
    "ConstantSymbol",
    "TagSymbol",
    "EnumeratorSymbol",
    "VariableSymbol",
    "FunctionSymbol",
    "SubstituteSymbol",

    # Configuration
    "CompilerSettings",
    "ClientCapabilities",
    "WorkspaceFolder",
    "GlobalSettings"
]
