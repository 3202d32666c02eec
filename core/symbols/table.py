"""
Symbol table populated from compiler output.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from ..models.records import (
    ConstantSymbol,
    EnumeratorSymbol,
    FunctionSymbol,
    IncludedFile,
    SubstituteSymbol,
    SymbolBase,
    TagSymbol,
    VariableSymbol,
)

logger = logging.getLogger(__name__)


class SymbolTable:
    """
    Symbols reported by one compiler invocation.

    Every category exposes a replace-all setter. ``finalize()`` runs once
    after all categories of an invocation are ingested and composes the
    human readable ``detail`` of each symbol.
    """

    def __init__(self):
        self.files: List[IncludedFile] = []
        self.constants: List[ConstantSymbol] = []
        self.tags: List[TagSymbol] = []
        self.enumerators: List[EnumeratorSymbol] = []
        self.variables: List[VariableSymbol] = []
        self.functions: List[FunctionSymbol] = []
        self.substitutes: List[SubstituteSymbol] = []

    def replace_files(self, files: Iterable[IncludedFile]) -> None:
        self.files = list(files)

    def replace_constants(self, constants: Iterable[ConstantSymbol]) -> None:
        self.constants = list(constants)

    def replace_tags(self, tags: Iterable[TagSymbol]) -> None:
        self.tags = list(tags)

    def replace_enumerators(self, enumerators: Iterable[EnumeratorSymbol]) -> None:
        self.enumerators = list(enumerators)

    def replace_variables(self, variables: Iterable[VariableSymbol]) -> None:
        self.variables = list(variables)

    def replace_functions(self, functions: Iterable[FunctionSymbol]) -> None:
        self.functions = list(functions)

    def replace_substitutes(self, substitutes: Iterable[SubstituteSymbol]) -> None:
        self.substitutes = list(substitutes)

    def clear(self) -> None:
        """Drop every symbol"""
        self.files = []
        self.constants = []
        self.tags = []
        self.enumerators = []
        self.variables = []
        self.functions = []
        self.substitutes = []

    def finalize(self) -> None:
        """Compose symbol details once all records of an invocation are in"""
        known_tags = {tag.name for tag in self.tags}

        for symbol in self._iter_symbols():
            tag = getattr(symbol, "tag", "")
            if tag and known_tags and tag not in known_tags and tag != "_":
                logger.debug(f"Symbol {symbol.name} uses undeclared tag {tag}")
            symbol.detail = symbol.compose_detail()

    def _iter_symbols(self) -> Iterable[SymbolBase]:
        yield from self.constants
        yield from self.tags
        yield from self.enumerators
        yield from self.variables
        yield from self.functions
        yield from self.substitutes

    def includes_file(self, file_path: Union[str, Path]) -> bool:
        """Check whether a file was part of the compilation"""
        target = Path(file_path)
        return any(Path(included.file_path) == target for included in self.files)

    def find_function(self, name: str) -> Optional[FunctionSymbol]:
        for function in self.functions:
            if function.name == name:
                return function
        return None

    def symbols_in_file(self, file_path: Union[str, Path]) -> List[SymbolBase]:
        """All symbols declared in a file"""
        target = Path(file_path)
        return [
            symbol for symbol in self._iter_symbols()
            if symbol.file_path and Path(symbol.file_path) == target
        ]

    @property
    def symbol_count(self) -> int:
        return (
            len(self.constants) + len(self.tags) + len(self.enumerators) +
            len(self.variables) + len(self.functions) + len(self.substitutes)
        )

    def get_counts(self) -> Dict[str, int]:
        """Per-category symbol counts"""
        return {
            "files": len(self.files),
            "constants": len(self.constants),
            "tags": len(self.tags),
            "enumerators": len(self.enumerators),
            "variables": len(self.variables),
            "functions": len(self.functions),
            "substitutes": len(self.substitutes)
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "files": [included.file_path for included in self.files],
            "constants": [symbol.model_dump() for symbol in self.constants],
            "tags": [symbol.model_dump() for symbol in self.tags],
            "enumerators": [symbol.model_dump() for symbol in self.enumerators],
            "variables": [symbol.model_dump() for symbol in self.variables],
            "functions": [symbol.model_dump() for symbol in self.functions],
            "substitutes": [symbol.model_dump() for symbol in self.substitutes]
        }
