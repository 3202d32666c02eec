"""
Diagnostic sink populated from compiler output.
"""

from pathlib import Path
from typing import Iterable, Iterator, List, Union

from ..models.records import Diagnostic


class DiagnosticList:
    """Errors and warnings reported by one compiler invocation"""

    def __init__(self):
        self.diagnostics: List[Diagnostic] = []

    def replace(self, diagnostics: Iterable[Diagnostic]) -> None:
        self.diagnostics = list(diagnostics)

    def clear(self) -> None:
        self.diagnostics = []

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == "warning"]

    def for_file(self, file_path: Union[str, Path]) -> List[Diagnostic]:
        """Diagnostics reported against one file"""
        target = Path(file_path)
        return [d for d in self.diagnostics if d.file_path and Path(d.file_path) == target]

    def __len__(self) -> int:
        return len(self.diagnostics)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.diagnostics)
