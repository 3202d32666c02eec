"""
Unit tests for the symbol and diagnostic sinks.
"""

from pathlib import Path

from core.models.records import (
    Diagnostic,
    FunctionSymbol,
    IncludedFile,
    TagSymbol,
    VariableSymbol,
)
from core.symbols import DiagnosticList, SymbolTable


class TestSymbolTable:
    """Test SymbolTable functionality"""

    def setup_method(self):
        """Setup test environment"""
        self.table = SymbolTable()
        self.table.replace_files([IncludedFile(file_path="/proj/util.inc")])
        self.table.replace_functions([
            FunctionSymbol(name="Foo", file_path="/proj/util.inc"),
            FunctionSymbol(name="main", file_path="/proj/main.pwn")
        ])
        self.table.replace_variables([VariableSymbol(name="gCount", file_path="/proj/util.inc")])

    def test_includes_file(self):
        assert self.table.includes_file("/proj/util.inc") is True
        assert self.table.includes_file(Path("/proj/util.inc")) is True
        assert self.table.includes_file("/proj/other.inc") is False

    def test_includes_file_is_not_substring_match(self):
        assert self.table.includes_file("/proj/util") is False

    def test_find_function(self):
        assert self.table.find_function("Foo").file_path == "/proj/util.inc"
        assert self.table.find_function("Bar") is None

    def test_symbols_in_file(self):
        names = [symbol.name for symbol in self.table.symbols_in_file("/proj/util.inc")]

        assert names == ["gCount", "Foo"]

    def test_replace_is_not_merge(self):
        self.table.replace_functions([FunctionSymbol(name="Bar")])

        assert [f.name for f in self.table.functions] == ["Bar"]

    def test_clear(self):
        self.table.clear()

        assert self.table.symbol_count == 0
        assert self.table.files == []

    def test_finalize_composes_details(self):
        self.table.finalize()

        assert self.table.functions[0].detail == "Foo()"
        assert self.table.variables[0].detail == "new gCount"

    def test_finalize_logs_undeclared_tag(self, caplog):
        self.table.replace_tags([TagSymbol(name="Float")])
        self.table.replace_variables([VariableSymbol(name="gPos", tag="Vector")])

        with caplog.at_level("DEBUG", logger="core.symbols.table"):
            self.table.finalize()

        assert "undeclared tag Vector" in caplog.text

    def test_to_dict(self):
        data = self.table.to_dict()

        assert data["files"] == ["/proj/util.inc"]
        assert data["functions"][0]["name"] == "Foo"


class TestDiagnosticList:
    """Test DiagnosticList functionality"""

    def setup_method(self):
        """Setup test environment"""
        self.diagnostics = DiagnosticList()
        self.diagnostics.replace([
            Diagnostic(file_path="/proj/main.pwn", severity="error", number=17),
            Diagnostic(file_path="/proj/main.pwn", severity="warning", number=203),
            Diagnostic(file_path="/proj/util.inc", severity="fatal error", number=100)
        ])

    def test_errors_include_fatal(self):
        assert [d.number for d in self.diagnostics.errors] == [17, 100]

    def test_warnings(self):
        assert [d.number for d in self.diagnostics.warnings] == [203]

    def test_for_file(self):
        assert len(self.diagnostics.for_file("/proj/main.pwn")) == 2

    def test_clear_makes_list_empty(self):
        self.diagnostics.clear()

        assert len(self.diagnostics) == 0
        assert list(self.diagnostics) == []
