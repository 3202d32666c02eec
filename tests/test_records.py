"""
Unit tests for compiler record models.

Tests record decoding through the discriminated union, legacy record
upgrades and symbol detail composition.
"""

import pytest
from pydantic import ValidationError

from core.models.records import (
    ConstantSymbol,
    Diagnostic,
    EnumeratorSymbol,
    FunctionSymbol,
    IncludedFilesRecord,
    SubstituteSymbol,
    TagSymbol,
    VariableSymbol,
    parsed_record_adapter,
    upgrade_legacy_record,
)


class TestParsedRecord:
    """Test record validation"""

    def test_functions_record(self):
        """Function payloads decode into FunctionSymbol"""
        record = parsed_record_adapter.validate_python({
            "kind": "functions",
            "payload": [{"name": "SendClientMessage", "specifier": "native", "line": 12}]
        })

        assert record.kind == "functions"
        assert isinstance(record.payload[0], FunctionSymbol)
        assert record.payload[0].line == 12

    def test_unknown_kind_rejected(self):
        """Kinds outside the closed set fail validation"""
        with pytest.raises(ValidationError):
            parsed_record_adapter.validate_python({"kind": "macros", "payload": []})

    def test_missing_payload_is_empty(self):
        """A record without payload carries no items"""
        record = parsed_record_adapter.validate_python({"kind": "tags"})

        assert record.payload == []

    def test_included_files_accept_bare_strings(self):
        """Included files may be plain paths or objects"""
        record = parsed_record_adapter.validate_python({
            "kind": "includedFiles",
            "payload": ["/proj/a_samp.inc", {"file_path": "/proj/util.inc"}]
        })

        assert isinstance(record, IncludedFilesRecord)
        assert [f.file_path for f in record.payload] == ["/proj/a_samp.inc", "/proj/util.inc"]

    def test_single_diagnostic_is_wrapped(self):
        """One diagnostic object per record is accepted"""
        record = parsed_record_adapter.validate_python({
            "kind": "diagnostic",
            "payload": {"message": "undefined symbol", "number": 17}
        })

        assert len(record.payload) == 1
        assert record.payload[0].number == 17

    def test_extra_fields_preserved(self):
        """Fields unknown to the model survive decoding"""
        record = parsed_record_adapter.validate_python({
            "kind": "variables",
            "payload": [{"name": "gCount", "scope": "global"}]
        })

        assert record.payload[0].model_extra == {"scope": "global"}

    def test_null_fields_use_defaults(self):
        """A null field does not invalidate its item"""
        record = parsed_record_adapter.validate_python({
            "kind": "functions",
            "payload": [{"name": "Foo"}, {"name": "Bar", "line": None, "file_path": None}]
        })

        assert [f.name for f in record.payload] == ["Foo", "Bar"]
        assert record.payload[1].line == 0
        assert record.payload[1].file_path == ""

    def test_invalid_item_skipped(self, caplog):
        """An item that cannot be decoded loses only itself"""
        with caplog.at_level("WARNING", logger="core.models.records"):
            record = parsed_record_adapter.validate_python({
                "kind": "functions",
                "payload": [{"name": "Foo"}, {"line": 3}, {"name": "Bar", "line": "x"}, {"name": "Baz"}]
            })

        assert [f.name for f in record.payload] == ["Foo", "Baz"]
        assert "Skipping invalid FunctionsRecord payload item 1" in caplog.text
        assert "payload item 2" in caplog.text

    def test_non_list_payload_rejected(self):
        with pytest.raises(ValidationError):
            parsed_record_adapter.validate_python({"kind": "tags", "payload": "Float"})


class TestLegacyRecords:
    """Test the type/contents record shape"""

    def test_legacy_error_becomes_diagnostic(self):
        upgraded = upgrade_legacy_record({"type": "error", "contents": {"message": "x"}})

        assert upgraded == {"kind": "diagnostic", "payload": {"message": "x"}}

    def test_legacy_files_becomes_included_files(self):
        upgraded = upgrade_legacy_record({"type": "files", "contents": ["/proj/util.inc"]})
        record = parsed_record_adapter.validate_python(upgraded)

        assert record.kind == "includedFiles"

    def test_legacy_symbol_kind_kept(self):
        upgraded = upgrade_legacy_record({"type": "functions"})

        assert upgraded == {"kind": "functions", "payload": []}

    def test_current_shape_untouched(self):
        raw = {"kind": "tags", "payload": []}

        assert upgrade_legacy_record(raw) is raw

    def test_non_string_type_left_for_validation(self):
        """A list or object type is not a kind name"""
        raw = {"type": ["functions"], "contents": []}

        assert upgrade_legacy_record(raw) is raw
        with pytest.raises(ValidationError):
            parsed_record_adapter.validate_python(upgrade_legacy_record(raw))


class TestDiagnostic:
    """Test diagnostic normalization and formatting"""

    def test_fatal_error_severity_normalized(self):
        diagnostic = Diagnostic(severity="Fatal Error", message="cannot read from file")

        assert diagnostic.severity == "fatal"
        assert diagnostic.is_error is True

    def test_warning_is_not_error(self):
        assert Diagnostic(severity="warning").is_error is False

    def test_detail_format(self):
        """Details follow the pawncc message layout"""
        diagnostic = Diagnostic(
            file_path="main.pwn", start_line=3, severity="error",
            number=17, message='undefined symbol "x"'
        )

        assert diagnostic.detail == 'main.pwn(3) : error 017: undefined symbol "x"'

    def test_detail_line_range(self):
        diagnostic = Diagnostic(
            file_path="main.pwn", start_line=3, end_line=5,
            severity="warning", number=203, message="symbol is never used"
        )

        assert diagnostic.detail == "main.pwn(3 -- 5) : warning 203: symbol is never used"

    def test_detail_uses_compiler_text(self):
        diagnostic = Diagnostic(error_detail="main.pwn(1) : fatal error 100: cannot read from file")

        assert diagnostic.detail == "main.pwn(1) : fatal error 100: cannot read from file"

    def test_null_fields_use_defaults(self):
        diagnostic = Diagnostic.model_validate(
            {"file_path": None, "start_line": None, "severity": None, "number": 17}
        )

        assert diagnostic.file_path == ""
        assert diagnostic.start_line == 0
        assert diagnostic.severity == "error"
        assert diagnostic.number == 17


class TestSymbolDetails:
    """Test composed symbol details"""

    def test_constant(self):
        constant = ConstantSymbol(name="MAX_PLAYERS", value=500)

        assert constant.compose_detail() == "const MAX_PLAYERS = 500"

    def test_tagged_constant_without_value(self):
        constant = ConstantSymbol(name="FLOAT_NAN", tag="Float")

        assert constant.compose_detail() == "const Float:FLOAT_NAN"

    def test_underscore_tag_is_untagged(self):
        variable = VariableSymbol(name="gCount", tag="_")

        assert variable.compose_detail() == "new gCount"

    def test_variable_dimensions(self):
        variable = VariableSymbol(name="gNames", specifier="static", dimensions=[500, None])

        assert variable.compose_detail() == "static gNames[500][]"

    def test_enumerator(self):
        enumerator = EnumeratorSymbol(name="E_HEALTH", tag="Float", enum_name="E_PLAYER", value=1)

        assert enumerator.compose_detail() == "E_PLAYER::Float:E_HEALTH = 1"

    def test_tag(self):
        assert TagSymbol(name="Float", strong=True).compose_detail() == "Float:"

    def test_function(self):
        function = FunctionSymbol(name="OnGameModeInit", specifier="public")

        assert function.compose_detail() == "public OnGameModeInit()"

    def test_substitute(self):
        substitute = SubstituteSymbol(name="COLOR_RED", substitution="0xFF0000FF")

        assert substitute.compose_detail() == "#define COLOR_RED 0xFF0000FF"
