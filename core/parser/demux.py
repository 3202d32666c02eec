"""
Result demultiplexer for compiler output.

Splits the buffered structured output of one invocation into lines, decodes
each line independently into a ParsedRecord and routes the payloads to the
symbol and diagnostic sinks. A line that fails to decode is logged and
skipped; it never stops the lines after it.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List

from pydantic import ValidationError

from ..models.records import RECORD_KINDS, ParsedRecord, parsed_record_adapter, upgrade_legacy_record
from ..symbols import DiagnosticList, SymbolTable
from .error_recovery import OutputRecovery

logger = logging.getLogger(__name__)

# Record kind -> SymbolTable replace-all setter
_SYMBOL_SETTERS = {
    "includedFiles": "replace_files",
    "constants": "replace_constants",
    "tags": "replace_tags",
    "enumerators": "replace_enumerators",
    "variables": "replace_variables",
    "functions": "replace_functions",
    "substitutes": "replace_substitutes",
}


class RecordDecodeError(Exception):
    """Raised when an output line is not a valid record"""

    def __init__(self, line: str, reason: str):
        super().__init__(f"{reason}: {line[:200]}")
        self.line = line
        self.reason = reason


def decode_record(line: str) -> ParsedRecord:
    """
    Decode one line of structured compiler output.

    Raises:
        RecordDecodeError: If the line is not JSON, not an object, or has an
            unknown kind or invalid payload
    """
    try:
        raw = json.loads(OutputRecovery.normalize_non_finite(line))
    except json.JSONDecodeError as e:
        raise RecordDecodeError(line, f"Invalid JSON ({e.msg})") from e

    if not isinstance(raw, dict):
        raise RecordDecodeError(line, "Record is not a JSON object")

    try:
        return parsed_record_adapter.validate_python(upgrade_legacy_record(raw))
    except ValidationError as e:
        raise RecordDecodeError(line, f"Invalid record ({e.error_count()} errors)") from e
    except (TypeError, ValueError) as e:
        raise RecordDecodeError(line, f"Invalid record ({e})") from e


@dataclass
class DemuxResult:
    """Summary of one ingestion pass"""
    records: int = 0
    skipped: int = 0
    counts: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "records": self.records,
            "skipped": self.skipped,
            "counts": dict(self.counts)
        }


class ResultDemultiplexer:
    """Routes decoded compiler records to their sinks"""

    def __init__(self, symbols: SymbolTable, diagnostics: DiagnosticList):
        self.symbols = symbols
        self.diagnostics = diagnostics

    @staticmethod
    def split_lines(text: str) -> List[str]:
        return [line for line in text.split("\n") if line.strip()]

    def ingest(self, text: str) -> DemuxResult:
        """
        Decode all records of one invocation and replace the sinks.

        Every sink is replaced, including those of kinds absent from the
        output, then the symbol table is finalized once.
        """
        result = DemuxResult()
        grouped: Dict[str, List[Any]] = {kind: [] for kind in RECORD_KINDS}

        for line in self.split_lines(text):
            try:
                record = decode_record(line)
            except RecordDecodeError as e:
                logger.warning(f"Parsing data error, skipping line: {e}")
                result.skipped += 1
                continue

            grouped[record.kind].extend(record.payload)
            result.records += 1

        self.diagnostics.replace(grouped["diagnostic"])
        for kind, setter in _SYMBOL_SETTERS.items():
            getattr(self.symbols, setter)(grouped[kind])

        self.symbols.finalize()

        result.counts = {kind: len(items) for kind, items in grouped.items()}
        return result
