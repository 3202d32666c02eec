"""
Record models for compiler oracle output.

Every non-empty line the compiler writes on its structured output channel is
one JSON object with a ``kind`` discriminator and a ``payload``. Payload items
are decoded into the typed symbol models below; fields the engine does not
read are preserved as extras so downstream consumers still see them.
"""

import logging
from typing import Annotated, Any, ClassVar, Dict, List, Literal, Optional, Union
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    ValidatorFunctionWrapHandler,
    field_validator,
    model_validator,
)

logger = logging.getLogger(__name__)


# Record kind names as written by the compiler
RECORD_KINDS = (
    "diagnostic",
    "includedFiles",
    "constants",
    "tags",
    "enumerators",
    "variables",
    "functions",
    "substitutes",
)

# Older compiler builds write {"type": ..., "contents": ...} with these names
LEGACY_KIND_ALIASES = {
    "error": "diagnostic",
    "files": "includedFiles",
}


def _tagged(tag: str, name: str) -> str:
    """Prefix a symbol name with its tag, PAWN style (``Float:x``)"""
    if not tag or tag == "_":
        return name
    return f"{tag}:{name}"


def _drop_nulls(data: Any) -> Any:
    """Null values fall back to the field defaults"""
    if isinstance(data, dict):
        return {key: value for key, value in data.items() if value is not None}
    return data


class SymbolBase(BaseModel):
    """Common fields of every symbol reported by the compiler"""
    model_config = ConfigDict(
        extra="allow",
        str_strip_whitespace=True
    )

    name: str
    file_path: str = ""
    line: int = 0

    # Human readable summary, composed by SymbolTable.finalize()
    detail: str = ""

    @model_validator(mode="before")
    @classmethod
    def ignore_nulls(cls, data: Any) -> Any:
        return _drop_nulls(data)

    def compose_detail(self) -> str:
        return self.name


class IncludedFile(BaseModel):
    """A file pulled into the compilation through #include"""
    model_config = ConfigDict(extra="allow")

    file_path: str

    @model_validator(mode="before")
    @classmethod
    def accept_bare_path(cls, data: Any) -> Any:
        """Included files may be reported as plain path strings"""
        if isinstance(data, str):
            return {"file_path": data}
        return data


class ConstantSymbol(SymbolBase):
    tag: str = ""
    value: Optional[Union[int, float, str]] = None

    def compose_detail(self) -> str:
        if self.value is None:
            return f"const {_tagged(self.tag, self.name)}"
        return f"const {_tagged(self.tag, self.name)} = {self.value}"


class TagSymbol(SymbolBase):
    id: int = 0
    strong: bool = False

    def compose_detail(self) -> str:
        return f"{self.name}:"


class EnumeratorSymbol(SymbolBase):
    tag: str = ""
    enum_name: str = ""
    value: Optional[Union[int, float]] = None

    def compose_detail(self) -> str:
        text = _tagged(self.tag, self.name)
        if self.enum_name:
            text = f"{self.enum_name}::{text}"
        if self.value is not None:
            text = f"{text} = {self.value}"
        return text


class VariableSymbol(SymbolBase):
    tag: str = ""
    specifier: str = "new"
    dimensions: List[Optional[int]] = Field(default_factory=list)

    def compose_detail(self) -> str:
        suffix = "".join(f"[{size if size else ''}]" for size in self.dimensions)
        return f"{self.specifier} {_tagged(self.tag, self.name)}{suffix}".strip()


class FunctionSymbol(SymbolBase):
    tag: str = ""
    specifier: str = ""  # native, stock, public, forward, static
    parameters: List[str] = Field(default_factory=list)
    documentation: str = ""

    def compose_detail(self) -> str:
        signature = f"{_tagged(self.tag, self.name)}({', '.join(self.parameters)})"
        return f"{self.specifier} {signature}".strip()


class SubstituteSymbol(SymbolBase):
    """Textual #define substitution"""
    substitution: str = ""

    def compose_detail(self) -> str:
        return f"#define {self.name} {self.substitution}".rstrip()


class Diagnostic(BaseModel):
    """Compiler error, warning or fatal error"""
    model_config = ConfigDict(
        extra="allow",
        str_strip_whitespace=True
    )

    file_path: str = ""
    start_line: int = 0
    end_line: int = 0
    severity: str = "error"  # error, warning, fatal
    number: int = 0
    message: str = ""
    error_detail: str = ""

    @model_validator(mode="before")
    @classmethod
    def ignore_nulls(cls, data: Any) -> Any:
        return _drop_nulls(data)

    @field_validator("severity")
    @classmethod
    def validate_severity(cls, v: str) -> str:
        """Normalize severity names"""
        v = v.lower()
        if v == "fatal error":
            return "fatal"
        return v

    @property
    def is_error(self) -> bool:
        return self.severity in ("error", "fatal")

    @property
    def detail(self) -> str:
        """pawncc formatted line, e.g. ``main.pwn(3) : error 017: undefined symbol "x"``"""
        if self.error_detail:
            return self.error_detail
        line = str(self.start_line)
        if self.end_line and self.end_line != self.start_line:
            line = f"{self.start_line} -- {self.end_line}"
        severity = "fatal error" if self.severity == "fatal" else self.severity
        return f"{self.file_path}({line}) : {severity} {self.number:03d}: {self.message}"


class _PayloadRecord(BaseModel):
    """
    Record envelope with a list payload.

    Payload items are validated one by one when the list as a whole fails,
    so a single malformed item only loses itself.
    """

    # A lone object is read as a one-item payload
    accepts_single_item: ClassVar[bool] = False

    @field_validator("payload", mode="wrap", check_fields=False)
    @classmethod
    def skip_invalid_items(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
        if cls.accepts_single_item and isinstance(value, dict):
            value = [value]

        try:
            return handler(value)
        except ValidationError:
            if not isinstance(value, list):
                raise

        items = []
        for index, item in enumerate(value):
            try:
                items.extend(handler([item]))
            except ValidationError as e:
                logger.warning(f"Skipping invalid {cls.__name__} payload item {index}: {e.error_count()} errors")
        return items


class DiagnosticRecord(_PayloadRecord):
    accepts_single_item: ClassVar[bool] = True

    kind: Literal["diagnostic"]
    payload: List[Diagnostic] = Field(default_factory=list)


class IncludedFilesRecord(_PayloadRecord):
    kind: Literal["includedFiles"]
    payload: List[IncludedFile] = Field(default_factory=list)


class ConstantsRecord(_PayloadRecord):
    kind: Literal["constants"]
    payload: List[ConstantSymbol] = Field(default_factory=list)


class TagsRecord(_PayloadRecord):
    kind: Literal["tags"]
    payload: List[TagSymbol] = Field(default_factory=list)


class EnumeratorsRecord(_PayloadRecord):
    kind: Literal["enumerators"]
    payload: List[EnumeratorSymbol] = Field(default_factory=list)


class VariablesRecord(_PayloadRecord):
    kind: Literal["variables"]
    payload: List[VariableSymbol] = Field(default_factory=list)


class FunctionsRecord(_PayloadRecord):
    kind: Literal["functions"]
    payload: List[FunctionSymbol] = Field(default_factory=list)


class SubstitutesRecord(_PayloadRecord):
    kind: Literal["substitutes"]
    payload: List[SubstituteSymbol] = Field(default_factory=list)


ParsedRecord = Annotated[
    Union[
        DiagnosticRecord,
        IncludedFilesRecord,
        ConstantsRecord,
        TagsRecord,
        EnumeratorsRecord,
        VariablesRecord,
        FunctionsRecord,
        SubstitutesRecord,
    ],
    Field(discriminator="kind"),
]

parsed_record_adapter: TypeAdapter = TypeAdapter(ParsedRecord)


def upgrade_legacy_record(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Map the legacy ``type``/``contents`` record shape onto ``kind``/``payload``.

    A non-string ``type`` is left as is and fails validation as a record
    without ``kind``.
    """
    if "kind" in raw or "type" not in raw:
        return raw

    kind = raw["type"]
    if not isinstance(kind, str):
        return raw

    return {
        "kind": LEGACY_KIND_ALIASES.get(kind, kind),
        "payload": raw.get("contents", []),
    }
