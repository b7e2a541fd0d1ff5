# internals/errors.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from struct_tetris.internals.report import Span, Reporter


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class Category(str, Enum):
    FIELD   = "field"
    TYPE    = "type"
    PARSE   = "parse"
    IO      = "io"
    SEARCH  = "search"
    CONFIG  = "config"


@dataclass(frozen=True)
class ErrorMessage:
    code: str
    severity: Severity
    text: str
    category: Category = Category.FIELD
    doc: str = ""


REGISTRY: Dict[str, ErrorMessage] = {}

class _ErrorCatalog:
    def __init__(self, backing: Dict[str, ErrorMessage]) -> None:
        self._registry = backing

    def __getattr__(self, name: str) -> ErrorMessage:
        try:
            return self._registry[name]
        except KeyError as e:
            raise AttributeError(name) from e

    def __getitem__(self, code: str) -> ErrorMessage:
        return self._registry[code]


ERR = _ErrorCatalog(REGISTRY)


class TetrisError(Exception):
    """Base error carrying a catalog code, formatted text and optional span."""

    def __init__(self, code: str, span: Optional[Span] = None, **kwargs) -> None:
        self.code = code
        self.span = span
        self.params = kwargs
        self.text = _fmt(code, **kwargs)
        super().__init__(f"{code}: {self.text}")

    @property
    def severity(self) -> Severity:
        return _get(self.code).severity

    def report(self, r: Reporter) -> None:
        if self.severity == Severity.ERROR:
            r.error(self.code, self.text, self.span)
        else:
            r.warn(self.code, self.text, self.span)


class ValidationError(TetrisError):
    """A struct field line failed validation.

    `index` is the position of the offending line in the validated sequence.
    """

    def __init__(self, code: str, span: Optional[Span] = None,
                 index: Optional[int] = None, **kwargs) -> None:
        super().__init__(code, span, **kwargs)
        self.index = index


class EmptyFieldError(ValidationError):
    pass


class MalformedFieldError(ValidationError):
    pass


class UnknownTypeError(ValidationError):
    pass


class StructParseError(TetrisError):
    pass


class StructNotFoundError(StructParseError):
    pass


class FileAccessError(TetrisError):
    pass


class SearchLimitError(TetrisError):
    pass


class ConfigError(TetrisError):
    pass


def emit(r: Reporter, em: ErrorMessage, span: Optional[Span], **kwargs) -> None:
    text = _fmt(em.code, **kwargs)
    if em.severity == Severity.ERROR:
        r.error(em.code, text, span)
    else:
        r.warn(em.code, text, span)


#
# --- Helpers
#

def _add(msg: ErrorMessage) -> None:
    if msg.code in REGISTRY:
        raise ValueError(f"duplicate error code {REGISTRY[msg.code]} in {msg}")
    REGISTRY[msg.code] = msg

def _get(code: str) -> ErrorMessage:
    try:
        return REGISTRY[code]
    except KeyError:
        raise KeyError(f"unknown error code: {code}")

def _fmt(code: str, **kwargs) -> str:
    msg = _get(code)
    try:
        return msg.text.format(**kwargs)
    except KeyError as key_error:
        missing = key_error.args[0]
        raise KeyError(f"missing text key '{missing}' for {code} "
                       f"(needed by: {msg.text!r})") from None

#
# --- Registry population
#

# Field validation (TE0001-TE0099)
_add(ErrorMessage("TE0001", Severity.ERROR,
    "empty line in the struct body",
    Category.FIELD, "Blank lines inside a struct body are not accepted, delete them."))

_add(ErrorMessage("TE0002", Severity.ERROR,
    "invalid field in the struct body '{field}'",
    Category.FIELD, "A field line needs at least a name and a type separated by whitespace."))

_add(ErrorMessage("TE0003", Severity.ERROR,
    "could not recognize type '{type}'",
    Category.TYPE, "Only Go primitive types and pointer types (*T) are supported."))

_add(ErrorMessage("TE0004", Severity.ERROR,
    "invalid type '*'",
    Category.TYPE, "A pointer marker must be followed by the pointee type name."))

# Struct locating/parsing (TE0100-TE0199)
_add(ErrorMessage("TE0101", Severity.ERROR,
    "no struct declaration found",
    Category.PARSE, "The file has no line containing ' struct {'."))

_add(ErrorMessage("TE0102", Severity.ERROR,
    "struct '{name}' is never closed",
    Category.PARSE, "Reached end of file before the closing '}' of the struct body."))

_add(ErrorMessage("TE0103", Severity.ERROR,
    "cannot parse struct block: unexpected '{token}'",
    Category.PARSE, "The struct block does not follow the 'NAME struct {' / fields / '}' layout."))

_add(ErrorMessage("TE0104", Severity.ERROR,
    "struct '{name}' not found",
    Category.PARSE, "The struct selected with --struct does not exist in the file."))

# File access (TE0200-TE0299)
_add(ErrorMessage("TE0201", Severity.ERROR,
    "could not read file '{path}': {reason}",
    Category.IO))

_add(ErrorMessage("TE0202", Severity.ERROR,
    "could not write file '{path}': {reason}",
    Category.IO))

# Search (TE0300-TE0399)
_add(ErrorMessage("TE0301", Severity.WARNING,
    "brute force skipped for '{name}': {count} fields exceed the limit of {limit}",
    Category.SEARCH, "Exhaustive search costs n! layout evaluations. Raise brute_force_limit to force it."))

_add(ErrorMessage("TE0302", Severity.WARNING,
    "ABI size of '{name}' is {abi} bytes, simulated layout is {size} bytes",
    Category.SEARCH, "The simulation aligns complex64 to 8 bytes where the native ABI uses 4."))

# Configuration (TE0400-TE0499)
_add(ErrorMessage("TE0401", Severity.ERROR,
    "invalid configuration: {message}",
    Category.CONFIG))

_add(ErrorMessage("TE0402", Severity.ERROR,
    "cannot load configuration '{path}': {reason}",
    Category.CONFIG))
