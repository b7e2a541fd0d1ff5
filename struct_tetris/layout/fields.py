"""Struct field descriptors and field line validation."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence

from struct_tetris.internals.errors import (
    EmptyFieldError,
    MalformedFieldError,
    UnknownTypeError,
    ValidationError,
)
from struct_tetris.layout.catalog import DEFAULT_CATALOG, REFERENCE_MARKER, TypeCatalog


@dataclass(frozen=True)
class FieldDescriptor:
    """One struct member.

    `text` is the trimmed source line the field came from, so struct tags
    and trailing comments survive printing and write-back.
    """
    name: str
    type_name: str
    text: str = ""

    def __post_init__(self) -> None:
        if not self.text:
            object.__setattr__(self, "text", f"{self.name} {self.type_name}")

    @classmethod
    def from_line(cls, line: str) -> FieldDescriptor:
        text = line.strip()
        name, type_name = text.split()[:2]
        return cls(name, type_name, text)

    def size(self, catalog: TypeCatalog = DEFAULT_CATALOG) -> int:
        return catalog.size_of(self.type_name)

    def __str__(self) -> str:
        return self.text


def check_field(line: str, catalog: TypeCatalog = DEFAULT_CATALOG,
                index: int | None = None) -> None:
    """Check a single field line, raising the matching ValidationError."""
    text = line.strip()
    if not text:
        raise EmptyFieldError("TE0001", index=index)

    tokens = text.split()
    if len(tokens) < 2:
        raise MalformedFieldError("TE0002", index=index, field=text)

    type_name = tokens[1]
    if type_name == REFERENCE_MARKER:
        raise UnknownTypeError("TE0004", index=index)
    if type_name not in catalog and not catalog.is_reference(type_name):
        raise UnknownTypeError("TE0003", index=index, type=type_name)


def iter_field_errors(lines: Iterable[str],
                      catalog: TypeCatalog = DEFAULT_CATALOG) -> Iterator[ValidationError]:
    """Yield one error per invalid line, in line order."""
    for index, line in enumerate(lines):
        try:
            check_field(line, catalog, index)
        except ValidationError as e:
            yield e


def validate(lines: Iterable[str], catalog: TypeCatalog = DEFAULT_CATALOG) -> None:
    """Raise the first validation error found in `lines`, if any."""
    for error in iter_field_errors(lines, catalog):
        raise error


def parse_fields(lines: Sequence[str],
                 catalog: TypeCatalog = DEFAULT_CATALOG) -> list[FieldDescriptor]:
    validate(lines, catalog)
    return [FieldDescriptor.from_line(line) for line in lines]
