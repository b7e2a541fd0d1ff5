"""Struct size calculation for Go field orderings.

This module simulates how the Go compiler packs struct fields: each field
is placed at the next offset that satisfies its alignment, and the struct
size is rounded up to the largest alignment among its fields.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Sequence

from struct_tetris.layout.catalog import DEFAULT_CATALOG, TypeCatalog
from struct_tetris.layout.fields import FieldDescriptor


@dataclass(frozen=True)
class Layout:
    """A field ordering together with its computed offsets and total size."""
    fields: tuple[FieldDescriptor, ...]
    offsets: tuple[int, ...]
    sizes: tuple[int, ...]
    total_size: int

    def padding_after(self, index: int) -> int:
        """Filler bytes between field `index` and the next field (or the struct end)."""
        end = self.offsets[index] + self.sizes[index]
        if index + 1 < len(self.fields):
            return self.offsets[index + 1] - end
        return self.total_size - end

    @property
    def padding(self) -> int:
        return self.total_size - sum(self.sizes)


def _advance(mem: int, size: int) -> tuple[int, int]:
    """Place one field of `size` bytes after `mem` used bytes.

    Returns:
        Tuple of (new used bytes, alignment required by the field).
    """
    match size:
        case 1:
            return mem + 1, 1
        case 2:
            return mem + mem % 2 + 2, 2
        case 4:
            if mem % 4 == 0:
                return mem + 4, 4
            return mem + 8 - mem % 4, 4
        case 8:
            if mem % 8 == 0:
                return mem + 8, 8
            return mem + 16 - mem % 8, 8
        case 16:
            # complex128: two float64 halves, 8-byte aligned
            if mem % 8 == 0:
                return mem + 16, 8
            return mem + 24 - mem % 8, 8
        case _:
            raise ValueError(f"unsupported field size: {size}")


def _grow(cap: int, mem: int, cap_mul: int) -> int:
    """Raise the allocated size to cover `mem`, keeping it a multiple of `cap_mul`."""
    if mem <= cap:
        return cap
    if mem % cap_mul == 0:
        return mem
    return (mem // cap_mul + 1) * cap_mul


def packed_size(sizes: Iterable[int]) -> int:
    """Struct size for fields of the given byte sizes, in order."""
    cap_mul = 1  # Largest alignment seen so far
    cap = 0
    mem = 0
    for size in sizes:
        mem, align = _advance(mem, size)
        if align > cap_mul:
            cap_mul = align
        cap = _grow(cap, mem, cap_mul)
    return cap


def compute_layout(ordering: Sequence[FieldDescriptor],
                   catalog: TypeCatalog = DEFAULT_CATALOG) -> Layout:
    """Lay out `ordering` and record where every field starts."""
    sizes = tuple(catalog.size_of(field.type_name) for field in ordering)
    offsets = []

    cap_mul = 1
    cap = 0
    mem = 0
    for size in sizes:
        mem, align = _advance(mem, size)
        cap_mul = max(cap_mul, align)
        cap = _grow(cap, mem, cap_mul)
        offsets.append(mem - size)

    return Layout(tuple(ordering), tuple(offsets), sizes, cap)


def compute_size(ordering: Sequence[FieldDescriptor],
                 catalog: TypeCatalog = DEFAULT_CATALOG) -> int:
    """Total bytes allocated for a struct with fields in this order."""
    return packed_size(catalog.size_of(field.type_name) for field in ordering)
