"""Go primitive type sizes.

The catalog maps every recognized primitive type name to its size in bytes
for a given word size. Pointer types (``*T``) have no entry: they are always
one word wide whatever ``T`` is.
"""
from __future__ import annotations

from llvmlite import binding as llvm

from struct_tetris.internals.errors import UnknownTypeError

REFERENCE_MARKER = "*"

# Architectures whose native word is 32 bits wide
_32BIT_ARCHES = {
    "i386", "i486", "i586", "i686", "x86",
    "arm", "armv6", "armv7", "armv7a", "armv7l", "thumbv7",
    "mips", "mipsel", "ppc", "powerpc", "riscv32", "wasm32",
}


def detect_word_size(triple: str | None = None) -> int:
    """Word size in bytes of the host target (or of the given LLVM triple)."""
    if triple is None:
        triple = llvm.get_default_triple()
    arch = triple.split('-')[0]
    return 4 if arch in _32BIT_ARCHES else 8


class TypeCatalog:
    """Read-only type name → size table for one word size."""

    def __init__(self, word_size: int = 8) -> None:
        if word_size not in (4, 8):
            raise ValueError(f"unsupported word size: {word_size}")
        self.word_size = word_size
        w = word_size
        self._sizes: dict[str, int] = {
            "int8": 1, "int16": 2, "int32": 4, "int64": 8, "int": w,
            "uint8": 1, "uint16": 2, "uint32": 4, "uint64": 8, "uint": w,
            "float32": 4, "float64": 8, "complex64": 8, "complex128": 16,
            "byte": 1, "rune": 4, "uintptr": w, "string": 2 * w,
        }

    def __contains__(self, type_name: str) -> bool:
        return type_name in self._sizes

    def __repr__(self) -> str:
        return f"TypeCatalog(word_size={self.word_size})"

    def names(self) -> list[str]:
        return sorted(self._sizes)

    @staticmethod
    def is_reference(type_name: str) -> bool:
        """True for ``*T`` with a non-empty ``T``."""
        return type_name.startswith(REFERENCE_MARKER) and len(type_name) > len(REFERENCE_MARKER)

    def size_of(self, type_name: str) -> int:
        if self.is_reference(type_name):
            return self.word_size
        try:
            return self._sizes[type_name]
        except KeyError:
            if type_name == REFERENCE_MARKER:
                raise UnknownTypeError("TE0004") from None
            raise UnknownTypeError("TE0003", type=type_name) from None


DEFAULT_CATALOG = TypeCatalog(8)
