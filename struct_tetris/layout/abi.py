"""
Native ABI sizes through LLVM.

Lowers a field ordering to an LLVM literal struct type and asks LLVM's data
layout engine for its ABI size. This gives a size computed by a real
compiler backend to compare against the packing simulation in `sizing`.

Go and LLVM agree on field placement for every catalog type except the
alignment of complex64: both align it to 4 bytes, while the simulation
treats it as an 8-byte aligned value.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Sequence

from llvmlite import ir
from llvmlite import binding as llvm

from struct_tetris.layout.catalog import DEFAULT_CATALOG, TypeCatalog
from struct_tetris.layout.fields import FieldDescriptor

# Explicit layouts so the answer does not depend on the host target.
# Pointers are lowered to iW integers, so only integer/float alignment matters.
DATA_LAYOUTS = {
    8: "e-m:e-p:64:64-i64:64-i128:128-f80:128-n8:16:32:64-S128",
    4: "e-m:e-p:32:32-i64:32:64-f64:32:64-n8:16:32-S128",
}


@lru_cache(maxsize=None)
def target_data(word_size: int) -> llvm.TargetData:
    return llvm.create_target_data(DATA_LAYOUTS[word_size])


def llvm_type_for(type_name: str, catalog: TypeCatalog = DEFAULT_CATALOG) -> ir.Type:
    """LLVM IR type with the same size and alignment as the Go type."""
    catalog.size_of(type_name)  # rejects unknown types
    word = ir.IntType(catalog.word_size * 8)
    if catalog.is_reference(type_name):
        return word

    match type_name:
        case "int8" | "uint8" | "byte":
            return ir.IntType(8)
        case "int16" | "uint16":
            return ir.IntType(16)
        case "int32" | "uint32" | "rune":
            return ir.IntType(32)
        case "int64" | "uint64":
            return ir.IntType(64)
        case "int" | "uint" | "uintptr":
            return word
        case "float32":
            return ir.FloatType()
        case "float64":
            return ir.DoubleType()
        case "complex64":
            return ir.LiteralStructType([ir.FloatType(), ir.FloatType()])
        case "complex128":
            return ir.LiteralStructType([ir.DoubleType(), ir.DoubleType()])
        case "string":
            # {data pointer, length}
            return ir.LiteralStructType([word, word])
        case _:
            raise ValueError(f"no LLVM lowering for type '{type_name}'")


def llvm_struct_for(ordering: Sequence[FieldDescriptor],
                    catalog: TypeCatalog = DEFAULT_CATALOG) -> ir.LiteralStructType:
    return ir.LiteralStructType([llvm_type_for(f.type_name, catalog) for f in ordering])


def abi_size(ordering: Sequence[FieldDescriptor],
             catalog: TypeCatalog = DEFAULT_CATALOG) -> int:
    """ABI size in bytes of a struct with fields in this order."""
    if not ordering:
        return 0
    struct_type = llvm_struct_for(ordering, catalog)
    return struct_type.get_abi_size(target_data(catalog.word_size))
