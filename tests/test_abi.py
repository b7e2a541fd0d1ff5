import pytest
from llvmlite import ir

from struct_tetris.internals.errors import UnknownTypeError
from struct_tetris.layout.abi import abi_size, llvm_type_for
from struct_tetris.layout.fields import FieldDescriptor
from struct_tetris.layout.sizing import compute_size


def fields_of(*types):
    return [FieldDescriptor(f"f{i}", t) for i, t in enumerate(types)]


# Orderings whose fields are all aligned to their own size
AGREEING = [
    ("int8", "int64", "int16"),
    ("int64", "int16", "int8"),
    ("int8", "int32", "int8", "int64"),
    ("int16", "int8", "int16"),
    ("float32", "float64", "int32"),
    ("int8", "string"),
    ("int8", "complex128", "int8"),
    ("byte", "string", "int32", "*Record", "float64", "rune"),
    ("uintptr", "uint8", "uint", "int"),
]


@pytest.mark.parametrize("types", AGREEING)
def test_simulation_matches_llvm(catalog, types):
    fields = fields_of(*types)
    assert abi_size(fields, catalog) == compute_size(fields, catalog)


def test_complex64_differs_from_llvm(catalog):
    fields = fields_of("int8", "complex64")
    assert abi_size(fields, catalog) == 12
    assert compute_size(fields, catalog) == 16


def test_32bit_pointers(catalog32):
    assert abi_size(fields_of("int8", "*Node"), catalog32) == 8
    assert abi_size(fields_of("int8", "string"), catalog32) == 12


def test_empty_struct(catalog):
    assert abi_size([], catalog) == 0


def test_lowering(catalog, catalog32):
    assert llvm_type_for("int16", catalog) == ir.IntType(16)
    assert llvm_type_for("*T", catalog) == ir.IntType(64)
    assert llvm_type_for("*T", catalog32) == ir.IntType(32)
    assert llvm_type_for("float64", catalog) == ir.DoubleType()
    assert llvm_type_for("string", catalog) == ir.LiteralStructType([ir.IntType(64), ir.IntType(64)])


def test_lowering_rejects_unknown_types(catalog):
    with pytest.raises(UnknownTypeError):
        llvm_type_for("float128", catalog)
