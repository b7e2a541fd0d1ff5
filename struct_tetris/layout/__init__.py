"""Struct layout simulation and field ordering search."""
from struct_tetris.layout.catalog import DEFAULT_CATALOG, TypeCatalog, detect_word_size
from struct_tetris.layout.fields import FieldDescriptor, check_field, iter_field_errors, parse_fields, validate
from struct_tetris.layout.optimize import (
    Candidate,
    TopK,
    heap_permutations,
    optimize_brute_force,
    optimize_greedy,
)
from struct_tetris.layout.sizing import Layout, compute_layout, compute_size, packed_size

__all__ = [
    'DEFAULT_CATALOG',
    'TypeCatalog',
    'detect_word_size',
    'FieldDescriptor',
    'check_field',
    'iter_field_errors',
    'parse_fields',
    'validate',
    'Candidate',
    'TopK',
    'heap_permutations',
    'optimize_brute_force',
    'optimize_greedy',
    'Layout',
    'compute_layout',
    'compute_size',
    'packed_size',
]
