"""
Bit matrix / byte list conversion for square binary markers.
"""

from .bytecode import (
    POPCOUNT_TABLE,
    get_bits_from_byte_list,
    get_byte_list_from_bits,
    hamming_distance,
    n_bytes_for,
    pack_bits,
    rotate_bits,
)

__all__ = [
    'POPCOUNT_TABLE',
    'get_bits_from_byte_list',
    'get_byte_list_from_bits',
    'hamming_distance',
    'n_bytes_for',
    'pack_bits',
    'rotate_bits',
]
