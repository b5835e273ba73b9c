"""
Rotation-aware byte encoding of square marker bit grids.

A marker of side S is stored as four byte sequences, one per clockwise
rotation (0, 90, 180, 270 degrees). Each sequence packs the rotated grid
row-major, most significant bit first; the final byte is zero-padded in
its low-order bits when S*S is not a multiple of 8.
"""

import numpy as np
from typing import Union


# Number of set bits for every byte value
POPCOUNT_TABLE = np.array([bin(i).count('1') for i in range(256)], dtype=np.uint8)


def n_bytes_for(marker_size: int) -> int:
    """Bytes needed to store one rotation of a marker of the given side."""
    return (marker_size * marker_size + 7) // 8


def _as_grid(bits) -> np.ndarray:
    grid = np.asarray(bits)
    if grid.ndim != 2 or grid.shape[0] != grid.shape[1] or grid.shape[0] == 0:
        raise ValueError(f"Expected a non-empty square bit grid, got shape {grid.shape}")
    if grid.dtype == np.bool_:
        return grid.astype(np.uint8)
    if np.any((grid != 0) & (grid != 1)):
        raise ValueError("Bit grid values must be 0 or 1")
    return grid.astype(np.uint8)


def rotate_bits(bits, k: int = 1) -> np.ndarray:
    """
    Rotate a bit grid 90 degrees clockwise.

    Args:
        bits: Square grid of 0/1 values
        k: Number of quarter turns (negative turns counter-clockwise)

    Returns:
        Rotated copy of the grid
    """
    return np.ascontiguousarray(np.rot90(_as_grid(bits), k=-k))


def pack_bits(bits) -> np.ndarray:
    """Pack the 0 degree rotation of a grid into bytes."""
    return np.packbits(_as_grid(bits).ravel(), bitorder='big')


def get_byte_list_from_bits(bits) -> np.ndarray:
    """
    Encode a bit grid in its four rotations.

    Args:
        bits: Square grid of 0/1 values

    Returns:
        (4, nbytes) uint8 array, row r holding the grid rotated r times clockwise
    """
    grid = _as_grid(bits)
    return np.stack([pack_bits(np.rot90(grid, k=-r)) for r in range(4)])


def get_bits_from_byte_list(byte_list, marker_size: int) -> np.ndarray:
    """
    Decode the 0 degree byte sequence of a marker back into its bit grid.

    Args:
        byte_list: (nbytes,) sequence or (4, nbytes) rotation list; only the
            first rotation is read, the others are a derived cache
        marker_size: Side length of the grid

    Returns:
        (marker_size, marker_size) uint8 grid
    """
    if marker_size <= 0:
        raise ValueError(f"marker_size must be positive, got {marker_size}")

    data = np.asarray(byte_list, dtype=np.uint8)
    if data.ndim == 2:
        data = data[0]
    nbytes = n_bytes_for(marker_size)
    if data.ndim != 1 or data.size != nbytes:
        raise ValueError(
            f"Expected {nbytes} bytes for marker size {marker_size}, got shape {data.shape}")

    total = marker_size * marker_size
    flat = np.unpackbits(data, bitorder='big')[:total]
    return flat.reshape(marker_size, marker_size)


def hamming_distance(a: Union[np.ndarray, bytes], b: Union[np.ndarray, bytes]) -> np.ndarray:
    """
    Byte-wise Hamming distance using the popcount lookup table.

    The last axis is summed; leading axes broadcast, so a single packed
    query can be compared against a whole (n, 4, nbytes) byte list.
    """
    xa = np.frombuffer(a, dtype=np.uint8) if isinstance(a, (bytes, bytearray)) else np.asarray(a, dtype=np.uint8)
    xb = np.frombuffer(b, dtype=np.uint8) if isinstance(b, (bytes, bytearray)) else np.asarray(b, dtype=np.uint8)
    return POPCOUNT_TABLE[np.bitwise_xor(xa, xb)].sum(axis=-1, dtype=np.int64)
