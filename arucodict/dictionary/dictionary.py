"""
Marker dictionary with rotation-invariant identification.

Each marker is kept in its four clockwise rotations as packed bytes, so an
observed grid is matched with one XOR/popcount pass over the whole
dictionary instead of rotating it at query time. The row index of a marker
is its id.
"""

import logging
import numpy as np
from pathlib import Path
from typing import Iterable, NamedTuple, Union

import cv2

from ..codec.bytecode import (
    get_bits_from_byte_list,
    get_byte_list_from_bits,
    hamming_distance,
    n_bytes_for,
    pack_bits,
    rotate_bits,
)


logger = logging.getLogger(__name__)


class MarkerMatch(NamedTuple):
    """Result of identifying an observed bit grid."""
    found: bool
    id: int = -1
    rotation: int = -1


def self_distance(bits) -> int:
    """
    Minimum Hamming distance of a grid to its own 90, 180 and 270 degree rotations.

    A low value means the marker is close to rotationally symmetric, which
    makes its orientation ambiguous.
    """
    byte_list = get_byte_list_from_bits(bits)
    return int(hamming_distance(byte_list[0], byte_list[1:]).min())


class Dictionary:
    """
    Set of square binary markers sharing one size and correction budget.

    Attributes:
        marker_size: Number of bits per marker side
        max_correction_bits: Maximum number of bit errors corrected during identification
        bytes_list: (n_markers, 4, n_bytes) read-only array; bytes_list[i, r] is
            marker i rotated r times clockwise
    """

    def __init__(self, bytes_list: Union[bytes, bytearray, np.ndarray, None] = None,
                    marker_size: int = 0, max_correction_bits: int = 0):
        """
        Initialize dictionary.

        Args:
            bytes_list: Flat buffer of n_markers * 4 * n_bytes bytes (marker, then
                rotation, then byte), or an array shaped (n_markers, 4, n_bytes).
                None or empty gives a dictionary without markers.
            marker_size: Bits per marker side
            max_correction_bits: Correctable bit errors
        """
        if marker_size <= 0:
            raise ValueError(f"marker_size must be positive, got {marker_size}")
        if max_correction_bits < 0:
            raise ValueError(f"max_correction_bits must be non-negative, got {max_correction_bits}")

        self.marker_size = int(marker_size)
        self.max_correction_bits = int(max_correction_bits)
        self.n_bytes = n_bytes_for(self.marker_size)

        if bytes_list is None:
            data = np.zeros(0, dtype=np.uint8)
        elif isinstance(bytes_list, (bytes, bytearray)):
            data = np.frombuffer(bytes_list, dtype=np.uint8)
        else:
            data = np.asarray(bytes_list, dtype=np.uint8)

        per_marker = 4 * self.n_bytes
        if data.size % per_marker != 0:
            raise ValueError(
                f"Byte buffer of {data.size} bytes is not a multiple of {per_marker} "
                f"(4 rotations x {self.n_bytes} bytes)")
        if data.ndim == 3 and data.shape[1:] != (4, self.n_bytes):
            raise ValueError(f"Expected shape (n, 4, {self.n_bytes}), got {data.shape}")

        storage = data.reshape(-1, 4, self.n_bytes).copy()
        storage.setflags(write=False)
        self._bytes = storage

    @classmethod
    def from_bits(cls, markers: Iterable, max_correction_bits: int = 0) -> 'Dictionary':
        """
        Build a dictionary from canonical (0 degree) bit grids.

        Args:
            markers: Iterable of equally sized square grids
            max_correction_bits: Correctable bit errors

        Returns:
            New dictionary holding the markers in the given order
        """
        grids = [np.asarray(bits) for bits in markers]
        if not grids:
            raise ValueError("from_bits needs at least one marker to infer its size")
        sizes = {grid.shape for grid in grids}
        if len(sizes) != 1:
            raise ValueError(f"All markers must share one size, got shapes {sorted(sizes)}")
        encoded = np.stack([get_byte_list_from_bits(grid) for grid in grids])
        return cls(encoded, grids[0].shape[0], max_correction_bits)

    @property
    def bytes_list(self) -> np.ndarray:
        return self._bytes

    def __len__(self) -> int:
        return self._bytes.shape[0]

    def __repr__(self):
        return (f"Dictionary(markers={len(self)}, marker_size={self.marker_size}, "
                f"max_correction_bits={self.max_correction_bits})")

    def _check_id(self, id: int):
        if not 0 <= id < len(self):
            raise IndexError(f"Marker id {id} out of range for dictionary of {len(self)} markers")

    def _check_bits(self, bits) -> np.ndarray:
        grid = np.asarray(bits)
        if grid.shape != (self.marker_size, self.marker_size):
            raise ValueError(
                f"Expected a {self.marker_size}x{self.marker_size} bit grid, got shape {grid.shape}")
        return grid

    def identify(self, observed_bits, max_correction_rate: float) -> MarkerMatch:
        """
        Find the marker closest to an observed bit grid.

        Args:
            observed_bits: (marker_size, marker_size) grid of 0/1 values
            max_correction_rate: Fraction in [0, 1] of max_correction_bits to allow

        Returns:
            MarkerMatch with id and rotation of the best candidate, or
            found=False when no marker lies within the correction budget
        """
        if not 0.0 <= max_correction_rate <= 1.0:
            raise ValueError(f"max_correction_rate must be in [0, 1], got {max_correction_rate}")

        packed = pack_bits(self._check_bits(observed_bits))
        if len(self) == 0:
            return MarkerMatch(False)

        max_correction = int(np.floor(self.max_correction_bits * max_correction_rate))

        # (n_markers, 4); flat argmin picks lowest id, then lowest rotation
        distances = hamming_distance(packed, self._bytes)
        best = int(np.argmin(distances))
        idx, rotation = divmod(best, 4)

        if distances[idx, rotation] > max_correction:
            return MarkerMatch(False)
        return MarkerMatch(True, idx, rotation)

    def get_distance_to_id(self, bits, id: int, all_rotations: bool = True) -> int:
        """
        Hamming distance between a bit grid and marker `id`.

        Args:
            bits: (marker_size, marker_size) grid
            id: Marker id
            all_rotations: Minimum over the four rotations if True, else rotation 0 only

        Returns:
            Number of differing bits
        """
        self._check_id(id)
        packed = pack_bits(self._check_bits(bits))
        rotations = self._bytes[id] if all_rotations else self._bytes[id, :1]
        return int(hamming_distance(packed, rotations).min())

    def get_marker_bits(self, id: int, rotation: int = 0) -> np.ndarray:
        """Canonical grid of marker `id`, rotated `rotation` times clockwise."""
        self._check_id(id)
        bits = get_bits_from_byte_list(self._bytes[id, 0], self.marker_size)
        return rotate_bits(bits, rotation) if rotation % 4 else bits

    def min_marker_distance(self) -> int:
        """
        Minimum distance between two distinct markers over every rotation pair.

        Returns marker_size**2 + 1 when the dictionary has fewer than two markers.
        """
        best = self.marker_size * self.marker_size + 1
        for i in range(len(self) - 1):
            # rotation pairs (a, b) reduce to rotation 0 of i against all rotations of j
            d = int(hamming_distance(self._bytes[i, 0], self._bytes[i + 1:]).min())
            best = min(best, d)
            if best == 0:
                break
        return best

    def draw_marker(self, id: int, side_pixels: int, border_bits: int = 1) -> np.ndarray:
        """
        Render the canonical image of a marker.

        Cells are scaled with nearest-neighbour resizing. Blocks are equal when
        side_pixels is a multiple of marker_size + 2 * border_bits; otherwise
        they differ by at most one pixel (e.g. 14 or 15 pixels for 100 pixels
        over 7 cells).

        Args:
            id: Marker id
            side_pixels: Width and height of the output image
            border_bits: Width of the black border, in cells

        Returns:
            (side_pixels, side_pixels) uint8 image; 1 bits are white (255),
            0 bits and the border are black (0)
        """
        self._check_id(id)
        if border_bits < 1:
            raise ValueError(f"border_bits must be at least 1, got {border_bits}")
        cells = self.marker_size + 2 * border_bits
        if side_pixels < cells:
            raise ValueError(
                f"side_pixels={side_pixels} too small for {cells} cells "
                f"(marker {self.marker_size} + border {border_bits} on each side)")

        tiny = np.zeros((cells, cells), dtype=np.uint8)
        tiny[border_bits:border_bits + self.marker_size,
             border_bits:border_bits + self.marker_size] = self.get_marker_bits(id) * 255

        if side_pixels == cells:
            return tiny
        return cv2.resize(tiny, (side_pixels, side_pixels), interpolation=cv2.INTER_NEAREST)

    def save(self, path: Union[str, Path]):
        """
        Save dictionary to a numpy .npz archive.

        Args:
            path: Output file path
        """
        path = Path(path)
        np.savez(path, bytes_list=self._bytes,
                 marker_size=self.marker_size,
                 max_correction_bits=self.max_correction_bits)
        logger.info(f"Saved {self} to {path}")

    @classmethod
    def load(cls, path: Union[str, Path]) -> 'Dictionary':
        """
        Load a dictionary written by save().

        Args:
            path: Path to .npz archive
        """
        with np.load(Path(path)) as data:
            return cls(data['bytes_list'],
                       int(data['marker_size']),
                       int(data['max_correction_bits']))
