"""
Custom marker dictionary generation.

Greedy search for markers that maximise the minimum Hamming distance to
every rotation of the markers already accepted and to their own rotations.
Based on the ArUco generator described in Garrido-Jurado et al. (2014),
"Automatic generation and detection of highly reliable fiducial markers
under occlusion".
"""

import logging
import numpy as np
from typing import Optional

from ..codec.bytecode import POPCOUNT_TABLE, n_bytes_for
from ..dictionary.dictionary import Dictionary


logger = logging.getLogger(__name__)


def initial_target_distance(marker_size: int) -> int:
    """
    Theoretical maximum inter-marker distance used as the starting target.

    Args:
        marker_size: Bits per marker side

    Returns:
        2 * floor(C * 4 / 3) with C = floor(marker_size**2 / 4)
    """
    c = (marker_size * marker_size) // 4
    return 2 * int(np.floor(c * 4.0 / 3.0))


def _encode_batch(grids: np.ndarray) -> np.ndarray:
    """
    Encode a batch of grids in their four clockwise rotations.

    Args:
        grids: (B, S, S) uint8 array

    Returns:
        (B, 4, nbytes) uint8 array
    """
    rotations = [np.rot90(grids, k=-r, axes=(1, 2)) for r in range(4)]
    flat = np.stack(rotations, axis=1).reshape(grids.shape[0], 4, -1)
    return np.packbits(flat, axis=-1, bitorder='big')


class CustomDictionaryGenerator:
    """
    Incremental builder for a custom dictionary.

    Owns the in-progress marker list exclusively; call generate() once and
    use the returned Dictionary.
    """

    def __init__(self, n_markers: int, marker_size: int,
                    base_dictionary: Optional[Dictionary] = None,
                    random_seed: int = 0,
                    max_unproductive_iterations: int = 5000,
                    batch_size: int = 256):
        """
        Initialize generator.

        Args:
            n_markers: Number of markers in the output dictionary
            marker_size: Bits per marker side
            base_dictionary: Markers copied verbatim at the beginning (optional)
            random_seed: Seed for the candidate generator
            max_unproductive_iterations: Rejected candidates after which the best
                one seen for the current slot is accepted
            batch_size: Candidates drawn and scored per numpy pass
        """
        if n_markers <= 0:
            raise ValueError(f"n_markers must be positive, got {n_markers}")
        if marker_size <= 0:
            raise ValueError(f"marker_size must be positive, got {marker_size}")
        if max_unproductive_iterations <= 0:
            raise ValueError("max_unproductive_iterations must be positive")
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")
        if base_dictionary is not None and len(base_dictionary) > 0 \
                and base_dictionary.marker_size != marker_size:
            raise ValueError(
                f"Base dictionary marker size {base_dictionary.marker_size} "
                f"does not match requested size {marker_size}")

        self.n_markers = n_markers
        self.marker_size = marker_size
        self.base_dictionary = base_dictionary
        self.max_unproductive_iterations = max_unproductive_iterations
        self.batch_size = batch_size
        self.rng = np.random.default_rng(random_seed)

        self.n_bytes = n_bytes_for(marker_size)
        self.tau = initial_target_distance(marker_size)
        self._count = 0
        self._storage = np.zeros((n_markers, 4, self.n_bytes), dtype=np.uint8)

    def _seed_from_base(self):
        """Copy base markers and take their minimum distance as target."""
        base = self.base_dictionary
        if base is None or len(base) == 0:
            return

        count = min(self.n_markers, len(base))
        self._storage[:count] = base.bytes_list[:count]

        min_distance = self.marker_size * self.marker_size + 1
        for i in range(count):
            rotations = self._storage[i]
            own = POPCOUNT_TABLE[rotations[0] ^ rotations[1:]].sum(axis=-1).min()
            min_distance = min(min_distance, int(own))
            if i + 1 < count:
                others = POPCOUNT_TABLE[rotations[0] ^ self._storage[i + 1:count]].sum(axis=-1).min()
                min_distance = min(min_distance, int(others))

        self._count = count
        self.tau = min_distance
        logger.debug(f"Seeded {count} markers from base dictionary, target distance {self.tau}")

    def _score(self, candidates: np.ndarray) -> np.ndarray:
        """
        Minimum distance of each candidate to its own rotations and to accepted markers.

        Args:
            candidates: (B, 4, nbytes) encoded candidates

        Returns:
            (B,) int array of scores
        """
        rot0 = candidates[:, 0, :]
        own = POPCOUNT_TABLE[rot0[:, None, :] ^ candidates[:, 1:, :]].sum(axis=-1).min(axis=1)
        if self._count == 0:
            return own.astype(np.int64)

        accepted = self._storage[:self._count].reshape(-1, self.n_bytes)
        others = POPCOUNT_TABLE[rot0[:, None, :] ^ accepted[None, :, :]].sum(axis=-1).min(axis=1)
        return np.minimum(own, others).astype(np.int64)

    def _next_marker(self) -> np.ndarray:
        """Search for the next marker; returns its (4, nbytes) encoding."""
        unproductive = 0
        best_tau = 0
        best_marker = None
        size = self.marker_size

        while True:
            remaining = self.max_unproductive_iterations - unproductive
            batch = min(self.batch_size, remaining)
            grids = self.rng.integers(0, 2, size=(batch, size, size), dtype=np.uint8)
            candidates = _encode_batch(grids)
            scores = self._score(candidates)

            hits = np.flatnonzero(scores >= self.tau)
            if hits.size > 0:
                return candidates[hits[0]]

            unproductive += batch
            idx = int(np.argmax(scores))
            if scores[idx] > best_tau or best_marker is None:
                best_tau = int(scores[idx])
                best_marker = candidates[idx]

            if unproductive >= self.max_unproductive_iterations:
                logger.debug(f"Marker {self._count}: no candidate reached distance {self.tau} "
                             f"in {unproductive} trials, accepting best ({best_tau})")
                self.tau = best_tau
                return best_marker

    def generate(self) -> Dictionary:
        """
        Build the dictionary.

        Returns:
            Dictionary of n_markers markers with max_correction_bits = (tau - 1) // 2
        """
        self._count = 0
        self._seed_from_base()

        while self._count < self.n_markers:
            self._storage[self._count] = self._next_marker()
            self._count += 1
            if self._count % 50 == 0:
                logger.debug(f"Generated {self._count}/{self.n_markers} markers "
                             f"(target distance {self.tau})")

        if self.tau == 0 and self.n_markers > 1:
            logger.warning(f"Target distance dropped to 0 for {self.n_markers} markers of "
                           f"{self.marker_size}x{self.marker_size} bits; some markers may be "
                           f"indistinguishable")

        max_correction_bits = max(0, (self.tau - 1) // 2)
        dictionary = Dictionary(self._storage, self.marker_size, max_correction_bits)
        logger.info(f"Generated {dictionary} with minimum distance target {self.tau}")
        return dictionary


def generate_custom_dictionary(n_markers: int, marker_size: int,
                               base_dictionary: Optional[Dictionary] = None,
                               random_seed: int = 0,
                               max_unproductive_iterations: int = 5000,
                               batch_size: int = 256) -> Dictionary:
    """
    Generate a new dictionary of n_markers markers of marker_size x marker_size bits.

    If base_dictionary is given, its first markers are included verbatim and the
    rest are generated around them. If it already holds n_markers or more, only
    its first n_markers are taken and no new marker is added.

    When no candidate can be separated from the accepted markers (marker_size 1,
    or more markers than distinct rotation classes) the target distance falls
    to 0: duplicates may be accepted, max_correction_bits is 0 and a warning
    is logged.

    Args:
        n_markers: Number of markers in the dictionary
        marker_size: Bits per marker side
        base_dictionary: Dictionary whose markers are included first (optional)
        random_seed: Seed for reproducible generation
        max_unproductive_iterations: Trial budget per marker before settling for the best candidate
        batch_size: Candidates scored per numpy pass

    Returns:
        Generated Dictionary
    """
    generator = CustomDictionaryGenerator(
        n_markers, marker_size,
        base_dictionary=base_dictionary,
        random_seed=random_seed,
        max_unproductive_iterations=max_unproductive_iterations,
        batch_size=batch_size,
    )
    return generator.generate()
