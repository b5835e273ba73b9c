"""
Process-wide table of the predefined ArUco dictionaries.

The canonical marker grids are read from OpenCV's published sets
(cv2.aruco) and re-encoded with this package's codec, so stored rotations
follow the clockwise convention used by Dictionary.identify.
"""

import logging
import threading
import numpy as np
from enum import IntEnum
from typing import Dict, Union

import cv2

from .dictionary import Dictionary


logger = logging.getLogger(__name__)


class PredefinedDictionaryName(IntEnum):
    """
    Predefined marker sets: bits per side x number of markers.

    DICT_ARUCO_ORIGINAL is the standard ArUco library set (1024 markers, 5x5 bits).
    """
    DICT_4X4_50 = 0
    DICT_4X4_100 = 1
    DICT_4X4_250 = 2
    DICT_4X4_1000 = 3
    DICT_5X5_50 = 4
    DICT_5X5_100 = 5
    DICT_5X5_250 = 6
    DICT_5X5_1000 = 7
    DICT_6X6_50 = 8
    DICT_6X6_100 = 9
    DICT_6X6_250 = 10
    DICT_6X6_1000 = 11
    DICT_7X7_50 = 12
    DICT_7X7_100 = 13
    DICT_7X7_250 = 14
    DICT_7X7_1000 = 15
    DICT_ARUCO_ORIGINAL = 16


_dictionaries: Dict[PredefinedDictionaryName, Dictionary] = {}
_lock = threading.Lock()


def _resolve_name(name: Union[PredefinedDictionaryName, int, str]) -> PredefinedDictionaryName:
    if isinstance(name, PredefinedDictionaryName):
        return name
    if isinstance(name, str):
        key = name.upper()
        if not key.startswith('DICT_'):
            key = 'DICT_' + key
        try:
            return PredefinedDictionaryName[key]
        except KeyError:
            raise ValueError(f"Unknown predefined dictionary: {name!r}") from None
    if isinstance(name, (int, np.integer)) and not isinstance(name, bool):
        try:
            return PredefinedDictionaryName(int(name))
        except ValueError:
            raise ValueError(f"Unknown predefined dictionary: {name!r}") from None
    raise ValueError(f"Unknown predefined dictionary: {name!r}")


def _build(name: PredefinedDictionaryName) -> Dictionary:
    """Re-encode one OpenCV predefined dictionary."""
    source = cv2.aruco.getPredefinedDictionary(getattr(cv2.aruco, name.name))
    marker_size = int(source.markerSize)
    n_markers = int(source.bytesList.shape[0])

    # One pixel per cell: the interior of a 1-cell-border image is the bit grid
    cells = marker_size + 2
    grids = []
    for idx in range(n_markers):
        image = cv2.aruco.generateImageMarker(source, idx, cells, borderBits=1)
        grids.append((image[1:-1, 1:-1] > 127).astype(np.uint8))

    dictionary = Dictionary.from_bits(grids)
    separation = dictionary.min_marker_distance()
    max_correction = min(int(source.maxCorrectionBits), max(0, (separation - 1) // 2))

    logger.debug(f"Built {name.name}: {n_markers} markers, {marker_size}x{marker_size}, "
                 f"min distance {separation}, max correction {max_correction}")
    return Dictionary(dictionary.bytes_list, marker_size, max_correction)


def get_predefined_dictionary(name: Union[PredefinedDictionaryName, int, str]) -> Dictionary:
    """
    Return one of the predefined dictionaries.

    The dictionary is built on first request and shared afterwards; callers
    must treat it as read-only.

    Args:
        name: Enum member, its integer value, or its name (e.g. 'DICT_5X5_250' or '5X5_250')

    Returns:
        Shared Dictionary instance
    """
    key = _resolve_name(name)
    dictionary = _dictionaries.get(key)
    if dictionary is not None:
        return dictionary

    with _lock:
        dictionary = _dictionaries.get(key)
        if dictionary is None:
            dictionary = _build(key)
            _dictionaries[key] = dictionary
            logger.info(f"Loaded predefined dictionary {key.name}: {dictionary}")
    return dictionary
