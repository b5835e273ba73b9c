"""
ArucoDict-py Core Module
Rotation-invariant binary codebooks for square fiducial markers.
"""

__version__ = "0.1.0"
__author__ = "ArucoDict-py Team"

from .codec.bytecode import get_bits_from_byte_list, get_byte_list_from_bits, rotate_bits
from .dictionary.dictionary import Dictionary, MarkerMatch
from .dictionary.predefined import PredefinedDictionaryName, get_predefined_dictionary
from .id_generation.custom_dictionary import generate_custom_dictionary

__all__ = [
    'Dictionary',
    'MarkerMatch',
    'PredefinedDictionaryName',
    'get_predefined_dictionary',
    'generate_custom_dictionary',
    'get_bits_from_byte_list',
    'get_byte_list_from_bits',
    'rotate_bits',
]
