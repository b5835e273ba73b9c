"""
Marker dictionaries: storage, identification and the predefined sets.
"""

from .dictionary import Dictionary, MarkerMatch, self_distance
from .predefined import PredefinedDictionaryName, get_predefined_dictionary

__all__ = [
    'Dictionary',
    'MarkerMatch',
    'self_distance',
    'PredefinedDictionaryName',
    'get_predefined_dictionary',
]
