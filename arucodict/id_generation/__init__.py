"""
ID generation modules for marker dictionaries.
"""

from .custom_dictionary import (
    CustomDictionaryGenerator,
    generate_custom_dictionary,
    initial_target_distance,
)

__all__ = ['CustomDictionaryGenerator', 'generate_custom_dictionary', 'initial_target_distance']
