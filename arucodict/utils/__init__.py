"""
Configuration, logging and rendering helpers.
"""

from .config import Config, DictionaryConfig, DrawConfig, IdentifyConfig
from .logger import setup_logger
from .visualization import MarkerSheet, parse_bit_rows

__all__ = [
    'Config',
    'DictionaryConfig',
    'DrawConfig',
    'IdentifyConfig',
    'setup_logger',
    'MarkerSheet',
    'parse_bit_rows',
]
