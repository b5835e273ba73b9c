"""
Configuration management for ArucoDict-py.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from ..dictionary.dictionary import Dictionary
from ..dictionary.predefined import get_predefined_dictionary
from ..id_generation.custom_dictionary import generate_custom_dictionary


@dataclass
class DictionaryConfig:
    """Dictionary selection: a predefined name, or generation parameters."""
    name: Optional[str] = 'DICT_5X5_250'
    n_markers: int = 50
    marker_size: int = 5
    random_seed: int = 0
    max_unproductive_iterations: int = 5000
    base_name: Optional[str] = None  # predefined dictionary seeding generation

    def build(self) -> Dictionary:
        """Resolve the configured dictionary."""
        if self.name:
            return get_predefined_dictionary(self.name)
        base = get_predefined_dictionary(self.base_name) if self.base_name else None
        return generate_custom_dictionary(
            self.n_markers,
            self.marker_size,
            base_dictionary=base,
            random_seed=self.random_seed,
            max_unproductive_iterations=self.max_unproductive_iterations,
        )


@dataclass
class IdentifyConfig:
    """Identification parameters."""
    max_correction_rate: float = 0.6

    def __post_init__(self):
        if not 0.0 <= self.max_correction_rate <= 1.0:
            raise ValueError(
                f"max_correction_rate must be in [0, 1], got {self.max_correction_rate}")


@dataclass
class DrawConfig:
    """Marker rendering parameters."""
    side_pixels: int = 200
    border_bits: int = 1
    columns: int = 4


class Config:
    """
    Main configuration manager.
    """

    def __init__(self):
        self.dictionary = DictionaryConfig()
        self.identify = IdentifyConfig()
        self.draw = DrawConfig()

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            'dictionary': asdict(self.dictionary),
            'identify': asdict(self.identify),
            'draw': asdict(self.draw)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create configuration from dictionary."""
        config = cls()

        if 'dictionary' in data:
            config.dictionary = DictionaryConfig(**data['dictionary'])
        if 'identify' in data:
            config.identify = IdentifyConfig(**data['identify'])
        if 'draw' in data:
            config.draw = DrawConfig(**data['draw'])

        return config
