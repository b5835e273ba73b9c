"""
Main entry point for ArucoDict-py.
Command-line interface for drawing, generating and inspecting marker dictionaries.
"""

import argparse
import sys
import cv2
from pathlib import Path
from typing import List, Optional

from .dictionary.dictionary import Dictionary
from .utils.config import Config, IdentifyConfig
from .utils.logger import setup_logger
from .utils.visualization import MarkerSheet, parse_bit_rows


def _add_dictionary_args(parser: argparse.ArgumentParser, config: Config):
    parser.add_argument('--dict', dest='dict_name', type=str, default=config.dictionary.name,
                        help=f'Predefined dictionary name (default: {config.dictionary.name})')
    parser.add_argument('--dict-file', type=str, help='Dictionary saved with "generate" (.npz)')


def _parse_ids(text: str) -> List[int]:
    """Parse '3', '0,4,7' or '0-9' into a list of ids."""
    ids = []
    for part in text.split(','):
        part = part.strip()
        if '-' in part:
            start, end = part.split('-', 1)
            ids.extend(range(int(start), int(end) + 1))
        elif part:
            ids.append(int(part))
    return ids


def build_parser(config: Optional[Config] = None) -> argparse.ArgumentParser:
    """
    Build the argument parser.

    Args:
        config: Configuration supplying the option defaults
    """
    if config is None:
        config = Config()

    parser = argparse.ArgumentParser(description='ArucoDict marker dictionary tools')
    parser.add_argument('--debug', type=int, default=0, help='Debug level (0-1)')
    parser.add_argument('--log-file', type=str, help='Also write log to this file')
    sub = parser.add_subparsers(dest='command', required=True)

    draw = sub.add_parser('draw', help='Render markers to an image file')
    _add_dictionary_args(draw, config)
    draw.add_argument('ids', type=str, help='Marker id, list (0,3,5) or range (0-9)')
    draw.add_argument('--size', type=int, default=config.draw.side_pixels, help='Marker side in pixels')
    draw.add_argument('--border', type=int, default=config.draw.border_bits, help='Border width in cells')
    draw.add_argument('--columns', type=int, default=config.draw.columns, help='Markers per row on a sheet')
    draw.add_argument('--output', type=str, default='marker.png', help='Output image path')

    generate = sub.add_parser('generate', help='Generate a custom dictionary')
    generate.add_argument('n_markers', type=int, help='Number of markers')
    generate.add_argument('marker_size', type=int, help='Bits per marker side')
    generate.add_argument('--base', type=str, default=config.dictionary.base_name,
                          help='Predefined dictionary to start from')
    generate.add_argument('--seed', type=int, default=config.dictionary.random_seed, help='Random seed')
    generate.add_argument('--iterations', type=int, default=config.dictionary.max_unproductive_iterations,
                          help='Unproductive trials before accepting the best candidate')
    generate.add_argument('--output', type=str, default='dictionary.npz', help='Output .npz path')

    info = sub.add_parser('info', help='Show dictionary properties')
    _add_dictionary_args(info, config)

    identify = sub.add_parser('identify', help='Identify a bit grid')
    _add_dictionary_args(identify, config)
    identify.add_argument('bits', type=str, help='Rows of 0/1, e.g. 01101,10010,...')
    identify.add_argument('--rate', type=float, default=config.identify.max_correction_rate,
                          help='Max correction rate in [0, 1]')

    return parser


def apply_args(config: Config, args: argparse.Namespace) -> Config:
    """
    Copy command-line overrides into the configuration.

    Args:
        config: Configuration to update
        args: Parsed arguments

    Returns:
        The updated configuration
    """
    if args.command == 'generate':
        config.dictionary.name = None
        config.dictionary.n_markers = args.n_markers
        config.dictionary.marker_size = args.marker_size
        config.dictionary.base_name = args.base
        config.dictionary.random_seed = args.seed
        config.dictionary.max_unproductive_iterations = args.iterations
    else:
        config.dictionary.name = args.dict_name

    if args.command == 'draw':
        config.draw.side_pixels = args.size
        config.draw.border_bits = args.border
        config.draw.columns = args.columns
    elif args.command == 'identify':
        config.identify = IdentifyConfig(max_correction_rate=args.rate)

    return config


def _load_dictionary(config: Config, args) -> Dictionary:
    if getattr(args, 'dict_file', None):
        return Dictionary.load(args.dict_file)
    return config.dictionary.build()


def main(argv: Optional[List[str]] = None) -> int:
    """Main function."""
    config = Config()
    args = build_parser(config).parse_args(argv)
    logger = setup_logger('arucodict', level=10 if args.debug > 0 else 20, log_file=args.log_file)

    try:
        apply_args(config, args)

        if args.command == 'draw':
            dictionary = _load_dictionary(config, args)
            ids = _parse_ids(args.ids)
            output_path = Path(args.output)
            if len(ids) == 1:
                image = dictionary.draw_marker(ids[0], config.draw.side_pixels, config.draw.border_bits)
                output_path.parent.mkdir(parents=True, exist_ok=True)
                if not cv2.imwrite(str(output_path), image):
                    raise IOError(f"Failed to write image: {output_path}")
                saved = str(output_path)
            else:
                sheet = MarkerSheet(dictionary, output_dir=str(output_path.parent),
                                    side_pixels=config.draw.side_pixels,
                                    border_bits=config.draw.border_bits,
                                    columns=config.draw.columns)
                saved = sheet.save(ids, filename=output_path.name)
            logger.info(f"Saved {len(ids)} marker(s) to {saved}")

        elif args.command == 'generate':
            dictionary = config.dictionary.build()
            dictionary.save(args.output)

        elif args.command == 'info':
            dictionary = _load_dictionary(config, args)
            print(f"Markers:             {len(dictionary)}")
            print(f"Marker size:         {dictionary.marker_size}x{dictionary.marker_size}")
            print(f"Max correction bits: {dictionary.max_correction_bits}")
            print(f"Min distance:        {dictionary.min_marker_distance()}")

        elif args.command == 'identify':
            dictionary = _load_dictionary(config, args)
            match = dictionary.identify(parse_bit_rows(args.bits), config.identify.max_correction_rate)
            if match.found:
                print(f"Found: id={match.id} rotation={match.rotation}")
            else:
                print("Not found")
                return 1

    except (ValueError, IndexError, IOError) as e:
        logger.error(str(e))
        return 2

    return 0


if __name__ == '__main__':
    sys.exit(main())
