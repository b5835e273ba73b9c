"""
Printable marker sheets for ArucoDict-py dictionaries.
"""

import re
import cv2
import numpy as np
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from ..dictionary.dictionary import Dictionary


class MarkerSheet:
    """
    Tiles canonical marker images on a white page with id captions.
    """

    def __init__(self,
                    dictionary: Dictionary,
                    output_dir: str = "output",
                    side_pixels: int = 200,
                    border_bits: int = 1,
                    margin: int = 40,
                    columns: int = 4):
        """
        Initialize marker sheet renderer.

        Args:
            dictionary: Dictionary to draw markers from
            output_dir: Directory to save sheet images
            side_pixels: Size of each marker image
            border_bits: Black border width, in cells
            margin: White space around each marker, in pixels
            columns: Markers per row
        """
        if columns <= 0:
            raise ValueError(f"columns must be positive, got {columns}")
        if margin < 0:
            raise ValueError(f"margin must be non-negative, got {margin}")

        self.dictionary = dictionary
        self.output_dir = Path(output_dir)
        self.side_pixels = side_pixels
        self.border_bits = border_bits
        self.margin = margin
        self.columns = columns

        self.color_background = 255
        self.color_caption = 0

    def render(self, ids: Sequence[int], show_id: bool = True) -> np.ndarray:
        """
        Render markers into one grayscale sheet.

        Args:
            ids: Marker ids, drawn row by row
            show_id: Write the id under each marker

        Returns:
            uint8 sheet image
        """
        ids = list(ids)
        if not ids:
            raise ValueError("No marker ids to render")

        cell = self.side_pixels + 2 * self.margin
        columns = min(self.columns, len(ids))
        rows = (len(ids) + columns - 1) // columns
        sheet = np.full((rows * cell, columns * cell), self.color_background, dtype=np.uint8)

        for i, marker_id in enumerate(ids):
            row, col = divmod(i, columns)
            y = row * cell + self.margin
            x = col * cell + self.margin
            sheet[y:y + self.side_pixels, x:x + self.side_pixels] = self.dictionary.draw_marker(
                marker_id, self.side_pixels, self.border_bits)

            if show_id and self.margin >= 12:
                cv2.putText(
                    sheet,
                    f"ID {marker_id}",
                    (x, y + self.side_pixels + self.margin // 2 + 5),
                    cv2.FONT_HERSHEY_SIMPLEX,
                    0.4,
                    self.color_caption,
                    1
                )

        return sheet

    def save(self, ids: Sequence[int], filename: Optional[str] = None,
             show_id: bool = True) -> str:
        """
        Render a sheet and save it to the output directory.

        Args:
            ids: Marker ids to draw
            filename: Output filename (auto-generated if None)
            show_id: Write the id under each marker

        Returns:
            Path to saved file
        """
        sheet = self.render(ids, show_id=show_id)

        if filename is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filename = f"markers_{timestamp}.png"

        self.output_dir.mkdir(parents=True, exist_ok=True)
        output_path = self.output_dir / filename
        if not cv2.imwrite(str(output_path), sheet):
            raise IOError(f"Failed to write marker sheet: {output_path}")

        return str(output_path)


def parse_bit_rows(text: str) -> np.ndarray:
    """
    Parse a bit grid written as rows of 0/1 characters.

    Rows are separated by commas, semicolons or whitespace, e.g. "0110,1001,1001,0110".

    Args:
        text: Grid description

    Returns:
        (S, S) uint8 array
    """
    rows: List[str] = [r for r in re.split(r'[,;\s]+', text.strip()) if r]
    if not rows or any(set(r) - {'0', '1'} for r in rows):
        raise ValueError(f"Bit rows must contain only 0 and 1: {text!r}")
    if any(len(r) != len(rows) for r in rows):
        raise ValueError(f"Bit rows must form a square grid: {text!r}")
    return np.array([[int(c) for c in r] for r in rows], dtype=np.uint8)
