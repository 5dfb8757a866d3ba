"""
Text Overlay
============

Utilities for drawing the camera title and capture time onto frames.
Text is stacked top-left; an optional 1px black outline keeps it legible on
bright scenes.
"""
from dataclasses import dataclass
from typing import List, Optional, Tuple

import cv2
import numpy as np

FONT_FACE = cv2.FONT_HERSHEY_SIMPLEX
LEFT_MARGIN = 10
TOP_MARGIN = 20
LINE_GAP = 10
TIMESTAMP_SIZE_DELTA = 2
MIN_TEXT_HEIGHT = 4

OUTLINE_COLOR_BGR = (0, 0, 0)
OUTLINE_OFFSETS = [(dx, dy) for dx in (-1, 0, 1) for dy in (-1, 0, 1) if (dx, dy) != (0, 0)]


@dataclass(frozen=True)
class TextLine:
    text: str
    origin: Tuple[int, int]  # (x, baseline y)
    pixel_height: int


def layout_lines(
    font_size: int,
    title: Optional[str] = None,
    timestamp: Optional[str] = None,
) -> List[TextLine]:
    """
    Place the overlay lines.

    The first baseline sits TOP_MARGIN + font_size pixels from the top; each
    following line is font_size + LINE_GAP lower. The timestamp is rendered
    TIMESTAMP_SIZE_DELTA pixels smaller than the title.
    """
    lines = []
    y = TOP_MARGIN + font_size
    if title:
        lines.append(TextLine(title, (LEFT_MARGIN, y), font_size))
        y += font_size + LINE_GAP
    if timestamp:
        lines.append(TextLine(timestamp, (LEFT_MARGIN, y), font_size - TIMESTAMP_SIZE_DELTA))
    return lines


def _thickness_for(pixel_height: int) -> int:
    return max(1, pixel_height // 16)


def draw_text(
    frame: np.ndarray,
    line: TextLine,
    color_rgb: Tuple[int, int, int],
    outline: bool = True,
) -> None:
    """
    Draw one line of text in place.

    With outline enabled the text is first drawn in black at each of the 8
    neighbouring pixel offsets, then in color on top.
    """
    pixel_height = max(MIN_TEXT_HEIGHT, line.pixel_height)
    thickness = _thickness_for(pixel_height)
    scale = cv2.getFontScaleFromHeight(FONT_FACE, pixel_height, thickness)
    x, y = line.origin

    if outline:
        for dx, dy in OUTLINE_OFFSETS:
            cv2.putText(
                frame, line.text, (x + dx, y + dy), FONT_FACE, scale,
                OUTLINE_COLOR_BGR, thickness, cv2.LINE_AA,
            )

    r, g, b = color_rgb
    cv2.putText(frame, line.text, (x, y), FONT_FACE, scale, (b, g, r), thickness, cv2.LINE_AA)
