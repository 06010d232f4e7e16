"""
ASCII art rendering.

A PixelGrid is split into ``columns`` x ``rows`` blocks; every block's
channels are averaged, turned into a luminance value and mapped onto a glyph
ramp.

Ramp calibration
----------------
The ramp is listed from sparse ink to dense ink and bright cells take sparse
glyphs, so the art reads like ink on paper::

    luminance = 0.299 R + 0.587 G + 0.114 B          (of the block mean)
    bucket    = clamp(floor(luminance / 256 * n), 0, n - 1)
    glyph     = ramp[n - 1 - bucket]

With the two-glyph ramp ``" #"`` white (255) lands in bucket 1 and renders
as ``" "``, black (0) lands in bucket 0 and renders as ``"#"``.
"""
import html
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional, Sequence

import numpy as np

from .decoder import PixelGrid

DEFAULT_RAMP = " .:-=+*#%@"

# Terminal cells are roughly twice as tall as they are wide
DEFAULT_CHAR_ASPECT = 0.5

LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])

# Row cap for very tall images, relative to the column count
MAX_ROWS_PER_COLUMN = 4

Color = tuple[int, int, int]


@dataclass(frozen=True)
class AsciiArt:
    """Rendered artwork: equal-length text lines plus per-cell colors."""
    lines: tuple[str, ...]
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    colors: tuple[tuple[Color, ...], ...] = ()

    def __post_init__(self):
        if not self.lines or not self.lines[0]:
            raise ValueError("ASCII art must have at least one character")
        if any(len(line) != len(self.lines[0]) for line in self.lines):
            raise ValueError("ASCII art lines must all have the same length")

    @property
    def width(self) -> int:
        return len(self.lines[0])

    @property
    def height(self) -> int:
        return len(self.lines)

    @property
    def text(self) -> str:
        return "\n".join(self.lines) + "\n"


def target_rows(
    width: int,
    height: int,
    columns: int,
    char_aspect: float,
    max_rows: Optional[int] = None,
) -> int:
    """Number of text rows that keeps the image's proportions, at most ``max_rows``."""
    rows = max(1, math.floor(columns * height / width * char_aspect + 0.5))
    if max_rows is not None:
        rows = min(rows, max_rows)
    return rows


def _block_starts(source: int, target: int) -> np.ndarray:
    return (np.arange(target) * source) // target


def _block_sizes(starts: np.ndarray, source: int) -> np.ndarray:
    ends = np.append(starts[1:], source)
    # An empty block (target larger than source) reuses its start pixel
    return np.maximum(ends - starts, 1)


def _block_means(pixels: np.ndarray, rows: int, columns: int) -> np.ndarray:
    """Average RGB of each block, shape ``(rows, columns, 3)``."""
    height, width = pixels.shape[:2]
    rgb = pixels[..., :3].astype(np.float64)

    row_starts = _block_starts(height, rows)
    col_starts = _block_starts(width, columns)

    sums = np.add.reduceat(rgb, row_starts, axis=0)
    sums = np.add.reduceat(sums, col_starts, axis=1)
    counts = np.outer(_block_sizes(row_starts, height), _block_sizes(col_starts, width))
    return sums / counts[..., np.newaxis]


def _check_ramp(ramp: Sequence[str]) -> None:
    if len(ramp) == 0:
        raise ValueError("Glyph ramp must not be empty")
    if any(not isinstance(glyph, str) or len(glyph) != 1 for glyph in ramp):
        raise ValueError("Glyph ramp entries must be single characters")


def glyph_indices(luminance: np.ndarray, ramp_length: int) -> np.ndarray:
    """Map luminance values (0-255) to ramp positions, bright to sparse."""
    buckets = np.floor(luminance / 256 * ramp_length).astype(np.int64)
    buckets = np.clip(buckets, 0, ramp_length - 1)
    return ramp_length - 1 - buckets


def render(
    grid: PixelGrid,
    columns: int,
    ramp: Sequence[str] = DEFAULT_RAMP,
    char_aspect: float = DEFAULT_CHAR_ASPECT,
    max_rows: Optional[int] = None,
) -> AsciiArt:
    """
    Render a PixelGrid as ASCII art ``columns`` characters wide.

    Every output line has exactly ``columns`` characters. Rendering is
    deterministic: the same grid and options give the same lines. Tall
    images are squeezed into ``max_rows`` lines, by default
    ``MAX_ROWS_PER_COLUMN * columns``.
    """
    if columns < 1:
        raise ValueError(f"columns must be positive, got {columns}")
    if char_aspect <= 0:
        raise ValueError(f"char_aspect must be positive, got {char_aspect}")
    if max_rows is None:
        max_rows = MAX_ROWS_PER_COLUMN * columns
    if max_rows < 1:
        raise ValueError(f"max_rows must be positive, got {max_rows}")
    _check_ramp(ramp)

    rows = target_rows(grid.width, grid.height, columns, char_aspect, max_rows)
    means = _block_means(grid.pixels, rows, columns)
    indices = glyph_indices(means @ LUMA_WEIGHTS, len(ramp))

    lines = tuple("".join(ramp[i] for i in row) for row in indices.tolist())
    colors = tuple(
        tuple(tuple(cell) for cell in row)
        for row in np.rint(means).astype(np.uint8).tolist()
    )
    return AsciiArt(lines=lines, colors=colors)


HTML_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
body {{ background: #ffffff; margin: 1em; }}
pre {{ font-family: monospace; font-size: 10px; line-height: 1; }}
</style>
</head>
<body>
<pre>
{body}</pre>
</body>
</html>
"""


def to_html(art: AsciiArt, title: str = "catscii") -> str:
    """Render art as an HTML page, one colored span per cell."""
    if not art.colors:
        body = html.escape(art.text)
    else:
        body = "".join(
            "".join(
                f'<span style="color:rgb({r},{g},{b})">{html.escape(glyph)}</span>'
                for glyph, (r, g, b) in zip(line, row_colors)
            )
            + "\n"
            for line, row_colors in zip(art.lines, art.colors)
        )
    return HTML_TEMPLATE.format(title=html.escape(title), body=body)
