"""
Image decoding: raw provider bytes to a grid of color samples.
"""
import io
import logging
import warnings
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..errors import CorruptImageData, UnsupportedImageFormat
from .images import RawImage

logger = logging.getLogger(__name__)

# Pillow format names we accept (common web raster formats)
SUPPORTED_FORMATS = frozenset({"JPEG", "PNG", "GIF", "WEBP", "BMP"})


def _looks_supported(content: bytes) -> bool:
    """True when the leading bytes carry the signature of a supported format."""
    return (
        content.startswith((b"\x89PNG\r\n\x1a\n", b"\xff\xd8\xff", b"GIF87a", b"GIF89a", b"BM"))
        or (content[:4] == b"RIFF" and content[8:12] == b"WEBP")
    )


@dataclass(frozen=True)
class PixelGrid:
    """
    Rectangular grid of color samples, shape ``(height, width, channels)``.

    Channels are RGB or RGBA, each 0-255.
    """
    pixels: np.ndarray

    def __post_init__(self):
        if self.pixels.ndim != 3 or self.pixels.shape[2] not in (3, 4):
            raise ValueError(
                f"Pixel grid must have shape (height, width, 3|4), got {self.pixels.shape}"
            )
        if self.pixels.shape[0] == 0 or self.pixels.shape[1] == 0:
            raise ValueError("Pixel grid must have positive width and height")
        if self.pixels.dtype != np.uint8:
            object.__setattr__(self, "pixels", self.pixels.astype(np.uint8))
        self.pixels.setflags(write=False)

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[Sequence[int]]]) -> "PixelGrid":
        """Build a grid from rows of ``(r, g, b[, a])`` samples."""
        if not rows or not rows[0]:
            raise ValueError("Pixel grid must have positive width and height")
        width = len(rows[0])
        if any(len(row) != width for row in rows):
            raise ValueError("All pixel grid rows must have the same length")
        channels = {len(sample) for row in rows for sample in row}
        if len(channels) != 1:
            raise ValueError("All samples must have the same number of channels")
        for row in rows:
            for sample in row:
                if any(not 0 <= value <= 255 for value in sample):
                    raise ValueError("Channel values must be in the 0-255 range")
        return cls(np.array(rows, dtype=np.uint8))

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def channels(self) -> int:
        return self.pixels.shape[2]

    @property
    def rows(self) -> list[list[tuple[int, ...]]]:
        return [[tuple(sample) for sample in row] for row in self.pixels.tolist()]


def decode_image(raw: RawImage) -> PixelGrid:
    """
    Decode raw image bytes into a PixelGrid.

    Images with transparency decode to RGBA, everything else to RGB. Only
    the first frame of an animated image is used.

    Raises:
        UnsupportedImageFormat: bytes are not one of SUPPORTED_FORMATS.
        CorruptImageData: the image header or pixel data is broken, the
            image has a zero dimension, or it is implausibly large.
    """
    try:
        with warnings.catch_warnings():
            # Oversized images are an error here, not a warning
            warnings.simplefilter("error", Image.DecompressionBombWarning)
            image = Image.open(io.BytesIO(raw.content))
    except UnidentifiedImageError as exc:
        # Pillow cannot tell a broken header from an unknown format
        if _looks_supported(raw.content):
            raise CorruptImageData(f"Cat image header is corrupt: {exc}") from exc
        raise UnsupportedImageFormat(
            f"Cat image is not a recognised image ({raw.media_type or 'unknown type'})"
        ) from exc
    except (Image.DecompressionBombError, Image.DecompressionBombWarning) as exc:
        raise CorruptImageData("Cat image is too large to decode") from exc
    except OSError as exc:
        raise CorruptImageData(f"Cat image header is corrupt: {exc}") from exc

    with image:
        if image.format not in SUPPORTED_FORMATS:
            raise UnsupportedImageFormat(f"Cat image format {image.format} is not supported")

        width, height = image.size
        if width <= 0 or height <= 0:
            raise CorruptImageData(f"Cat image has no pixels ({width}x{height})")

        try:
            image.load()
            has_alpha = "A" in image.getbands() or "transparency" in image.info
            mode = "RGBA" if has_alpha else "RGB"
            pixels = np.asarray(image.convert(mode), dtype=np.uint8)
        except (OSError, SyntaxError, ValueError, EOFError) as exc:
            raise CorruptImageData(f"Cat image data is corrupt: {exc}") from exc

    if pixels.shape[:2] != (height, width):
        raise CorruptImageData(
            f"Decoded {pixels.shape[1]}x{pixels.shape[0]} pixels, expected {width}x{height}"
        )

    logger.debug("Decoded %s image %dx%d as %s", image.format, width, height, mode)
    return PixelGrid(pixels)
