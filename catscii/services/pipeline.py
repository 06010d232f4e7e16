"""
Fetch, decode and render one cat picture.
"""
import asyncio
import logging
import time
from typing import Optional, Sequence

from .decoder import decode_image
from .images import CatImageClient, RawImage
from .renderer import DEFAULT_CHAR_ASPECT, DEFAULT_RAMP, AsciiArt, render

logger = logging.getLogger(__name__)


class ArtPipeline:
    """Callable producing fresh AsciiArt from the upstream provider."""

    def __init__(
        self,
        client: CatImageClient,
        columns: int = 80,
        ramp: Sequence[str] = DEFAULT_RAMP,
        char_aspect: float = DEFAULT_CHAR_ASPECT,
        max_rows: Optional[int] = None,
    ):
        self.client = client
        self.columns = columns
        self.ramp = ramp
        self.char_aspect = char_aspect
        self.max_rows = max_rows

    async def __call__(self) -> AsciiArt:
        raw = await self.client.fetch()
        # Decoding and rendering are CPU bound, keep them off the event loop
        return await asyncio.to_thread(self.convert, raw)

    def convert(self, raw: RawImage) -> AsciiArt:
        started = time.perf_counter()
        grid = decode_image(raw)
        art = render(
            grid,
            self.columns,
            ramp=self.ramp,
            char_aspect=self.char_aspect,
            max_rows=self.max_rows,
        )
        logger.info(
            "Rendered %dx%d image as %dx%d art in %.0f ms",
            grid.width,
            grid.height,
            art.width,
            art.height,
            (time.perf_counter() - started) * 1000,
        )
        return art
