"""Shared fixtures for catscii tests."""

import asyncio
import io

import numpy as np
import pytest
from PIL import Image

from catscii.services.renderer import AsciiArt


class FakeClock:
    """Monotonic clock the test moves by hand."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeArtSource:
    """
    Stand-in for the art pipeline.

    Every call counts as one upstream fetch. Outcomes are consumed in order;
    when ``gate`` is set, calls block until it is opened.
    """

    def __init__(self):
        self.calls = 0
        self.outcomes: list = []
        self.gate: asyncio.Event | None = None
        self.started = asyncio.Event()

    def succeed_with(self, *lines: str) -> AsciiArt:
        art = AsciiArt(lines=tuple(lines))
        self.outcomes.append(art)
        return art

    def fail_with(self, exc: Exception):
        self.outcomes.append(exc)

    def hold(self) -> asyncio.Event:
        self.gate = asyncio.Event()
        return self.gate

    async def __call__(self) -> AsciiArt:
        self.calls += 1
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def image_bytes(
    fmt: str = "PNG",
    size: tuple[int, int] = (8, 6),
    color=(255, 255, 255),
    mode: str = "RGB",
) -> bytes:
    """Encode a solid-color image in the given format."""
    buf = io.BytesIO()
    Image.new(mode, size, color).save(buf, format=fmt)
    return buf.getvalue()


def gradient_png(size: tuple[int, int] = (64, 64)) -> bytes:
    """PNG whose pixel data does not compress to nothing."""
    width, height = size
    ys, xs = np.mgrid[0:height, 0:width]
    pixels = np.stack(
        [(xs * 37 + ys * 11) % 256, (xs * 5 + ys * 91) % 256, (xs * ys) % 256],
        axis=-1,
    ).astype(np.uint8)
    image = Image.fromarray(pixels)
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def source():
    return FakeArtSource()


@pytest.fixture
def make_image():
    return image_bytes


@pytest.fixture
def make_gradient_png():
    return gradient_png
