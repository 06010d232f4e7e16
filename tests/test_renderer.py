"""Tests for the ASCII renderer."""

import numpy as np
import pytest

from catscii.services.decoder import PixelGrid
from catscii.services.renderer import (
    DEFAULT_RAMP,
    AsciiArt,
    glyph_indices,
    render,
    target_rows,
    to_html,
)

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)


def solid_grid(width: int, height: int, value: int) -> PixelGrid:
    return PixelGrid(np.full((height, width, 3), value, dtype=np.uint8))


def noise_grid(width: int, height: int, seed: int = 7) -> PixelGrid:
    rng = np.random.default_rng(seed)
    return PixelGrid(rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8))


class TestRenderShape:
    @pytest.mark.parametrize(
        "width,height,columns",
        [(1, 1, 1), (1, 1, 12), (3, 7, 5), (100, 37, 40), (37, 100, 80), (640, 480, 80)],
    )
    def test_every_line_has_target_width(self, width, height, columns):
        """Every line is exactly `columns` characters, whatever the source size."""
        art = render(noise_grid(width, height), columns)

        assert art.height >= 1
        assert all(len(line) == columns for line in art.lines)

    def test_row_count_keeps_proportions(self):
        """Rows follow columns * height / width scaled by the character aspect."""
        art = render(solid_grid(100, 50, 128), 40)
        assert art.height == 10

    def test_row_count_rounds_to_nearest(self):
        """Row counts round half up."""
        assert target_rows(width=4, height=3, columns=2, char_aspect=1.0) == 2  # 1.5
        assert target_rows(width=10, height=3, columns=3, char_aspect=1.0) == 1  # 0.9
        assert target_rows(width=10, height=2, columns=3, char_aspect=1.0) == 1  # 0.6

    def test_row_count_is_at_least_one(self):
        """A very wide image still renders one line."""
        art = render(solid_grid(1000, 1, 0), 10)
        assert art.lines == ("@" * 10,)

    def test_tall_image_rows_are_capped(self):
        """A one-pixel-wide strip does not explode into millions of lines."""
        grid = PixelGrid(np.zeros((100_000, 1, 3), dtype=np.uint8))

        art = render(grid, 80)

        assert art.height == 320
        assert all(line == "@" * 80 for line in art.lines)

    def test_explicit_row_cap(self):
        art = render(noise_grid(10, 1000), 10, max_rows=7)
        assert art.height == 7

    def test_row_cap_does_not_stretch_short_images(self):
        assert target_rows(width=100, height=50, columns=40, char_aspect=0.5, max_rows=500) == 10

    def test_colors_match_glyph_grid(self):
        """Every glyph has a color."""
        art = render(noise_grid(30, 20), 12)
        assert len(art.colors) == art.height
        assert all(len(row) == art.width for row in art.colors)


class TestRenderGlyphs:
    def test_checkerboard_with_two_glyph_ramp(self):
        """White maps to the sparse glyph, black to the dense one."""
        grid = PixelGrid.from_rows([[WHITE, BLACK], [BLACK, WHITE]])

        art = render(grid, 2, ramp=[" ", "#"], char_aspect=1.0)

        assert art.lines == (" #", "# ")

    def test_default_ramp_extremes(self):
        """Black renders as the densest glyph, white as the sparsest."""
        assert render(solid_grid(4, 4, 0), 4, char_aspect=1.0).lines == ("@@@@",) * 4
        assert render(solid_grid(4, 4, 255), 4, char_aspect=1.0).lines == ("    ",) * 4

    def test_rendering_is_deterministic(self):
        """Rendering the same grid twice gives identical output."""
        grid = noise_grid(123, 77)

        first = render(grid, 33)
        second = render(grid, 33)

        assert first.lines == second.lines
        assert first.text.encode() == second.text.encode()

    def test_glyph_index_never_reverses_with_luminance(self):
        """Brighter uniform grids never pick a denser glyph."""
        indices = []
        for value in range(256):
            art = render(solid_grid(2, 2, value), 1, char_aspect=1.0)
            indices.append(DEFAULT_RAMP.index(art.lines[0][0]))

        assert all(a >= b for a, b in zip(indices, indices[1:]))
        assert indices[0] == len(DEFAULT_RAMP) - 1
        assert indices[-1] == 0

    def test_glyph_buckets_are_linear(self):
        """Luminance is bucketed by floor(lum / 256 * n)."""
        lum = np.array([0.0, 63.9, 64.0, 127.9, 128.0, 255.0])
        assert glyph_indices(lum, 4).tolist() == [3, 3, 2, 2, 1, 0]

    def test_luminance_uses_perceptual_weights(self):
        """Pure green reads brighter than pure blue."""
        green = PixelGrid.from_rows([[(0, 255, 0)]])
        blue = PixelGrid.from_rows([[(0, 0, 255)]])

        green_glyph = render(green, 1).lines[0]
        blue_glyph = render(blue, 1).lines[0]

        assert DEFAULT_RAMP.index(green_glyph) < DEFAULT_RAMP.index(blue_glyph)

    def test_alpha_channel_is_ignored(self):
        """Transparency does not change the rendered glyphs."""
        rgb = noise_grid(20, 20)
        alpha = np.full((20, 20, 1), 0, dtype=np.uint8)
        rgba = PixelGrid(np.concatenate([rgb.pixels, alpha], axis=2))

        assert render(rgba, 10).lines == render(rgb, 10).lines


class TestBlockAveraging:
    def test_partial_trailing_block_is_averaged(self):
        """Five source columns into two cells: the second cell averages three pixels."""
        grid = PixelGrid.from_rows([[BLACK, BLACK, BLACK, WHITE, WHITE]])

        art = render(grid, 2, char_aspect=10.0)

        assert art.height == 4
        assert art.colors[0][0] == (0, 0, 0)
        assert art.colors[0][1] == (170, 170, 170)

    def test_blocks_cover_every_pixel(self):
        """A single bright pixel in the last column still shows up."""
        pixels = np.zeros((10, 10, 3), dtype=np.uint8)
        pixels[:, 9] = 255
        art = render(PixelGrid(pixels), 3, char_aspect=0.3)

        assert art.colors[0][2] != (0, 0, 0)
        assert art.colors[0][0] == (0, 0, 0)

    def test_upscaling_repeats_source_pixels(self):
        """More columns than pixels reuses the nearest source pixel."""
        grid = PixelGrid.from_rows([[BLACK, WHITE]])

        art = render(grid, 4, ramp=[" ", "#"], char_aspect=0.5)

        assert art.lines == ("##  ",)


class TestRenderValidation:
    def test_rejects_non_positive_columns(self):
        with pytest.raises(ValueError):
            render(solid_grid(2, 2, 0), 0)

    def test_rejects_empty_ramp(self):
        with pytest.raises(ValueError):
            render(solid_grid(2, 2, 0), 2, ramp="")

    def test_rejects_non_positive_row_cap(self):
        with pytest.raises(ValueError):
            render(solid_grid(2, 2, 0), 2, max_rows=0)

    def test_rejects_multi_character_glyphs(self):
        with pytest.raises(ValueError):
            render(solid_grid(2, 2, 0), 2, ramp=["  ", "##"])


class TestAsciiArt:
    def test_text_joins_lines(self):
        art = AsciiArt(lines=("ab", "cd"))
        assert art.text == "ab\ncd\n"
        assert art.width == 2
        assert art.height == 2

    def test_rejects_ragged_lines(self):
        """Art must stay rectangular."""
        with pytest.raises(ValueError):
            AsciiArt(lines=("abc", "d"))

    def test_rejects_empty_art(self):
        with pytest.raises(ValueError):
            AsciiArt(lines=())


class TestToHtml:
    def test_html_has_one_span_per_cell(self):
        grid = PixelGrid.from_rows([[WHITE, BLACK], [BLACK, WHITE]])
        art = render(grid, 2, char_aspect=1.0)

        page = to_html(art)

        assert page.startswith("<!DOCTYPE html>")
        assert page.count("<span") == 4
        assert "color:rgb(0,0,0)" in page
        assert "color:rgb(255,255,255)" in page

    def test_html_escapes_glyphs(self):
        grid = PixelGrid.from_rows([[BLACK]])
        art = render(grid, 1, ramp=["<", "&"])

        page = to_html(art)

        assert "&amp;" in page
        assert ">&<" not in page

    def test_html_without_colors(self):
        page = to_html(AsciiArt(lines=("<>",)))
        assert "&lt;&gt;" in page
