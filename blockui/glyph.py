"""Glyph rasterization into the atlas and simple single-style text layout."""

from __future__ import annotations

import io
import math
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from PIL import Image, ImageDraw, ImageFont

from .atlas import Atlas, AtlasRegion

FontSource = Union[None, bytes, bytearray, str, "os.PathLike[str]"]


@dataclass(frozen=True)
class GlyphEntry:
    """A glyph stored in the atlas.

    ``offset_x`` is the distance from the pen position to the left of the
    image, ``offset_y`` the distance from the baseline up to its top.
    """

    region: AtlasRegion
    offset_x: int
    offset_y: int


@dataclass(frozen=True)
class LayoutGlyph:
    """A glyph positioned relative to the text origin."""

    x: float
    y: float
    entry: GlyphEntry


class GlyphCache:
    """Rasterizes glyphs with one font and packs them into an atlas.

    ``font`` is a path to a font file, the font file's bytes, or ``None`` for
    the built-in default font. ``lock`` guards the cache when it is shared
    between threads.
    """

    def __init__(self, font: FontSource = None) -> None:
        if font is None:
            self._font_data: Optional[bytes] = None
        elif isinstance(font, (bytes, bytearray)):
            self._font_data = bytes(font)
        else:
            self._font_data = Path(font).read_bytes()
        self.atlas = Atlas()
        self.lock = threading.RLock()
        self._fonts: dict[float, ImageFont.FreeTypeFont] = {}
        self._glyphs: dict[tuple[str, float], GlyphEntry] = {}

    def _font(self, size: float):
        if size <= 0:
            raise ValueError(f"font size must be positive, got {size}")
        font = self._fonts.get(size)
        if font is None:
            if self._font_data is None:
                font = ImageFont.load_default(size)
            else:
                font = ImageFont.truetype(io.BytesIO(self._font_data), size)
            self._fonts[size] = font
        return font

    def get_or_insert(self, char: str, font_size: float) -> Optional[GlyphEntry]:
        """Return the atlas entry for ``char``, rasterizing it on first use.

        Returns ``None`` for glyphs with no visible pixels or when the atlas
        cannot grow any further.
        """
        key = (char, float(font_size))
        cached = self._glyphs.get(key)
        if cached is not None:
            return cached

        font = self._font(float(font_size))
        left, top, right, bottom = font.getbbox(char, anchor="ls")
        left, top = math.floor(left), math.floor(top)
        right, bottom = math.ceil(right), math.ceil(bottom)
        width, height = right - left, bottom - top
        if width <= 0 or height <= 0:
            return None

        mask = Image.new("L", (width, height), 0)
        ImageDraw.Draw(mask).text((-left, -top), char, font=font, fill=255, anchor="ls")
        white = Image.new("L", (width, height), 255)
        rgba = Image.merge("RGBA", (white, white, white, mask)).tobytes()

        region = self.atlas.allocate(width, height, rgba)
        if region is None:
            if not self.atlas.grow():
                return None
            region = self.atlas.allocate(width, height, rgba)
            if region is None:
                return None

        entry = GlyphEntry(region=region, offset_x=left, offset_y=-top)
        self._glyphs[key] = entry
        return entry

    def layout_text(self, text: str, font_size: float) -> list[LayoutGlyph]:
        """Lay out ``text`` and return its visible glyphs.

        Lines are ``1.2 * font_size`` apart and only lines starting within a
        layout box ``2 * font_size`` high are laid out.
        """
        font = self._font(float(font_size))
        ascent, descent = font.getmetrics()
        line_height = font_size * 1.2
        box_height = font_size * 2.0

        glyphs: list[LayoutGlyph] = []
        for line_no, line in enumerate(text.split("\n")):
            line_top = line_no * line_height
            if line_top >= box_height:
                break
            baseline = line_top + (line_height - (ascent + descent)) / 2.0 + ascent
            pen = 0.0
            for char in line:
                entry = self.get_or_insert(char, font_size)
                if entry is not None:
                    glyphs.append(
                        LayoutGlyph(
                            x=float(round(pen) + entry.offset_x),
                            y=baseline - entry.offset_y,
                            entry=entry,
                        )
                    )
                pen += font.getlength(char)
        return glyphs