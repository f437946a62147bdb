"""CPU-side RGBA texture atlas with rectangle packing."""

from __future__ import annotations

import itertools
from dataclasses import dataclass
from typing import Optional

from .bridge import AtlasUpload

INITIAL_ATLAS_SIZE = 1024
MAX_ATLAS_SIZE = 8192


@dataclass
class _Shelf:
    y: int
    height: int
    cursor: int = 0


class _ShelfPacker:
    """Shelf packer: rows of fixed height filled left to right."""

    def __init__(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self._shelves: list[_Shelf] = []
        self._next_y = 0

    def allocate(self, width: int, height: int) -> Optional[tuple[int, int]]:
        if width > self.width or height > self.height:
            return None
        fitting = [
            s for s in self._shelves
            if s.height >= height and s.cursor + width <= self.width
        ]
        if fitting:
            shelf = min(fitting, key=lambda s: s.height)
        elif self._next_y + height <= self.height:
            shelf = _Shelf(self._next_y, height)
            self._shelves.append(shelf)
            self._next_y += height
        else:
            return None
        spot = (shelf.cursor, shelf.y)
        shelf.cursor += width
        return spot

    def grow(self, width: int, height: int) -> None:
        self.width = width
        self.height = height


@dataclass(frozen=True)
class AtlasRegion:
    """A rectangle allocated in the atlas."""

    x: int
    y: int
    width: int
    height: int
    alloc_id: int

    def uvs(self, atlas_width: int, atlas_height: int) -> tuple[float, float, float, float]:
        """Texture coordinates normalized to the atlas size."""
        return (
            self.x / atlas_width,
            self.y / atlas_height,
            (self.x + self.width) / atlas_width,
            (self.y + self.height) / atlas_height,
        )


class Atlas:
    """An RGBA pixel buffer whose rectangles are handed out by a packer."""

    def __init__(self) -> None:
        self.width = INITIAL_ATLAS_SIZE
        self.height = INITIAL_ATLAS_SIZE
        self.pixels = bytearray(self.width * self.height * 4)
        self._packer = _ShelfPacker(self.width, self.height)
        self._ids = itertools.count()
        self.pending_uploads: list[AtlasUpload] = []
        self.needs_full_upload = True

        # The white block goes through the packer so glyphs never overwrite it.
        spot = self._packer.allocate(2, 2)
        if spot is None:
            raise RuntimeError("failed to allocate white pixel in fresh atlas")
        self._white_x, self._white_y = spot
        self._blit(self._white_x, self._white_y, 2, 2, b"\xff" * 16)

    def _blit(self, x: int, y: int, width: int, height: int, rgba: bytes) -> None:
        row_bytes = width * 4
        for row in range(height):
            dst = ((y + row) * self.width + x) * 4
            src = row * row_bytes
            self.pixels[dst:dst + row_bytes] = rgba[src:src + row_bytes]

    def white_pixel_uvs(self) -> tuple[float, float, float, float]:
        """Texture coordinates of the centre of the white block."""
        u = (self._white_x + 0.5) / self.width
        v = (self._white_y + 0.5) / self.height
        return (u, v, u, v)

    def allocate(self, width: int, height: int, rgba_pixels: bytes) -> Optional[AtlasRegion]:
        """Place an RGBA image in the atlas.

        Returns ``None`` when there is no room; the caller may then grow the
        atlas and try again.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"region size must be positive, got {width}x{height}")
        size = width * height * 4
        if len(rgba_pixels) < size:
            raise ValueError(f"expected at least {size} bytes of RGBA data, got {len(rgba_pixels)}")
        spot = self._packer.allocate(width, height)
        if spot is None:
            return None
        x, y = spot
        data = bytes(rgba_pixels[:size])
        self._blit(x, y, width, height, data)
        self.pending_uploads.append(AtlasUpload(x, y, width, height, data))
        return AtlasRegion(x, y, width, height, next(self._ids))

    def grow(self) -> bool:
        """Double the atlas size, keeping existing pixels.

        Returns ``False`` when the atlas is already at its largest size.
        """
        new_width = self.width * 2
        new_height = self.height * 2
        if new_width > MAX_ATLAS_SIZE:
            return False

        new_pixels = bytearray(new_width * new_height * 4)
        old_row = self.width * 4
        new_row = new_width * 4
        for row in range(self.height):
            src = row * old_row
            dst = row * new_row
            new_pixels[dst:dst + old_row] = self.pixels[src:src + old_row]

        self.pixels = new_pixels
        self.width = new_width
        self.height = new_height
        self._packer.grow(new_width, new_height)
        self.needs_full_upload = True
        return True

    def take_uploads(self) -> list[AtlasUpload]:
        """Return the pending dirty rectangles and clear the list."""
        uploads, self.pending_uploads = self.pending_uploads, []
        return uploads