"""Immediate-mode drawing context used by the UI thread each frame."""

from __future__ import annotations

import itertools
import queue
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional

from .bridge import Clicked, Hovered, UiInputState
from .draw_cmd import DrawCmd, DrawMesh, DrawOp, Rect
from .ffd import FfdSim, tessellate_through_ffd
from .glyph import GlyphCache


@dataclass(frozen=True)
class HitResult:
    """Mouse interaction with a rectangle during this frame."""

    hovered: bool
    clicked: bool
    id: int


class Canvas:
    """Collects draw operations for one frame.

    Hover and click events found by :meth:`hit_test` are put on
    ``event_queue``.
    """

    def __init__(
        self,
        glyph_cache: GlyphCache,
        event_queue: queue.SimpleQueue,
        input_state: UiInputState,
    ) -> None:
        self._glyph_cache = glyph_cache
        self._events = event_queue
        self._input = input_state
        self._commands: list[DrawOp] = []
        self._clip_stack: list[Rect] = []
        self._ids = itertools.count()

    @property
    def input_state(self) -> UiInputState:
        """The input state for the current frame."""
        return self._input

    def _current_clip(self) -> Optional[Rect]:
        return self._clip_stack[-1] if self._clip_stack else None

    def _white_uvs(self) -> Rect:
        with self._glyph_cache.lock:
            return self._glyph_cache.atlas.white_pixel_uvs()

    def rect(self, x: float, y: float, w: float, h: float, color: Sequence[float]) -> None:
        """Draw a solid-colour rectangle."""
        self._commands.append(
            DrawCmd(
                rect=(x, y, w, h),
                uvs=self._white_uvs(),
                color=tuple(color),
                atlas_page=0,
                clip=self._current_clip(),
            )
        )

    def rect_ffd(
        self, x: float, y: float, w: float, h: float, color: Sequence[float], ffd: FfdSim
    ) -> None:
        """Draw a solid-colour rectangle warped through ``ffd``."""
        positions, tex_coords, indices = tessellate_through_ffd(
            ffd, (x, y, w, h), self._white_uvs()
        )
        self._commands.append(
            DrawMesh(
                positions=positions,
                uvs=tex_coords,
                indices=indices,
                color=tuple(color),
                atlas_page=0,
                clip=self._current_clip(),
            )
        )

    def _glyph_rects(self, x: float, y: float, text: str, font_size: float):
        cache = self._glyph_cache
        with cache.lock:
            glyphs = cache.layout_text(text, font_size)
            atlas_w, atlas_h = cache.atlas.width, cache.atlas.height
        for g in glyphs:
            region = g.entry.region
            rect = (x + g.x, y + g.y, float(region.width), float(region.height))
            yield rect, region.uvs(atlas_w, atlas_h)

    def text(self, x: float, y: float, text: str, font_size: float, color: Sequence[float]) -> None:
        """Draw ``text`` with its layout origin at ``(x, y)``."""
        clip = self._current_clip()
        color = tuple(color)
        for rect, uvs in self._glyph_rects(x, y, text, font_size):
            self._commands.append(DrawCmd(rect=rect, uvs=uvs, color=color, atlas_page=0, clip=clip))

    def text_ffd(
        self,
        x: float,
        y: float,
        text: str,
        font_size: float,
        color: Sequence[float],
        ffd: FfdSim,
    ) -> None:
        """Draw ``text`` with every glyph warped through ``ffd``."""
        clip = self._current_clip()
        color = tuple(color)
        for rect, uvs in self._glyph_rects(x, y, text, font_size):
            positions, tex_coords, indices = tessellate_through_ffd(ffd, rect, uvs)
            self._commands.append(
                DrawMesh(
                    positions=positions,
                    uvs=tex_coords,
                    indices=indices,
                    color=color,
                    atlas_page=0,
                    clip=clip,
                )
            )

    def push_clip(self, x: float, y: float, w: float, h: float) -> None:
        """Clip later drawing to a rect, intersected with the current clip."""
        if self._clip_stack:
            px, py, pw, ph = self._clip_stack[-1]
            x0 = max(x, px)
            y0 = max(y, py)
            x1 = min(x + w, px + pw)
            y1 = min(y + h, py + ph)
            clip = (x0, y0, max(x1 - x0, 0.0), max(y1 - y0, 0.0))
        else:
            clip = (x, y, w, h)
        self._clip_stack.append(clip)

    def pop_clip(self) -> None:
        """Drop the most recent clip rect; does nothing when none is set."""
        if self._clip_stack:
            self._clip_stack.pop()

    def hit_test(self, x: float, y: float, w: float, h: float) -> HitResult:
        """Check the mouse against a rect and report hover and click events."""
        hit_id = next(self._ids)
        mx, my = self._input.mouse_pos
        hovered = x <= mx < x + w and y <= my < y + h
        clicked = hovered and self._input.mouse_just_pressed[0]
        if hovered:
            self._events.put(Hovered(hit_id))
        if clicked:
            self._events.put(Clicked(hit_id))
        return HitResult(hovered=hovered, clicked=clicked, id=hit_id)

    def window_size(self) -> tuple[float, float]:
        """The window size in logical pixels."""
        return self._input.window_size

    def finish(self) -> list[DrawOp]:
        """Return the draw operations recorded this frame."""
        commands, self._commands = self._commands, []
        return commands