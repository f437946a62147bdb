"""The UI thread: drains input, runs the draw function and emits frames."""

from __future__ import annotations

import abc
import queue
import threading
import time
from collections.abc import Callable
from typing import Union

from .bridge import AtlasUpload, Shutdown, UiFrame, UiInputState, UiThreadChannels
from .canvas import Canvas
from .glyph import GlyphCache

_IDLE_SLEEP = 0.008
_BUSY_SLEEP = 0.002
_WAIT_FOR_WINDOW = 0.016


class UiDrawFn(abc.ABC):
    """A UI drawn once per frame; subclasses may keep state between frames."""

    @abc.abstractmethod
    def draw(self, input_state: UiInputState, canvas: Canvas) -> None:
        """Draw one frame onto ``canvas``."""


DrawFunction = Union[UiDrawFn, Callable[[UiInputState, Canvas], None]]


def _draw_callable(draw_fn: DrawFunction) -> Callable[[UiInputState, Canvas], None]:
    draw = getattr(draw_fn, "draw", None)
    if callable(draw):
        return draw
    if callable(draw_fn):
        return draw_fn
    raise TypeError(f"draw function must be callable or have a draw method, got {draw_fn!r}")


def run_ui_loop(
    channels: UiThreadChannels, glyph_cache: GlyphCache, draw_fn: DrawFunction
) -> None:
    """Run frames until a :class:`Shutdown` message arrives."""
    draw = _draw_callable(draw_fn)
    input_state = UiInputState()

    while True:
        input_state.begin_frame()

        got_input = False
        while True:
            try:
                event = channels.input_rx.get_nowait()
            except queue.Empty:
                break
            if isinstance(event, Shutdown):
                return
            input_state.apply(event)
            got_input = True

        if not input_state.has_window_size():
            try:
                event = channels.input_rx.get(timeout=_WAIT_FOR_WINDOW)
            except queue.Empty:
                continue
            if isinstance(event, Shutdown):
                return
            input_state.apply(event)
            continue

        canvas = Canvas(glyph_cache, channels.event_tx, input_state)
        draw(input_state, canvas)
        commands = canvas.finish()

        with glyph_cache.lock:
            atlas = glyph_cache.atlas
            if atlas.needs_full_upload:
                atlas.needs_full_upload = False
                uploads = [AtlasUpload(0, 0, atlas.width, atlas.height, bytes(atlas.pixels))]
            else:
                uploads = atlas.take_uploads()
            atlas_size = (atlas.width, atlas.height)

        channels.frame_tx.put(
            UiFrame(
                commands=commands,
                atlas_uploads=uploads,
                atlas_size=atlas_size,
                dpi_scale=input_state.dpi_scale,
            )
        )

        time.sleep(_BUSY_SLEEP if got_input else _IDLE_SLEEP)


def spawn_ui_thread(
    channels: UiThreadChannels, glyph_cache: GlyphCache, draw_fn: DrawFunction
) -> threading.Thread:
    """Start :func:`run_ui_loop` on a daemon thread and return the thread."""
    _draw_callable(draw_fn)
    thread = threading.Thread(
        target=run_ui_loop,
        args=(channels, glyph_cache, draw_fn),
        name="ui-thread",
        daemon=True,
    )
    thread.start()
    return thread