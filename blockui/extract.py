"""Collecting the newest UI frame for the renderer."""

from __future__ import annotations

import queue
from dataclasses import dataclass, field
from typing import Optional

from .bridge import AtlasUpload, UiFrame
from .draw_cmd import DrawOp


@dataclass
class ExtractedUiFrame:
    """The frame data the renderer draws this frame."""

    commands: list[DrawOp] = field(default_factory=list)
    atlas_uploads: list[AtlasUpload] = field(default_factory=list)
    atlas_size: tuple[int, int] = (0, 0)
    dpi_scale: float = 0.0
    window_physical_size: tuple[float, float] = (0.0, 0.0)
    has_data: bool = False


def extract_ui_frame(
    receiver: queue.SimpleQueue,
    extracted: ExtractedUiFrame,
    window_size: Optional[tuple[float, float]] = None,
    scale_factor: float = 1.0,
) -> ExtractedUiFrame:
    """Drain ``receiver`` into ``extracted`` and return it.

    Only the newest frame's commands are kept, but the atlas uploads of every
    drained frame are gathered so no rasterized glyph is lost. Without a new
    frame the previous commands stay and the uploads are cleared. When
    ``window_size`` is given, the physical window size is updated and a zero
    DPI scale falls back to ``scale_factor``.
    """
    latest: Optional[UiFrame] = None
    uploads: list[AtlasUpload] = []
    while True:
        try:
            frame = receiver.get_nowait()
        except queue.Empty:
            break
        uploads.extend(frame.atlas_uploads)
        latest = frame

    if latest is not None:
        extracted.commands = latest.commands
        extracted.atlas_uploads = uploads
        extracted.atlas_size = latest.atlas_size
        extracted.dpi_scale = latest.dpi_scale
        extracted.has_data = True
    else:
        extracted.atlas_uploads = []

    if window_size is not None:
        width, height = window_size
        extracted.window_physical_size = (width * scale_factor, height * scale_factor)
        if extracted.dpi_scale == 0.0:
            extracted.dpi_scale = scale_factor

    return extracted