"""Draw commands and their expansion into batched vertex and index lists."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Optional, Union

Rect = tuple[float, float, float, float]
Color = tuple[float, float, float, float]


@dataclass
class DrawCmd:
    """One textured, tinted quad.

    ``rect`` is ``(x, y, w, h)`` in logical pixels, ``uvs`` is
    ``(u_min, v_min, u_max, v_max)`` in the atlas and ``clip`` an optional
    scissor rect in logical pixels.
    """

    rect: Rect
    uvs: Rect
    color: Color
    atlas_page: int = 0
    clip: Optional[Rect] = None


@dataclass
class DrawMesh:
    """Pre-tessellated geometry sharing one tint colour."""

    positions: list[tuple[float, float]]
    uvs: list[tuple[float, float]]
    indices: list[int]
    color: Color
    atlas_page: int = 0
    clip: Optional[Rect] = None

    def __post_init__(self) -> None:
        if len(self.positions) != len(self.uvs):
            raise ValueError("positions and uvs must have the same length")


DrawOp = Union[DrawCmd, DrawMesh]


@dataclass(frozen=True)
class UiVertex:
    """A vertex in physical pixels."""

    position: tuple[float, float]
    uv: tuple[float, float]
    color: Color


@dataclass
class UiBatch:
    """A run of indices sharing an atlas page and clip rect."""

    atlas_page: int
    clip: Optional[Rect]
    index_start: int
    index_count: int


@dataclass
class _Geometry:
    vertices: list[UiVertex] = field(default_factory=list)
    indices: list[int] = field(default_factory=list)


def _scale_clip(clip: Optional[Rect], scale: float) -> Optional[Rect]:
    if clip is None:
        return None
    cx, cy, cw, ch = clip
    return (cx * scale, cy * scale, cw * scale, ch * scale)


def _quad_vertices(cmd: DrawCmd, scale: float) -> list[UiVertex]:
    x, y, w, h = (v * scale for v in cmd.rect)
    u0, v0, u1, v1 = cmd.uvs
    color = cmd.color
    return [
        UiVertex((x, y), (u0, v0), color),
        UiVertex((x + w, y), (u1, v0), color),
        UiVertex((x + w, y + h), (u1, v1), color),
        UiVertex((x, y + h), (u0, v1), color),
    ]


_QUAD_INDICES = (0, 1, 2, 0, 2, 3)


def _mesh_vertices(mesh: DrawMesh, scale: float) -> list[UiVertex]:
    return [
        UiVertex((px * scale, py * scale), uv, mesh.color)
        for (px, py), uv in zip(mesh.positions, mesh.uvs)
    ]


def build_batches(
    commands: Iterable[DrawOp], dpi_scale: float
) -> tuple[list[UiVertex], list[int], list[UiBatch]]:
    """Expand draw operations into vertices, indices and batches.

    Consecutive operations with the same atlas page and scaled clip rect are
    merged into one batch.
    """
    geometry = _Geometry()
    batches: list[UiBatch] = []

    for op in commands:
        if isinstance(op, DrawCmd):
            new_vertices = _quad_vertices(op, dpi_scale)
            local_indices: Sequence[int] = _QUAD_INDICES
        elif isinstance(op, DrawMesh):
            new_vertices = _mesh_vertices(op, dpi_scale)
            local_indices = op.indices
        else:
            raise TypeError(f"unsupported draw operation: {type(op).__name__}")

        base = len(geometry.vertices)
        index_start = len(geometry.indices)
        geometry.vertices.extend(new_vertices)
        geometry.indices.extend(base + i for i in local_indices)
        index_count = len(local_indices)

        clip = _scale_clip(op.clip, dpi_scale)
        last = batches[-1] if batches else None
        if last is not None and last.atlas_page == op.atlas_page and last.clip == clip:
            last.index_count += index_count
        else:
            batches.append(UiBatch(op.atlas_page, clip, index_start, index_count))

    return geometry.vertices, geometry.indices, batches