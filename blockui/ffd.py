"""Free-form deformation of UI widgets driven by a small verlet simulation.

A 4x4 grid of control points is stepped each frame. Its positions act as the
control net of a bicubic Bernstein deformation that warps draw geometry. At
rest the points are spread evenly over the widget rect, so the deformation is
the identity mapping. Forces and impulses move the points away from rest.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

GRID_SIZE = 4
"""Control points per axis; always 4 for a bicubic Bernstein net."""

NUM_POINTS = GRID_SIZE * GRID_SIZE
"""Total number of control points."""

FFD_SUBDIVISIONS = 8
"""Subdivisions per axis when tessellating a rect through a deformation."""

CORNER_INDICES = (0, GRID_SIZE - 1, NUM_POINTS - GRID_SIZE, NUM_POINTS - 1)

_U32 = 0xFFFFFFFF


def _is_corner(idx: int) -> bool:
    return idx in CORNER_INDICES


def _grid(x: float, y: float, w: float, h: float) -> list[list[float]]:
    """Evenly spaced control points over a rect, in row-major order."""
    last = GRID_SIZE - 1
    return [
        [x + (i / last) * w, y + (j / last) * h]
        for j in range(GRID_SIZE)
        for i in range(GRID_SIZE)
    ]


def _dist(a: list[float], b: list[float]) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def _bernstein3(i: int, t: float) -> float:
    """Cubic Bernstein basis C(3, i) * t^i * (1-t)^(3-i)."""
    u = 1.0 - t
    if i == 0:
        return u * u * u
    if i == 1:
        return 3.0 * t * u * u
    if i == 2:
        return 3.0 * t * t * u
    if i == 3:
        return t * t * t
    return 0.0


def _hash(x: int) -> int:
    """Deterministic 32-bit integer hash."""
    x = (x * 0x9E3779B9) & _U32
    x ^= x >> 16
    x = (x * 0x45D9F3B) & _U32
    x ^= x >> 16
    return x


@dataclass
class _Constraint:
    a: int
    b: int
    rest_len: float


class FfdSim:
    """A 4x4 verlet-driven free-form deformation.

    Points are stored row-major: index ``j * 4 + i`` for column ``i`` and
    row ``j``.
    """

    def __init__(self, x: float, y: float, w: float, h: float) -> None:
        self.pos: list[list[float]] = _grid(x, y, w, h)
        self._old_pos = [p.copy() for p in self.pos]
        self._rest = [p.copy() for p in self.pos]

        # Horizontal and vertical neighbours only; no diagonals, for a softer feel.
        self._constraints: list[_Constraint] = []
        for j in range(GRID_SIZE):
            for i in range(GRID_SIZE):
                idx = j * GRID_SIZE + i
                if i + 1 < GRID_SIZE:
                    self._constraints.append(self._constraint(idx, idx + 1))
                if j + 1 < GRID_SIZE:
                    self._constraints.append(self._constraint(idx, idx + GRID_SIZE))

        self.damping = 0.04
        self.spring_rate = 0.08
        self.constraint_stiffness = 0.3
        self.iterations = 2
        self.pin_corners = True

    def _constraint(self, a: int, b: int) -> _Constraint:
        return _Constraint(a, b, _dist(self.pos[a], self.pos[b]))

    def resize(self, x: float, y: float, w: float, h: float) -> None:
        """Map the simulation to a new rect and reset every point to rest."""
        self.pos = _grid(x, y, w, h)
        self._old_pos = [p.copy() for p in self.pos]
        self._rest = [p.copy() for p in self.pos]
        for c in self._constraints:
            c.rest_len = _dist(self.pos[c.a], self.pos[c.b])

    def step(self, dt: float) -> None:
        """Advance the simulation by ``dt`` seconds."""
        damp = 1.0 - self.damping

        for cur, old in zip(self.pos, self._old_pos):
            cx, cy = cur
            vx = (cx - old[0]) * damp
            vy = (cy - old[1]) * damp
            old[0], old[1] = cx, cy
            cur[0], cur[1] = cx + vx, cy + vy

        # Frame-rate independent spring toward rest.
        spring_factor = 1.0 - (1.0 - self.spring_rate) ** (dt * 60.0)
        for cur, rest in zip(self.pos, self._rest):
            cur[0] += (rest[0] - cur[0]) * spring_factor
            cur[1] += (rest[1] - cur[1]) * spring_factor

        for _ in range(self.iterations):
            for c in self._constraints:
                ax, ay = self.pos[c.a]
                bx, by = self.pos[c.b]
                dx = bx - ax
                dy = by - ay
                d = math.sqrt(dx * dx + dy * dy)
                if d < 1e-6:
                    continue
                diff = (c.rest_len - d) / d * 0.5 * self.constraint_stiffness
                ox = dx * diff
                oy = dy * diff
                if not (self.pin_corners and _is_corner(c.a)):
                    self.pos[c.a] = [ax - ox, ay - oy]
                if not (self.pin_corners and _is_corner(c.b)):
                    self.pos[c.b] = [bx + ox, by + oy]

        if self.pin_corners:
            for idx in CORNER_INDICES:
                self.pos[idx] = self._rest[idx].copy()
                self._old_pos[idx] = self._rest[idx].copy()

    def apply_force(self, fx: float, fy: float, dt: float) -> None:
        """Apply a force in pixels/s^2 to every point."""
        dt2 = dt * dt
        for p in self.pos:
            p[0] += fx * dt2
            p[1] += fy * dt2

    def apply_force_at(self, col: int, row: int, fx: float, fy: float, dt: float) -> None:
        """Apply a force to the single control point at ``(col, row)``."""
        if not (0 <= col < GRID_SIZE and 0 <= row < GRID_SIZE):
            raise IndexError(f"control point ({col}, {row}) is outside the grid")
        dt2 = dt * dt
        p = self.pos[row * GRID_SIZE + col]
        p[0] += fx * dt2
        p[1] += fy * dt2

    def apply_impulse(self, vx: float, vy: float) -> None:
        """Give every point an instant velocity change."""
        for old in self._old_pos:
            old[0] -= vx
            old[1] -= vy

    def impulse_at(self, px: float, py: float, vx: float, vy: float, radius: float) -> None:
        """Apply an impulse with a Gaussian falloff around ``(px, py)``."""
        inv_r2 = 1.0 / (radius * radius)
        for rest, old in zip(self._rest, self._old_pos):
            dx = rest[0] - px
            dy = rest[1] - py
            weight = math.exp(-(dx * dx + dy * dy) * inv_r2)
            if weight < 0.01:
                continue
            old[0] -= vx * weight
            old[1] -= vy * weight

    def jiggle(self, strength: float, seed: int) -> None:
        """Apply a deterministic pseudo-random impulse to every point."""
        base = (seed * 31) & _U32
        for i, old in enumerate(self._old_pos):
            h = _hash((base + i) & _U32)
            angle = (h / _U32) * math.tau
            old[0] -= math.cos(angle) * strength
            old[1] -= math.sin(angle) * strength

    def pop(self, strength: float) -> None:
        """Apply a radial impulse outward from the centre of the rest rect."""
        first, last = self._rest[0], self._rest[-1]
        cx = (first[0] + last[0]) * 0.5
        cy = (first[1] + last[1]) * 0.5
        max_d = max(math.hypot(first[0] - cx, first[1] - cy), 1.0)
        for cur, old in zip(self.pos, self._old_pos):
            dx = cur[0] - cx
            dy = cur[1] - cy
            d = math.sqrt(dx * dx + dy * dy)
            if d < 0.1:
                continue
            scale = (d / max_d) * strength
            old[0] -= (dx / d) * scale
            old[1] -= (dy / d) * scale

    def eval(self, s: float, t: float) -> tuple[float, float]:
        """Deformed screen position at normalized coordinates ``(s, t)``."""
        rx = ry = 0.0
        for j in range(GRID_SIZE):
            bj = _bernstein3(j, t)
            row = self.pos[j * GRID_SIZE:(j + 1) * GRID_SIZE]
            for i, (px, py) in enumerate(row):
                w = _bernstein3(i, s) * bj
                rx += px * w
                ry += py * w
        return (rx, ry)

    def screen_to_normalized(self, px: float, py: float) -> tuple[float, float]:
        """Map a screen point to ``(s, t)`` using the rest rect."""
        min_x, min_y = self._rest[0]
        max_x, max_y = self._rest[-1]
        w = max_x - min_x
        h = max_y - min_y
        s = (px - min_x) / w if w > 1e-6 else 0.0
        t = (py - min_y) / h if h > 1e-6 else 0.0
        return (s, t)

    def rest_rect(self) -> tuple[float, float, float, float]:
        """The rest bounding rect as ``(x, y, w, h)``."""
        min_x, min_y = self._rest[0]
        max_x, max_y = self._rest[-1]
        return (min_x, min_y, max_x - min_x, max_y - min_y)

    def is_at_rest(self, threshold: float) -> bool:
        """True when every point lies within ``threshold`` of its rest position."""
        thresh2 = threshold * threshold
        return all(
            (p[0] - r[0]) ** 2 + (p[1] - r[1]) ** 2 <= thresh2
            for p, r in zip(self.pos, self._rest)
        )


def tessellate_through_ffd(
    ffd: FfdSim,
    rect: tuple[float, float, float, float],
    uvs: tuple[float, float, float, float],
) -> tuple[list[tuple[float, float]], list[tuple[float, float]], list[int]]:
    """Subdivide ``rect`` into a grid and warp it through ``ffd``.

    Returns vertex positions, linearly interpolated texture coordinates and
    triangle indices.
    """
    rx, ry, rw, rh = rect
    u0, v0, u1, v1 = uvs
    n = FFD_SUBDIVISIONS

    positions: list[tuple[float, float]] = []
    tex_coords: list[tuple[float, float]] = []
    for j in range(n + 1):
        t_frac = j / n
        py = ry + t_frac * rh
        for i in range(n + 1):
            s_frac = i / n
            px = rx + s_frac * rw
            positions.append(ffd.eval(*ffd.screen_to_normalized(px, py)))
            tex_coords.append((u0 + s_frac * (u1 - u0), v0 + t_frac * (v1 - v0)))

    indices: list[int] = []
    for j in range(n):
        for i in range(n):
            tl = j * (n + 1) + i
            tr = tl + 1
            bl = (j + 1) * (n + 1) + i
            br = bl + 1
            indices.extend((tl, tr, br, tl, br, bl))

    return positions, tex_coords, indices