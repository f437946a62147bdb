import pytest

from blockui.ffd import (
    CORNER_INDICES,
    FFD_SUBDIVISIONS,
    GRID_SIZE,
    NUM_POINTS,
    FfdSim,
    tessellate_through_ffd,
)


def _sim():
    return FfdSim(10.0, 20.0, 300.0, 150.0)


def test_grid_layout_is_row_major():
    sim = _sim()
    assert len(sim.pos) == GRID_SIZE * GRID_SIZE
    expected_corners = [[10.0, 20.0], [310.0, 20.0], [10.0, 170.0], [310.0, 170.0]]
    for idx, corner in zip(CORNER_INDICES, expected_corners):
        assert sim.pos[idx] == pytest.approx(corner)
    assert sim.pos[1] == pytest.approx([110.0, 20.0])
    assert sim.pos[GRID_SIZE] == pytest.approx([10.0, 70.0])


def test_rest_rect_matches_construction():
    assert _sim().rest_rect() == pytest.approx((10.0, 20.0, 300.0, 150.0))


def test_initial_positions_span_rect():
    sim = _sim()
    assert len(sim.pos) == NUM_POINTS
    assert sim.pos[0] == pytest.approx([10.0, 20.0])
    assert sim.pos[-1] == pytest.approx([310.0, 170.0])


@pytest.mark.parametrize("s,t", [(0.0, 0.0), (0.25, 0.75), (0.5, 0.5), (1.0, 1.0)])
def test_eval_is_identity_at_rest(s, t):
    sim = _sim()
    x, y, w, h = sim.rest_rect()
    assert sim.eval(s, t) == pytest.approx((x + s * w, y + t * h))


@pytest.mark.parametrize("px,py", [(10.0, 20.0), (160.0, 95.0), (310.0, 170.0)])
def test_screen_to_normalized_round_trips_through_eval(px, py):
    sim = _sim()
    s, t = sim.screen_to_normalized(px, py)
    assert sim.eval(s, t) == pytest.approx((px, py))


def test_screen_to_normalized_degenerate_rect():
    sim = FfdSim(5.0, 5.0, 0.0, 0.0)
    assert sim.screen_to_normalized(100.0, 100.0) == (0.0, 0.0)


def test_fresh_sim_is_at_rest():
    assert _sim().is_at_rest(1e-6)


def test_step_at_rest_stays_at_rest():
    sim = _sim()
    for _ in range(10):
        sim.step(1 / 60)
    assert sim.is_at_rest(1e-4)


def test_impulse_moves_points_then_settles():
    sim = _sim()
    sim.apply_impulse(5.0, -3.0)
    sim.step(1 / 60)
    assert not sim.is_at_rest(0.5)
    for _ in range(600):
        sim.step(1 / 60)
    assert sim.is_at_rest(0.01)


def test_corners_pinned_after_step():
    sim = _sim()
    rest = [sim.pos[i].copy() for i in CORNER_INDICES]
    sim.apply_impulse(20.0, 20.0)
    sim.step(1 / 60)
    for idx, expected in zip(CORNER_INDICES, rest):
        assert sim.pos[idx] == pytest.approx(expected)


def test_unpinned_corners_move():
    sim = _sim()
    sim.pin_corners = False
    before = sim.pos[0].copy()
    sim.apply_impulse(20.0, 0.0)
    sim.step(1 / 60)
    assert sim.pos[0][0] > before[0]


def test_apply_force_shifts_every_point():
    sim = _sim()
    before = [p.copy() for p in sim.pos]
    sim.apply_force(100.0, -100.0, 0.1)
    for p, b in zip(sim.pos, before):
        assert p == pytest.approx([b[0] + 1.0, b[1] - 1.0])


def test_apply_force_at_moves_single_point():
    sim = _sim()
    before = [p.copy() for p in sim.pos]
    sim.apply_force_at(1, 2, 100.0, 0.0, 0.1)
    idx = 2 * GRID_SIZE + 1
    assert sim.pos[idx] == pytest.approx([before[idx][0] + 1.0, before[idx][1]])
    assert [p for i, p in enumerate(sim.pos) if i != idx] == [
        b for i, b in enumerate(before) if i != idx
    ]


def test_apply_force_at_out_of_grid():
    with pytest.raises(IndexError):
        _sim().apply_force_at(GRID_SIZE, 0, 1.0, 1.0, 0.1)


def test_impulse_at_far_away_has_no_effect():
    sim = _sim()
    sim.impulse_at(10_000.0, 10_000.0, 50.0, 50.0, 10.0)
    sim.step(1 / 60)
    assert sim.is_at_rest(1e-6)


def test_impulse_at_nearby_moves_points():
    sim = _sim()
    sim.impulse_at(110.0, 70.0, 30.0, 0.0, 50.0)
    sim.step(1 / 60)
    assert not sim.is_at_rest(0.5)


def test_jiggle_is_deterministic():
    a, b, c = _sim(), _sim(), _sim()
    a.jiggle(4.0, 7)
    b.jiggle(4.0, 7)
    c.jiggle(4.0, 8)
    for sim in (a, b, c):
        sim.step(1 / 60)
    assert a.pos == b.pos
    assert a.pos != c.pos
    assert not a.is_at_rest(0.1)


def test_pop_pushes_inner_points_outward():
    sim = _sim()
    x, y, w, h = sim.rest_rect()
    cx, cy = x + w / 2, y + h / 2
    idx = 1 * GRID_SIZE + 1
    px, py = sim.pos[idx]
    before = (px - cx) ** 2 + (py - cy) ** 2
    sim.pop(10.0)
    sim.step(1 / 60)
    px, py = sim.pos[idx]
    assert (px - cx) ** 2 + (py - cy) ** 2 > before


def test_resize_resets_to_new_rest():
    sim = _sim()
    sim.apply_impulse(10.0, 10.0)
    sim.step(1 / 60)
    sim.resize(0.0, 0.0, 60.0, 30.0)
    assert sim.rest_rect() == pytest.approx((0.0, 0.0, 60.0, 30.0))
    assert sim.is_at_rest(1e-9)
    sim.step(1 / 60)
    assert sim.is_at_rest(1e-6)


def test_tessellate_counts_and_uv_corners():
    sim = _sim()
    positions, tex_coords, indices = tessellate_through_ffd(
        sim, (10.0, 20.0, 300.0, 150.0), (0.1, 0.2, 0.3, 0.4)
    )
    n = FFD_SUBDIVISIONS
    assert len(positions) == (n + 1) ** 2
    assert len(tex_coords) == (n + 1) ** 2
    assert len(indices) == n * n * 6
    assert max(indices) == len(positions) - 1
    assert tex_coords[0] == pytest.approx((0.1, 0.2))
    assert tex_coords[-1] == pytest.approx((0.3, 0.4))
    assert indices[:6] == [0, 1, n + 2, 0, n + 2, n + 1]


def test_tessellate_at_rest_is_flat_grid():
    sim = _sim()
    rect = (40.0, 50.0, 80.0, 40.0)
    positions, _, _ = tessellate_through_ffd(sim, rect, (0.0, 0.0, 1.0, 1.0))
    assert positions[0] == pytest.approx((40.0, 50.0))
    assert positions[-1] == pytest.approx((120.0, 90.0))