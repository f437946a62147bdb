import pytest

from blockui.draw_cmd import DrawCmd, DrawMesh, UiBatch, UiVertex, build_batches

WHITE = (1.0, 1.0, 1.0, 1.0)


def _quad(x=0.0, y=0.0, clip=None, page=0):
    return DrawCmd((x, y, 10.0, 5.0), (0.0, 0.0, 1.0, 1.0), WHITE, page, clip)


def test_empty_commands():
    assert build_batches([], 1.0) == ([], [], [])


def test_single_quad_vertices_and_indices():
    vertices, indices, batches = build_batches([_quad(2.0, 3.0)], 1.0)
    assert [v.position for v in vertices] == [
        (2.0, 3.0),
        (12.0, 3.0),
        (12.0, 8.0),
        (2.0, 8.0),
    ]
    assert [v.uv for v in vertices] == [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]
    assert all(v.color == WHITE for v in vertices)
    assert indices == [0, 1, 2, 0, 2, 3]
    assert batches == [UiBatch(0, None, 0, 6)]


def test_dpi_scaling_applies_to_positions_and_clip():
    cmd = _quad(1.0, 1.0, clip=(0.0, 0.0, 50.0, 50.0))
    scaled, _, scaled_batches = build_batches([cmd], 2.0)
    plain, _, _ = build_batches([cmd], 1.0)
    for s, p in zip(scaled, plain):
        assert s.position == pytest.approx((p.position[0] * 2, p.position[1] * 2))
        assert s.uv == p.uv
    assert scaled_batches[0].clip == (0.0, 0.0, 100.0, 100.0)


def test_consecutive_quads_with_same_state_merge():
    vertices, indices, batches = build_batches([_quad(), _quad(20.0)], 1.0)
    assert len(vertices) == 8
    assert indices[6:] == [4, 5, 6, 4, 6, 7]
    assert batches == [UiBatch(0, None, 0, 12)]


def test_different_clip_or_page_splits_batches():
    ops = [_quad(), _quad(clip=(0.0, 0.0, 5.0, 5.0)), _quad(page=1)]
    _, indices, batches = build_batches(ops, 1.0)
    assert len(batches) == 3
    assert [b.index_start for b in batches] == [0, 6, 12]
    assert sum(b.index_count for b in batches) == len(indices)


def test_mesh_indices_offset_by_base():
    mesh = DrawMesh(
        positions=[(0.0, 0.0), (4.0, 0.0), (4.0, 4.0)],
        uvs=[(0.0, 0.0), (1.0, 0.0), (1.0, 1.0)],
        indices=[0, 1, 2],
        color=WHITE,
    )
    vertices, indices, batches = build_batches([_quad(), mesh], 1.0)
    assert len(vertices) == 7
    assert indices[6:] == [4, 5, 6]
    assert batches == [UiBatch(0, None, 0, 9)]
    assert vertices[5] == UiVertex((4.0, 0.0), (1.0, 0.0), WHITE)


def test_mesh_after_clipped_quad_starts_new_batch():
    mesh = DrawMesh([(1.0, 1.0)], [(0.5, 0.5)], [0, 0, 0], WHITE, 0, None)
    _, _, batches = build_batches([_quad(clip=(0.0, 0.0, 1.0, 1.0)), mesh], 3.0)
    assert batches[1] == UiBatch(0, None, 6, 3)


def test_mesh_length_mismatch_rejected():
    with pytest.raises(ValueError):
        DrawMesh([(0.0, 0.0)], [], [0], WHITE)


def test_unknown_op_rejected():
    with pytest.raises(TypeError):
        build_batches(["not a draw op"], 1.0)