import math

import pytest

from msdftext.billboard import (
    BOTTOM, CENTER, LEFT, NONE, RIGHT, TOP, UPRIGHT, BillboardConfig, BillboardError,
    Camera, Viewport, anchor_offset, clamp_adjustment, placement_offset, solve_billboard,
    solve_screen_space, view_depth, view_size,
)
from msdftext.bounds import Box, Sphere
from msdftext.xform import (
    IDENTITY_QUAT, Compose, Matrix, quat_close, quat_from_axis_angle, quat_mul,
)

# glyph box of "A" in the test font
BOX = Box((1.0, -35.0, 0.0), (21.0, -5.0, 0.0))
SPHERE = Sphere((11.0, -20.0, 0.0), math.hypot(20.0, 30.0) / 2.0)

CAMERA = Camera(position=(0.0, 0.0, 0.0), fov=90.0)
VIEWPORT = Viewport(1000, 1000)
PARENT = Compose((0.0, 0.0, -10.0))

# 1000 px over a 20 unit wide view at depth 10
SCALE = 12.0 / (50.0 * 42.0)


def _solve(config=None, camera=CAMERA, viewport=VIEWPORT, parent=PARENT, box=BOX, sphere=SPHERE):
    return solve_billboard(camera, viewport, parent, box, sphere, config or BillboardConfig())


def _footprint(state):
    """Footprint centre and half size in view space, for an identity camera."""
    pos = state.position
    return ((pos[0] + SCALE * 11.0, pos[1] + SCALE * 20.0),
            (SCALE * 10.0, SCALE * 15.0))


class TestSolveBillboard:
    """unit tests for the camera facing transform"""

    def test_view_and_scale(self):
        state = _solve()
        assert state.distance == pytest.approx(10.0)
        assert state.view_width == pytest.approx(20.0)
        assert state.view_height == pytest.approx(20.0)
        assert state.scale == pytest.approx(SCALE)
        assert state.local_scale == pytest.approx(SCALE)

    def test_scale_grows_with_distance(self):
        near = _solve()
        far = _solve(parent=Compose((0.0, 0.0, -20.0)))
        assert far.scale == pytest.approx(2.0 * near.scale)

    def test_scale_follows_font_size(self):
        small = _solve(BillboardConfig(font_size=12))
        big = _solve(BillboardConfig(font_size=24))
        assert big.scale == pytest.approx(2.0 * small.scale)

    def test_centered_label(self):
        state = _solve()
        assert state.anchor_offset == (-11.0, -20.0)
        assert state.placement_offset == pytest.approx((0.0, 0.0))
        assert state.adjustment == pytest.approx((0.0, 0.0))
        assert state.position == pytest.approx((-11.0 * SCALE, -20.0 * SCALE, 0.0))
        assert quat_close(state.rotation, UPRIGHT)

    def test_clamp_pulls_text_inside(self):
        state = _solve(BillboardConfig(anchor_horz=LEFT, position_horz=100))
        center, half = _footprint(state)
        assert state.adjustment[0] == pytest.approx(-20.0 * SCALE)
        # right edge lands exactly on the view edge
        assert center[0] + half[0] == pytest.approx(10.0)

    def test_no_clamp(self):
        state = _solve(BillboardConfig(anchor_horz=LEFT, position_horz=100, clamp=False))
        assert state.adjustment == (0.0, 0.0)
        assert state.position[0] == pytest.approx(10.0 - SCALE)

    def test_top_anchor_at_top_edge(self):
        state = _solve(BillboardConfig(anchor_vert=TOP, position_vert=0))
        center, half = _footprint(state)
        assert center[1] + half[1] == pytest.approx(10.0)
        assert state.adjustment[1] == pytest.approx(0.0, abs=1e-12)

    def test_clamp_adjusts_one_side(self):
        for ph in (-50, 0, 50, 100, 150):
            for pv in (-50, 0, 50, 100, 150):
                for horz in (LEFT, CENTER, RIGHT):
                    for vert in (TOP, CENTER, BOTTOM):
                        config = BillboardConfig(anchor_horz=horz, anchor_vert=vert,
                                                 position_horz=ph, position_vert=pv)
                        state = _solve(config)
                        bl, tr = state.bottom_left_adjustment, state.top_right_adjustment
                        for axis in (0, 1):
                            assert bl[axis] == 0.0 or tr[axis] == 0.0
                        center, half = _footprint(state)
                        assert abs(center[0]) + half[0] <= 10.0 + 1e-9
                        assert abs(center[1]) + half[1] <= 10.0 + 1e-9

    def test_oversized_text_is_centered(self):
        config = BillboardConfig(font_size=12000, anchor_horz=LEFT, position_horz=80)
        state = _solve(config)
        bl, tr = state.bottom_left_adjustment, state.top_right_adjustment
        assert bl[0] == 0.0 or tr[0] == 0.0
        scl = state.scale
        cx = state.position[0] + scl * 11.0
        cy = state.position[1] + scl * 20.0
        assert cx == pytest.approx(0.0, abs=1e-9)
        assert cy == pytest.approx(0.0, abs=1e-9)

    def test_faces_camera_under_rotated_parent(self):
        parent_q = quat_from_axis_angle((0.0, 1.0, 0.0), math.pi / 2)
        parent = Compose((0.0, 0.0, -10.0), parent_q)
        state = _solve(BillboardConfig(clamp=False), parent=parent)
        world_q = quat_mul(parent_q, state.rotation)
        assert quat_close(world_q, quat_mul(CAMERA.quaternion, UPRIGHT))
        # offsets stay in the camera's view plane
        world = parent.mul(state.position)
        assert world == pytest.approx((-11.0 * SCALE, -20.0 * SCALE, -10.0), abs=1e-9)

    def test_rotated_camera(self):
        cam_q = quat_from_axis_angle((0.0, 1.0, 0.0), math.pi / 2)
        camera = Camera(position=(0.0, 0.0, 0.0), quaternion=cam_q, fov=90.0)
        state = _solve(parent=Compose((-10.0, 0.0, 0.0)), camera=camera)
        assert state.distance == pytest.approx(10.0)
        assert quat_close(state.rotation, quat_mul(cam_q, UPRIGHT))

    def test_parent_scale_is_compensated(self):
        parent = Compose((0.0, 0.0, -10.0), IDENTITY_QUAT, 2.0)
        state = _solve(BillboardConfig(clamp=False), parent=parent)
        assert state.local_scale == pytest.approx(SCALE / 2.0)
        world = parent.mul(state.position)
        assert world == pytest.approx((-11.0 * SCALE, -20.0 * SCALE, -10.0))

    def test_local_matrix(self):
        state = _solve()
        m = state.local_matrix()
        assert m.position() == pytest.approx(state.position)
        assert quat_close(m.quaternion(), state.rotation)

    def test_empty_box_skips_clamp(self):
        state = _solve(box=Box.empty(), sphere=Sphere((0.0, 0.0, 0.0), 0.0))
        assert state.adjustment == (0.0, 0.0)

    def test_empty_box_anchors_at_origin(self):
        empty = Sphere((0.0, 0.0, 0.0), 0.0)
        for horz, vert in ((LEFT, TOP), (RIGHT, BOTTOM), (CENTER, CENTER)):
            config = BillboardConfig(anchor_horz=horz, anchor_vert=vert, position_horz=25)
            state = _solve(config, box=Box.empty(), sphere=empty)
            assert all(math.isfinite(c) for c in state.anchor_offset)
            assert all(math.isfinite(c) for c in state.position)
            assert state.position == pytest.approx((-5.0, 0.0, 0.0))

    def test_degenerate_parent(self):
        with pytest.raises(BillboardError):
            _solve(parent=Compose((0.0, 0.0, -10.0), IDENTITY_QUAT, 0.0))

    def test_behind_camera(self):
        with pytest.raises(BillboardError):
            _solve(parent=Compose((0.0, 0.0, 5.0)))
        with pytest.raises(BillboardError):
            _solve(parent=Matrix())

    def test_bad_camera_and_viewport(self):
        with pytest.raises(BillboardError):
            _solve(camera=Camera(fov=0.0))
        with pytest.raises(BillboardError):
            _solve(viewport=Viewport(0, 600))
        with pytest.raises(BillboardError):
            _solve(viewport=Viewport(800, -1))


def test_anchor_offsets():
    assert anchor_offset(BOX, SPHERE, LEFT, TOP) == (-1.0, -35.0)
    assert anchor_offset(BOX, SPHERE, CENTER, CENTER) == (-11.0, -20.0)
    assert anchor_offset(BOX, SPHERE, RIGHT, BOTTOM) == (-21.0, -5.0)
    assert anchor_offset(BOX, SPHERE, NONE, NONE) == (0.0, 0.0)


def test_placement_offsets():
    assert placement_offset(20.0, 10.0, 0, 0) == (-10.0, 5.0)
    assert placement_offset(20.0, 10.0, 50, 50) == (0.0, 0.0)
    assert placement_offset(20.0, 10.0, 100, 100) == (10.0, -5.0)


def test_clamp_adjustment():
    # inside: nothing to do
    assert clamp_adjustment((0.0, 0.0), (2.0, 2.0), 10.0, 10.0) == ((0.0, 0.0), (0.0, 0.0))
    # 2 units past the left edge
    bl, tr = clamp_adjustment((-6.0, 0.0), (2.0, 2.0), 10.0, 10.0)
    assert bl == (-2.0, 0.0)
    assert tr == (0.0, 0.0)
    # 3 units past the top edge
    bl, tr = clamp_adjustment((0.0, 7.0), (2.0, 2.0), 10.0, 10.0)
    assert tr == (0.0, -3.0)
    assert bl == (0.0, 0.0)


def test_view_depth_is_signed():
    assert view_depth((0, 0, 0), (0, 0, -1), (3.0, 4.0, -10.0)) == 10.0
    assert view_depth((0, 0, 0), (0, 0, -2), (0.0, 0.0, 5.0)) == -5.0


def test_view_size():
    width, height = view_size(10.0, math.pi / 2, 2.0)
    assert height == pytest.approx(20.0)
    assert width == pytest.approx(40.0)


def test_camera_direction_override():
    camera = Camera(direction=(0.0, 0.0, -5.0))
    assert camera.forward == (0.0, 0.0, -1.0)
    assert Camera().forward == pytest.approx((0.0, 0.0, -1.0))


def test_config_validation():
    with pytest.raises(ValueError):
        BillboardConfig(anchor_horz=TOP)
    with pytest.raises(ValueError):
        BillboardConfig(anchor_vert=LEFT)
    with pytest.raises(ValueError):
        BillboardConfig(font_design_size=0)


def test_screen_space():
    state = solve_screen_space(BOX, SPHERE, BillboardConfig(anchor_horz=LEFT, position_horz=0),
                               20.0, 20.0, 50.0)
    assert state.scale == pytest.approx(SCALE)
    assert state.rotation == UPRIGHT
    assert state.position == pytest.approx((-SCALE - 10.0, -20.0 * SCALE, 0.0))
    with pytest.raises(BillboardError):
        solve_screen_space(BOX, SPHERE, BillboardConfig(), 20.0, 20.0, 0.0)
