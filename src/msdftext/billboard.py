"""Per-frame placement of text meshes that face the camera.

Given the camera, the viewport and the text's bounds, the solver works
out the local position, rotation and uniform scale for the text object so
that

* glyphs appear at a constant pixel size whatever the camera distance,
* the mesh always faces the camera whatever its parent's orientation,
* a chosen anchor point of the text (``left``/``center``/``right`` x
  ``top``/``center``/``bottom``) sits at a chosen percentage position of
  the viewport, and
* optionally, text that would leave the view is pulled back in.

The solver is O(1): it only looks at the precomputed bounding box and
sphere of the mesh, never at vertex buffers.

Example usage:

    from msdftext.billboard import BillboardConfig, Camera, Viewport, solve_billboard

    camera = Camera(position=(0, 0, 10), fov=75.0)
    state = solve_billboard(camera, Viewport(800, 600), parent_world,
                            mesh.bounding_box, mesh.bounding_sphere,
                            BillboardConfig(font_size=16, font_design_size=42))
    state.position, state.rotation, state.local_scale
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from msdftext.bounds import Box, Sphere
from msdftext.xform import (
    IDENTITY_QUAT, Compose, Matrix, epsilon, dot, mag, normalize, quat_conjugate,
    quat_from_axis_angle, quat_mul, quat_rotate, sub,
)

TOP = "top"
LEFT = "left"
CENTER = "center"
BOTTOM = "bottom"
RIGHT = "right"
NONE = "none"

HORIZONTAL_ANCHORS = (LEFT, CENTER, RIGHT, NONE)
VERTICAL_ANCHORS = (TOP, CENTER, BOTTOM, NONE)

# font rows run top-down; turn the mesh over about local X
UPRIGHT = quat_from_axis_angle((1.0, 0.0, 0.0), math.pi)

Vec2 = Tuple[float, float]
Vec3 = Tuple[float, float, float]
Quat = Tuple[float, float, float, float]


class BillboardError(ValueError):
    """Raised when the camera/viewport cannot produce a billboard transform."""


@dataclass(frozen=True)
class Camera:
    """Perspective camera in world space.

    ``fov`` is the vertical field of view in degrees.  ``direction``
    defaults to the camera's local -Z axis rotated by ``quaternion``.
    """

    position: Vec3 = (0.0, 0.0, 0.0)
    quaternion: Quat = IDENTITY_QUAT
    fov: float = 50.0
    direction: Optional[Vec3] = None

    @property
    def fov_radians(self) -> float:
        return math.radians(self.fov)

    @property
    def forward(self) -> Vec3:
        if self.direction is not None:
            return normalize(self.direction)
        return quat_rotate(self.quaternion, (0.0, 0.0, -1.0))

    @property
    def world_matrix(self) -> Matrix:
        return Compose(self.position, self.quaternion)

    @property
    def view_matrix(self) -> Matrix:
        return self.world_matrix.inverse_rigid()


@dataclass(frozen=True)
class Viewport:
    """Viewport size in pixels."""

    width: float
    height: float

    @property
    def aspect(self) -> float:
        return self.width / self.height


@dataclass(frozen=True)
class BillboardConfig:
    font_size: float = 12.0
    font_design_size: float = 42.0
    anchor_horz: str = CENTER
    anchor_vert: str = CENTER
    position_horz: float = 50.0
    position_vert: float = 50.0
    clamp: bool = True

    def __post_init__(self):
        if self.anchor_horz not in HORIZONTAL_ANCHORS:
            raise ValueError(f"anchor_horz must be one of {HORIZONTAL_ANCHORS}, got {self.anchor_horz!r}")
        if self.anchor_vert not in VERTICAL_ANCHORS:
            raise ValueError(f"anchor_vert must be one of {VERTICAL_ANCHORS}, got {self.anchor_vert!r}")
        if self.font_design_size <= 0:
            raise ValueError("font_design_size must be positive")


@dataclass(frozen=True)
class BillboardState:
    """Everything derived for one frame.  Never persisted between frames."""

    distance: float
    view_width: float
    view_height: float
    scale: float
    anchor_offset: Vec2
    placement_offset: Vec2
    bottom_left_adjustment: Vec2 = (0.0, 0.0)
    top_right_adjustment: Vec2 = (0.0, 0.0)
    position: Vec3 = (0.0, 0.0, 0.0)
    rotation: Quat = IDENTITY_QUAT
    local_scale: float = 1.0

    @property
    def adjustment(self) -> Vec2:
        return (self.top_right_adjustment[0] - self.bottom_left_adjustment[0],
                self.top_right_adjustment[1] - self.bottom_left_adjustment[1])

    def local_matrix(self) -> Matrix:
        return Compose(self.position, self.rotation, self.local_scale)


def view_depth(camera_position: Vec3, camera_direction: Vec3, point: Vec3) -> float:
    """Signed distance from the camera plane to ``point`` along the view axis."""
    return dot(sub(point, camera_position), normalize(camera_direction))


def view_size(distance: float, fov: float, aspect: float) -> Tuple[float, float]:
    """Visible (width, height) in world units at ``distance``; ``fov`` in radians."""
    height = 2.0 * math.tan(fov / 2.0) * distance
    return height * aspect, height


def font_scale(font_size: float, font_design_size: float, viewport_width: float,
               view_width: float) -> float:
    """World units per font design unit for ``font_size`` pixel glyphs."""
    factor = viewport_width / view_width
    return font_size / (factor * font_design_size)


def anchor_offset(box: Box, sphere: Sphere, horz: str = CENTER, vert: str = CENTER) -> Vec2:
    """Offset, in design units, that moves the anchor point to the origin.

    Vertical values are not negated: the upright flip turns font-space y
    over, so ``top`` pins the minimum y of the glyph box.  An empty box
    (no visible glyphs) anchors at the origin, where the mesh builder
    puts the background of empty text.
    """

    if box.is_empty():
        box = Box((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))

    if horz == LEFT:
        x = -box.min[0]
    elif horz == CENTER:
        x = -sphere.center[0]
    elif horz == RIGHT:
        x = -box.max[0]
    else:
        x = 0.0

    if vert == TOP:
        y = box.min[1]
    elif vert == CENTER:
        y = sphere.center[1]
    elif vert == BOTTOM:
        y = box.max[1]
    else:
        y = 0.0
    return x, y


def placement_offset(view_width: float, view_height: float,
                     position_horz: float = 50.0, position_vert: float = 50.0) -> Vec2:
    """Map 0-100 viewport percentages (0 = left/top) to view-plane offsets."""
    return (view_width * position_horz / 100.0 - view_width / 2.0,
            view_height / 2.0 - view_height * position_vert / 100.0)


def facing_rotation(parent_quaternion: Quat, camera_quaternion: Quat) -> Quat:
    """Local rotation that makes the text face the camera."""
    return quat_mul(quat_mul(quat_conjugate(parent_quaternion), camera_quaternion), UPRIGHT)


def clamp_adjustment(center: Vec2, size: Vec2, view_width: float,
                     view_height: float) -> Tuple[Vec2, Vec2]:
    """How far a footprint overflows the view, as (bottom_left, top_right).

    ``center`` and ``size`` describe the text footprint in camera view
    space, relative to the view axis.  Both results are <= 0; subtracting
    the first from the second gives the shift that brings the footprint
    back inside.  A footprint larger than the view is centred, so at most
    one of the two is non-zero per axis.
    """

    space = (max((view_width - size[0]) * 0.5, 0.0),
             max((view_height - size[1]) * 0.5, 0.0))
    bottom_left = (min(center[0] + space[0], 0.0),
                   min(center[1] + space[1], 0.0))
    top_right = (min(-center[0] + space[0], 0.0),
                 min(-center[1] + space[1], 0.0))
    return bottom_left, top_right


def _parent_scale(parent_world: Matrix) -> float:
    return mag((parent_world.get(0, 0), parent_world.get(1, 0), parent_world.get(2, 0)))


def solve_billboard(camera: Camera, viewport: Viewport, parent_world: Matrix,
                    box: Box, sphere: Sphere, config: BillboardConfig) -> BillboardState:
    """Compute the local transform of a camera facing text object."""

    if camera.fov <= 0:
        raise BillboardError(f"camera fov must be positive, got {camera.fov}")
    if viewport.width <= 0 or viewport.height <= 0:
        raise BillboardError(f"viewport must have positive size, got {viewport.width}x{viewport.height}")

    world_position = parent_world.position()
    try:
        parent_quat = parent_world.quaternion()
    except ValueError as exc:
        raise BillboardError(f"parent transform has no usable rotation: {exc}") from exc

    distance = view_depth(camera.position, camera.forward, world_position)
    if distance <= epsilon:
        raise BillboardError(f"text is at or behind the camera plane (depth {distance:.6g})")

    view_width, view_height = view_size(distance, camera.fov_radians, viewport.aspect)
    scl = font_scale(config.font_size, config.font_design_size, viewport.width, view_width)

    anchor = anchor_offset(box, sphere, config.anchor_horz, config.anchor_vert)
    placement = placement_offset(view_width, view_height,
                                 config.position_horz, config.position_vert)
    local = (anchor[0] * scl + placement[0], anchor[1] * scl + placement[1])

    bottom_left = top_right = (0.0, 0.0)
    if config.clamp and not box.is_empty():
        parent_view = camera.view_matrix.mul(world_position)
        box_center = box.center()
        box_size = box.size()
        # upright flip: font-space y maps to -y in the view plane
        center = (parent_view[0] + local[0] + box_center[0] * scl,
                  parent_view[1] + local[1] - box_center[1] * scl)
        bottom_left, top_right = clamp_adjustment(
            center, (box_size[0] * scl, box_size[1] * scl), view_width, view_height)
        local = (local[0] + top_right[0] - bottom_left[0],
                 local[1] + top_right[1] - bottom_left[1])

    # offsets live in the camera's view plane; express them in parent space
    to_parent = quat_mul(quat_conjugate(parent_quat), camera.quaternion)
    parent_scale = _parent_scale(parent_world)
    position = quat_rotate(to_parent, (local[0], local[1], 0.0))
    if parent_scale > epsilon:
        position = tuple(c / parent_scale for c in position)
        local_scale = scl / parent_scale
    else:
        local_scale = scl

    return BillboardState(
        distance=distance,
        view_width=view_width,
        view_height=view_height,
        scale=scl,
        anchor_offset=anchor,
        placement_offset=placement,
        bottom_left_adjustment=bottom_left,
        top_right_adjustment=top_right,
        position=position,
        rotation=facing_rotation(parent_quat, camera.quaternion),
        local_scale=local_scale,
    )


def solve_screen_space(box: Box, sphere: Sphere, config: BillboardConfig,
                       view_width: float, view_height: float,
                       factor: float) -> BillboardState:
    """Fixed overlay variant: no camera depth, no clamping.

    ``view_width``/``view_height`` are the viewport size in world units and
    ``factor`` the pixels per world unit, as reported by the renderer.
    """

    if factor <= 0:
        raise BillboardError(f"viewport factor must be positive, got {factor}")
    scl = (1.0 / factor) / config.font_design_size * config.font_size
    anchor = anchor_offset(box, sphere, config.anchor_horz, config.anchor_vert)
    placement = placement_offset(view_width, view_height,
                                 config.position_horz, config.position_vert)
    position = (anchor[0] * scl + placement[0], anchor[1] * scl + placement[1], 0.0)
    return BillboardState(
        distance=0.0,
        view_width=view_width,
        view_height=view_height,
        scale=scl,
        anchor_offset=anchor,
        placement_offset=placement,
        position=position,
        rotation=UPRIGHT,
        local_scale=scl,
    )
