"""Quad mesh construction for MSDF text with background and borders.

Every glyph becomes one quad.  When a background and/or border is
requested, up to nine auxiliary quads are placed in front of the glyph
quads:

    [background, top, left, bottom, right,
     top-left, left-bottom, bottom-right, right-top]

The auxiliary quads carry no real texture coordinates.  Instead each of
their vertices gets a negative UV pair derived from the quad's region,

    part_id = region * -2 - 1          # -1, -3, -5, ...
    BL = (part_id - 1, part_id)        TL = (part_id - 1, part_id - 1)
    TR = (part_id,     part_id - 1)    BR = (part_id,     part_id)

so that a fragment whose UV components are both negative can tell which
region it belongs to, and where inside the unit square of that region it
sits, by subtracting ``part_id - 1``.  ``msdftext.shaders`` decodes
exactly this layout; change both together or not at all.

Corner quads are plain squares.  The rounded corner is carved in the
fragment stage from the distance to an arc keyed on
``border_radius / border_size``.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from functools import cached_property
from typing import Any, Callable, List, Optional, Sequence, Tuple

import numpy as np

from msdftext.bounds import Box, Sphere, bounds2d, compute_bounding_box, compute_bounding_sphere
from msdftext.layout import GlyphRect, get_glyphs

logger = logging.getLogger(__name__)

VERTS_PER_QUAD = 4
BORDER_QUADS = 8
UINT16_LIMIT = 1 << 16

# clockwise triangulation of BL, TL, TR, BR
QUAD_TRIANGLES = ((0, 1, 2), (0, 2, 3))


class Region(enum.IntEnum):
    """Auxiliary quad regions, in buffer order."""

    BACKGROUND = 0
    TOP = 1
    LEFT = 2
    BOTTOM = 3
    RIGHT = 4
    TOP_LEFT = 5
    LEFT_BOTTOM = 6
    BOTTOM_RIGHT = 7
    RIGHT_TOP = 8

    @property
    def part_id(self) -> float:
        return self.value * -2.0 - 1.0


BORDER_REGIONS = tuple(r for r in Region if r is not Region.BACKGROUND)


def extra_quad_count(has_background: bool, has_borders: bool) -> int:
    return (1 if has_background else 0) + (BORDER_QUADS if has_borders else 0)


def active_regions(has_background: bool, has_borders: bool) -> List[Region]:
    regions = [Region.BACKGROUND] if has_background else []
    if has_borders:
        regions.extend(BORDER_REGIONS)
    return regions


def border_size(box_width: float, box_height: float, border_radius: float = 0.0,
                border_width: float = 0.0, border_buffer: float = 0.0) -> float:
    """Border thickness, capped so opposing border quads never overlap."""

    max_border = min(box_width, box_height) / 2.0 + border_buffer
    radius = min(border_radius, max_border)
    width = min(border_width, max_border)
    return max(radius, width)


def _quad(x0: float, y0: float, x1: float, y1: float) -> List[Tuple[float, float]]:
    """BL, TL, TR, BR corners of the box (x0, y0)-(x1, y1)."""
    return [(x0, y0), (x0, y1), (x1, y1), (x1, y0)]


def glyph_positions(glyphs: Sequence[GlyphRect]) -> np.ndarray:
    """Vertex positions of the glyph quads, shape ``(n * 4, 2)``."""

    if not glyphs:
        return np.zeros((0, 2), dtype=np.float32)
    data = np.array([(g.position[0] + g.xoffset, g.position[1] + g.yoffset,
                      g.width, g.height) for g in glyphs], dtype=np.float64)
    x, y, w, h = data.T
    quads = np.stack([
        np.stack([x, y], axis=1),
        np.stack([x, y + h], axis=1),
        np.stack([x + w, y + h], axis=1),
        np.stack([x + w, y], axis=1),
    ], axis=1)
    return quads.reshape(-1, 2).astype(np.float32)


def glyph_uvs(glyphs: Sequence[GlyphRect], texture_width: float, texture_height: float,
              flip_y: bool = True) -> np.ndarray:
    """Atlas texture coordinates of the glyph quads, shape ``(n * 4, 2)``."""

    if not glyphs:
        return np.zeros((0, 2), dtype=np.float32)
    data = np.array([(g.x, g.y, g.width, g.height) for g in glyphs], dtype=np.float64)
    bx, by, bw, bh = data.T
    right = bx + bw
    bottom = by + bh

    u0 = bx / texture_width
    u1 = right / texture_width
    if flip_y:
        v1 = (texture_height - by) / texture_height
        v0 = (texture_height - bottom) / texture_height
    else:
        v1 = by / texture_height
        v0 = bottom / texture_height

    quads = np.stack([
        np.stack([u0, v1], axis=1),
        np.stack([u0, v0], axis=1),
        np.stack([u1, v0], axis=1),
        np.stack([u1, v1], axis=1),
    ], axis=1)
    return quads.reshape(-1, 2).astype(np.float32)


def sentinel_uvs(regions: Sequence[Region]) -> np.ndarray:
    """Negative marker UVs for the auxiliary quads, shape ``(n * 4, 2)``."""

    uvs = []
    for region in regions:
        p = region.part_id
        uvs.extend([(p - 1.0, p), (p - 1.0, p - 1.0), (p, p - 1.0), (p, p)])
    return np.array(uvs, dtype=np.float32).reshape(-1, 2)


def auxiliary_positions(box: Tuple[Tuple[float, float], Tuple[float, float]],
                        has_background: bool, has_borders: bool,
                        border_radius: float = 0.0, border_width: float = 0.0,
                        border_buffer: float = 0.0) -> np.ndarray:
    """Background and border quads around the glyph box ``((x0, y0), (x1, y1))``."""

    (x0, y0), (x1, y1) = box
    size = border_size(x1 - x0, y1 - y0, border_radius, border_width, border_buffer)
    offset = border_buffer - size

    # background and border box share the same outline
    bx0, by0 = x0 - offset, y0 - offset
    bx1, by1 = x1 + offset, y1 + offset

    verts: List[Tuple[float, float]] = []
    if has_background:
        verts += _quad(bx0, by0, bx1, by1)
    if has_borders:
        verts += _quad(bx0, by0 - size, bx1, by0)              # top
        verts += _quad(bx0 - size, by0, bx0, by1)              # left
        verts += _quad(bx0, by1, bx1, by1 + size)              # bottom
        verts += _quad(bx1, by0, bx1 + size, by1)              # right
        verts += _quad(bx0 - size, by0 - size, bx0, by0)       # top/left
        verts += _quad(bx0 - size, by1, bx0, by1 + size)       # left/bottom
        verts += _quad(bx1, by1, bx1 + size, by1 + size)       # bottom/right
        verts += _quad(bx1, by0 - size, bx1 + size, by0)       # right/top
    return np.array(verts, dtype=np.float32).reshape(-1, 2)


def quad_indices(quad_count: int) -> np.ndarray:
    """Triangle indices for ``quad_count`` quads, shape ``(quad_count * 2, 3)``."""

    dtype = np.uint16 if quad_count * VERTS_PER_QUAD <= UINT16_LIMIT else np.uint32
    base = np.arange(quad_count, dtype=np.int64) * VERTS_PER_QUAD
    tri = np.array(QUAD_TRIANGLES, dtype=np.int64)
    indices = base[:, None, None] + tri[None, :, :]
    return indices.reshape(-1, 3).astype(dtype)


def glyph_pages(glyphs: Sequence[GlyphRect], extra_quads: int = 0) -> np.ndarray:
    """Per-vertex atlas page ids; auxiliary quads use page 0."""

    pages = [0.0] * extra_quads + [float(g.page or 0) for g in glyphs]
    return np.repeat(np.array(pages, dtype=np.float32), VERTS_PER_QUAD)


@dataclass(eq=False)
class TextMesh:
    """Indexed quad mesh for a block of text.

    ``positions`` and ``uvs`` have shape ``(vertex_count, 2)``, ``indices``
    has shape ``(triangle_count, 3)``.  Auxiliary quads occupy the first
    ``extra_quads * 4`` vertices.
    """

    positions: np.ndarray
    uvs: np.ndarray
    indices: np.ndarray
    pages: np.ndarray
    glyph_count: int
    has_background: bool = False
    has_borders: bool = False

    @property
    def extra_quads(self) -> int:
        return extra_quad_count(self.has_background, self.has_borders)

    @property
    def quad_count(self) -> int:
        return self.glyph_count + self.extra_quads

    @property
    def vertex_count(self) -> int:
        return self.positions.shape[0]

    @property
    def glyph_slice(self) -> slice:
        return slice(self.extra_quads * VERTS_PER_QUAD, None)

    @property
    def glyph_positions(self) -> np.ndarray:
        return self.positions[self.glyph_slice]

    def region_positions(self, region: Region) -> np.ndarray:
        """The four vertices of an auxiliary quad."""
        regions = active_regions(self.has_background, self.has_borders)
        if region not in regions:
            raise ValueError(f"mesh has no {region.name.lower()} quad")
        i = regions.index(region) * VERTS_PER_QUAD
        return self.positions[i:i + VERTS_PER_QUAD]

    @cached_property
    def bounding_box(self) -> Box:
        return compute_bounding_box(self.glyph_positions)

    @cached_property
    def bounding_sphere(self) -> Sphere:
        return compute_bounding_sphere(self.glyph_positions)


def build_text_mesh(glyphs: Sequence[GlyphRect], texture_width: float, texture_height: float,
                    flip_y: bool = True, has_background: bool = False,
                    has_borders: bool = False, border_radius: float = 0.0,
                    border_width: float = 0.0, border_buffer: float = 0.0) -> TextMesh:
    """Build the quad mesh for already laid out ``glyphs``.

    Pure: the same arguments always give byte-identical buffers.
    """

    glyphs = list(glyphs)
    extras = extra_quad_count(has_background, has_borders)

    text_pos = glyph_positions(glyphs)
    text_uv = glyph_uvs(glyphs, texture_width, texture_height, flip_y)

    if extras:
        if len(text_pos):
            box = bounds2d(text_pos)
        else:
            box = ((0.0, 0.0), (0.0, 0.0))
        aux_pos = auxiliary_positions(box, has_background, has_borders,
                                      border_radius, border_width, border_buffer)
        aux_uv = sentinel_uvs(active_regions(has_background, has_borders))
        positions = np.concatenate([aux_pos, text_pos])
        uvs = np.concatenate([aux_uv, text_uv])
    else:
        positions = text_pos
        uvs = text_uv

    return TextMesh(
        positions=positions,
        uvs=uvs,
        indices=quad_indices(len(glyphs) + extras),
        pages=glyph_pages(glyphs, extras),
        glyph_count=len(glyphs),
        has_background=has_background,
        has_borders=has_borders,
    )


LayoutService = Callable[..., Sequence[GlyphRect]]


class TextMeshBuilder:
    """Builds text meshes and reuses the last one while inputs are unchanged.

    ``layout`` is the glyph layout service; it is called as
    ``layout(font, text, width, align, line_height, letter_spacing,
    tab_size, mode, start, end)`` and must return visible glyphs only.
    """

    def __init__(self, layout: LayoutService = get_glyphs):
        self.layout = layout
        self._font: Any = None
        self._key: Optional[Tuple[Any, ...]] = None
        self._mesh: Optional[TextMesh] = None
        self.builds = 0

    def invalidate(self) -> None:
        self._font = None
        self._key = None
        self._mesh = None

    @property
    def mesh(self) -> Optional[TextMesh]:
        return self._mesh

    def build(self, font, text: str, width: Optional[float] = None,
              align: Optional[str] = None, line_height: Optional[float] = None,
              letter_spacing: Optional[float] = None, tab_size: Optional[float] = None,
              mode: Optional[str] = None, start: Optional[int] = None,
              end: Optional[int] = None, flip_y: bool = True,
              has_background: bool = False, has_borders: bool = False,
              border_radius: float = 0.0, border_width: float = 0.0,
              border_buffer: float = 0.0) -> TextMesh:
        key = (text, width, align, line_height, letter_spacing, tab_size, mode,
               start, end, flip_y, has_background, has_borders,
               border_radius, border_width, border_buffer)
        if self._mesh is not None and font is self._font and key == self._key:
            return self._mesh

        glyphs = self.layout(font, text, width, align, line_height,
                             letter_spacing, tab_size, mode, start, end)
        tex_w, tex_h = font.texture_size
        mesh = build_text_mesh(glyphs, tex_w, tex_h, flip_y, has_background,
                               has_borders, border_radius, border_width, border_buffer)
        self._font = font
        self._key = key
        self._mesh = mesh
        self.builds += 1
        logger.debug("built text mesh: %d glyphs, %d auxiliary quads",
                     mesh.glyph_count, mesh.extra_quads)
        return mesh
