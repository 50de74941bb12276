"""A text label: font, text and style bound to a cached mesh and a billboard."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from msdftext.billboard import (
    BillboardConfig, BillboardError, BillboardState, Camera, Viewport, solve_billboard,
)
from msdftext.bmfont import BMFont
from msdftext.mesh import TextMesh, TextMeshBuilder
from msdftext.shaders import uniform_values
from msdftext.style import LabelStyle
from msdftext.xform import Matrix

logger = logging.getLogger(__name__)


class TextLabel:
    """Displays ``text`` in ``font`` with an optional background and border.

    The mesh is rebuilt only when the text, style or wrap width change.
    Call ``update`` once per frame to recompute the camera-facing
    transform.
    """

    def __init__(self, font: BMFont, text: str = "", style: Optional[LabelStyle] = None,
                 builder: Optional[TextMeshBuilder] = None):
        self.font = font
        self.text = text
        self.style = style if style is not None else LabelStyle()
        self.builder = builder if builder is not None else TextMeshBuilder()
        self.state: Optional[BillboardState] = None

    def __repr__(self):
        return f"TextLabel(text={self.text!r}, font={self.font.face!r}, font_size={self.style.font_size})"

    def wrap_width(self, viewport_width: float) -> float:
        """Wrap width in design units for a viewport ``viewport_width`` pixels wide."""
        style = self.style
        text_width = (viewport_width * self.font.design_size * (1.0 / style.font_size)
                      * style.width / 100.0)
        return text_width - style.border_buffer * 2.0

    def geometry(self, viewport_width: float) -> TextMesh:
        style = self.style
        return self.builder.build(
            self.font,
            self.text,
            width=self.wrap_width(viewport_width),
            align=style.alignment,
            line_height=style.line_height,
            letter_spacing=style.letter_spacing,
            tab_size=style.tab_size,
            mode=style.mode,
            flip_y=style.flip_y,
            has_background=style.has_background,
            has_borders=style.has_borders,
            border_radius=style.border_radius,
            border_width=style.border_width,
            border_buffer=style.border_buffer,
        )

    def billboard_config(self) -> BillboardConfig:
        style = self.style
        return BillboardConfig(
            font_size=style.font_size,
            font_design_size=self.font.design_size,
            anchor_horz=style.anchor_horz,
            anchor_vert=style.anchor_vert,
            position_horz=style.position_horz,
            position_vert=style.position_vert,
            clamp=style.clamp,
        )

    def uniforms(self, texture: Any = None) -> Dict[str, Any]:
        return uniform_values(self.style, texture)

    def update(self, camera: Camera, viewport: Viewport,
               parent_world: Optional[Matrix] = None) -> Optional[BillboardState]:
        """Recompute the transform for this frame.

        Returns ``None`` and keeps the previous state when the camera
        cannot see the label plane.
        """

        if parent_world is None:
            parent_world = Matrix()
        mesh = self.geometry(viewport.width)
        try:
            state = solve_billboard(camera, viewport, parent_world, mesh.bounding_box,
                                    mesh.bounding_sphere, self.billboard_config())
        except BillboardError as exc:
            logger.debug("skipping billboard update for %r: %s", self, exc)
            return None
        self.state = state
        return state

    def model_matrix(self, parent_world: Optional[Matrix] = None) -> Matrix:
        """World matrix of the text mesh from the last successful update."""
        if parent_world is None:
            parent_world = Matrix()
        if self.state is None:
            return parent_world
        return parent_world.mul(self.state.local_matrix())
