## OpenGL rendering of msdfText labels using the pyglet package

"""pyglet adapter and demo viewer for msdfText labels.

``TextRenderer`` compiles the MSDF shaders, uploads ``TextMesh`` buffers
as indexed vertex lists and draws labels with their billboard transform.
``main`` opens a window with a few sample labels:

    python -m msdftext.viewer --font roboto.json --texture roboto.png
"""

from __future__ import annotations

import argparse
import logging
import math
import weakref
from typing import List, Optional, Sequence

import pyglet
from pyglet import gl
from pyglet.graphics.shader import Shader, ShaderProgram

from msdftext.billboard import Camera, Viewport
from msdftext.bmfont import load_font
from msdftext.label import TextLabel
from msdftext.mesh import TextMesh
from msdftext.shaders import FRAGMENT_SHADER, VERTEX_SHADER
from msdftext.style import LabelStyle
from msdftext.xform import Matrix

logger = logging.getLogger(__name__)


def perspective(fov: float, aspect: float, near: float = 0.1, far: float = 1000.0) -> Matrix:
    """OpenGL perspective projection; ``fov`` is vertical, in degrees."""
    f = 1.0 / math.tan(math.radians(fov) / 2.0)
    return Matrix([[f / aspect, 0.0, 0.0, 0.0],
                   [0.0, f, 0.0, 0.0],
                   [0.0, 0.0, (far + near) / (near - far), 2.0 * far * near / (near - far)],
                   [0.0, 0.0, -1.0, 0.0]])


class TextRenderer:
    """Draws ``TextLabel`` objects with a shared shader program and atlas texture."""

    def __init__(self, texture):
        self.program = ShaderProgram(Shader(VERTEX_SHADER, "vertex"),
                                     Shader(FRAGMENT_SHADER, "fragment"))
        self.texture = texture
        # label -> (mesh, vertex list, finalizer); entries die with their label
        self._uploaded: weakref.WeakKeyDictionary = weakref.WeakKeyDictionary()

    def _vertex_list(self, label: TextLabel, mesh: TextMesh):
        cached = self._uploaded.get(label)
        if cached is not None and cached[0] is mesh:
            return cached[1]
        if cached is not None:
            cached[2]()
        vlist = self.program.vertex_list_indexed(
            mesh.vertex_count, gl.GL_TRIANGLES, mesh.indices.ravel().tolist(),
            position=("f", mesh.positions.ravel().tolist()),
            uv=("f", mesh.uvs.ravel().tolist()),
        )
        # free the GPU allocation once the label is garbage collected
        self._uploaded[label] = (mesh, vlist, weakref.finalize(label, vlist.delete))
        logger.debug("uploaded %d vertices for %r", mesh.vertex_count, label)
        return vlist

    def release(self, label: TextLabel) -> None:
        """Drop the uploaded geometry of ``label``, if any."""
        cached = self._uploaded.pop(label, None)
        if cached is not None:
            cached[2]()

    @property
    def uploaded_count(self) -> int:
        return len(self._uploaded)

    def draw(self, label: TextLabel, camera: Camera, viewport: Viewport,
             parent_world: Optional[Matrix] = None) -> None:
        mesh = label.geometry(viewport.width)
        if mesh.vertex_count == 0 or label.update(camera, viewport, parent_world) is None:
            return

        vlist = self._vertex_list(label, mesh)
        program = self.program
        program.use()
        program["projection"] = perspective(camera.fov, viewport.aspect).column_major()
        program["view"] = camera.view_matrix.column_major()
        program["model"] = label.model_matrix(parent_world).column_major()
        for name, value in label.uniforms().items():
            program[name] = value
        program["map"] = 0

        if label.style.depth_test:
            gl.glEnable(gl.GL_DEPTH_TEST)
        else:
            gl.glDisable(gl.GL_DEPTH_TEST)
        gl.glActiveTexture(gl.GL_TEXTURE0)
        gl.glBindTexture(self.texture.target, self.texture.id)
        vlist.draw(gl.GL_TRIANGLES)
        program.stop()

    def delete(self) -> None:
        for _, _, finalizer in list(self._uploaded.values()):
            finalizer()
        self._uploaded.clear()


def demo_labels(font, text: str) -> List[TextLabel]:
    """Three stacked labels of increasing size, with rounded borders."""
    common = dict(border_buffer=20, border_radius=20, border_width=10,
                  border_color="#0000ff", border_alpha=1.0, border_smoothing=0.1,
                  background_color="#add8e6")
    return [
        TextLabel(font, text, LabelStyle(font_size=10, position_vert=40, **common)),
        TextLabel(font, text, LabelStyle(font_size=15, background_alpha=0.5, **common)),
        TextLabel(font, text, LabelStyle(font_size=20, background_alpha=0.5,
                                         position_vert=60, **common)),
    ]


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Display MSDF text labels")
    parser.add_argument("--font", required=True, help="BMFont JSON file")
    parser.add_argument("--texture", required=True, help="MSDF atlas image")
    parser.add_argument("--text", default="Hello World!")
    parser.add_argument("--fov", type=float, default=75.0)
    parser.add_argument("--distance", type=float, default=5.0)
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    font = load_font(args.font)
    window = pyglet.window.Window(width=1024, height=768, resizable=True,
                                  caption="msdfText")
    texture = pyglet.image.load(args.texture).get_texture()
    renderer = TextRenderer(texture)
    labels = demo_labels(font, args.text)
    camera = Camera(position=(0.0, 0.0, args.distance), fov=args.fov)

    gl.glEnable(gl.GL_BLEND)
    gl.glBlendFunc(gl.GL_SRC_ALPHA, gl.GL_ONE_MINUS_SRC_ALPHA)

    @window.event
    def on_draw():
        window.clear()
        viewport = Viewport(window.width, window.height)
        for label in labels:
            renderer.draw(label, camera, viewport)

    @window.event
    def on_close():
        renderer.delete()

    pyglet.app.run()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
