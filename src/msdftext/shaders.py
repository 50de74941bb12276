"""GLSL sources for compositing MSDF text, backgrounds and borders.

The fragment shader decodes the negative UV markers written by
``msdftext.mesh``: when both UV components are negative the fragment
belongs to an auxiliary quad, and the marker value picks the region.
Region boundaries are generated from ``msdftext.mesh.Region`` so the
two sides cannot drift apart.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from msdftext.mesh import Region
from msdftext.style import to_rgba

GLSL_VERSION = "#version 330 core"

VERTEX_SHADER = GLSL_VERSION + """
in vec2 position;
in vec2 uv;

uniform mat4 projection;
uniform mat4 view;
uniform mat4 model;

out vec2 vUv;

void main() {
    vUv = uv;
    gl_Position = projection * view * model * vec4(position, 0.0, 1.0);
}
"""


def _region_constants() -> str:
    # lower bound of each region's marker range, e.g. BACKGROUND -> -2.0
    lines = []
    for region in Region:
        lines.append(f"const float R_{region.name} = {region.part_id - 1.0:.1f};")
    return "\n".join(lines)


FRAGMENT_SHADER = GLSL_VERSION + """
uniform vec4 textColor;
uniform vec4 backgroundColor;
uniform vec4 borderColor;
uniform float borderWidth;
uniform float borderRadius;
uniform float borderSmoothing;
uniform sampler2D map;

in vec2 vUv;
out vec4 fragColor;

""" + _region_constants() + """

// widen each region's capture range so edge pixels are not dropped
const float SIGMA = 0.5;

float borderSize() {
    return max(borderWidth, borderRadius);
}

float widthPct() {
    float size = borderSize();
    return size > 0.0 ? borderWidth / size : 0.0;
}

float radiusPct() {
    float size = borderSize();
    return size > 0.0 ? borderRadius / size : 0.0;
}

float median(float r, float g, float b) {
    return max(min(r, g), min(max(r, g), b));
}

// dist is 0 at the inner edge of the border quad and 1 at its outer edge
vec4 border(float dist) {
    vec4 empty = vec4(0.0);
    float outer = borderSmoothing > 0.0
        ? smoothstep(0.0, borderSmoothing, 1.0 - dist)
        : step(0.0, 1.0 - dist);
    float inner = borderSmoothing > 0.0
        ? smoothstep(1.0, 1.0 + borderSmoothing, dist + widthPct())
        : step(1.0, dist + widthPct());
    vec4 innerMix = mix(backgroundColor, borderColor, inner);
    return mix(empty, innerMix, outer);
}

// quarter circle arc; insideCorner is the corner of the unit square
// that touches the background
vec4 arc(vec2 p, vec2 insideCorner) {
    vec2 center = abs(insideCorner - 1.0 + radiusPct());
    vec2 cornerCenterDiff = abs(insideCorner - center);
    vec2 cornerPointDiff = abs(insideCorner - p);
    if (cornerCenterDiff.x <= cornerPointDiff.x && cornerCenterDiff.y <= cornerPointDiff.y) {
        return border(distance(p, center) + cornerCenterDiff.x);
    }
    // radius smaller than the border width: square off the corner
    return border(max(cornerPointDiff.x, cornerPointDiff.y));
}

// straight border against one edge of the unit square
vec4 line(vec2 p, vec2 edge) {
    float dist = 0.0;
    if (edge.x != 0.0) {
        dist = edge.x > 0.0 ? p.x : 1.0 - p.x;
    }
    if (edge.y != 0.0) {
        dist = edge.y > 0.0 ? p.y : 1.0 - p.y;
    }
    return border(dist);
}

bool inRegion(float lower) {
    return vUv.x >= lower - SIGMA && vUv.y >= lower - SIGMA;
}

void main() {
    if (vUv.x < 0.0 && vUv.y < 0.0) {
        if (inRegion(R_BACKGROUND)) {
            fragColor = backgroundColor;
        } else if (inRegion(R_TOP)) {
            fragColor = line(vUv - vec2(R_TOP), vec2(0.0, 1.0));
        } else if (inRegion(R_LEFT)) {
            fragColor = line(vUv - vec2(R_LEFT), vec2(-1.0, 0.0));
        } else if (inRegion(R_BOTTOM)) {
            fragColor = line(vUv - vec2(R_BOTTOM), vec2(0.0, -1.0));
        } else if (inRegion(R_RIGHT)) {
            fragColor = line(vUv - vec2(R_RIGHT), vec2(1.0, 0.0));
        } else if (inRegion(R_TOP_LEFT)) {
            fragColor = arc(vUv - vec2(R_TOP_LEFT), vec2(1.0, 0.0));
        } else if (inRegion(R_LEFT_BOTTOM)) {
            fragColor = arc(vUv - vec2(R_LEFT_BOTTOM), vec2(1.0, 1.0));
        } else if (inRegion(R_BOTTOM_RIGHT)) {
            fragColor = arc(vUv - vec2(R_BOTTOM_RIGHT), vec2(0.0, 1.0));
        } else {
            fragColor = arc(vUv - vec2(R_RIGHT_TOP), vec2(0.0, 0.0));
        }
    } else {
        vec3 msdf = texture(map, vUv).rgb;
        float sigDist = median(msdf.r, msdf.g, msdf.b) - 0.5;
        float alpha = clamp(sigDist / fwidth(sigDist) + 0.5, 0.0, 1.0);
        fragColor = vec4(textColor.rgb, textColor.a * alpha);
    }
}
"""


def region_lower_bound(region: Region) -> float:
    """Smallest UV marker value emitted for ``region``."""
    return region.part_id - 1.0


def decode_region(u: float, v: float, sigma: float = 0.5) -> Optional[Region]:
    """Python mirror of the fragment shader's region test.

    Returns ``None`` for real atlas coordinates.
    """

    if not (u < 0.0 and v < 0.0):
        return None
    for region in Region:
        lower = region_lower_bound(region)
        if u >= lower - sigma and v >= lower - sigma:
            return region
    return Region.RIGHT_TOP


def uniform_values(style, texture: Any = None) -> Dict[str, Any]:
    """Uniform values for a ``LabelStyle``.

    Border width and radius are passed in design units; the shader turns
    them into fractions of the border size itself.
    """

    values: Dict[str, Any] = {
        "textColor": to_rgba(style.text_color, style.text_alpha),
        "backgroundColor": to_rgba(style.background_color, style.background_alpha),
        "borderColor": to_rgba(style.border_color, style.border_alpha),
        "borderWidth": float(style.border_width),
        "borderRadius": float(style.border_radius),
        "borderSmoothing": float(style.border_smoothing),
    }
    if texture is not None:
        values["map"] = texture
    return values
