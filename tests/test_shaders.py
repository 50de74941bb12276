from msdftext.mesh import Region
from msdftext.shaders import (
    FRAGMENT_SHADER, GLSL_VERSION, VERTEX_SHADER, decode_region, region_lower_bound,
    uniform_values,
)
from msdftext.style import LabelStyle


def test_sources():
    assert VERTEX_SHADER.startswith(GLSL_VERSION)
    assert FRAGMENT_SHADER.startswith(GLSL_VERSION)
    for name in ("position", "uv", "projection", "view", "model"):
        assert name in VERTEX_SHADER
    for name in ("textColor", "backgroundColor", "borderColor", "borderWidth",
                 "borderRadius", "borderSmoothing", "map"):
        assert name in FRAGMENT_SHADER


def test_region_constants_match_mesh():
    assert "const float R_BACKGROUND = -2.0;" in FRAGMENT_SHADER
    assert "const float R_TOP = -4.0;" in FRAGMENT_SHADER
    assert "const float R_RIGHT_TOP = -18.0;" in FRAGMENT_SHADER
    for region in Region:
        assert f"R_{region.name} = {region_lower_bound(region):.1f};" in FRAGMENT_SHADER


def test_decode_region():
    assert decode_region(0.25, 0.75) is None
    assert decode_region(-0.5, 0.5) is None
    assert decode_region(-1.5, -1.5) is Region.BACKGROUND
    assert decode_region(-3.5, -3.2) is Region.TOP
    assert decode_region(-17.5, -17.9) is Region.RIGHT_TOP


def test_uniform_values():
    style = LabelStyle(text_color="#ff0000", background_color=0x00ff00, background_alpha=0.5,
                       border_color=(0.0, 0.0, 1.0), border_alpha=1.0, border_width=2,
                       border_radius=4, border_smoothing=0.1)
    values = uniform_values(style)
    assert values["textColor"] == (1.0, 0.0, 0.0, 1.0)
    assert values["backgroundColor"] == (0.0, 1.0, 0.0, 0.5)
    assert values["borderColor"] == (0.0, 0.0, 1.0, 1.0)
    assert values["borderWidth"] == 2.0
    assert values["borderRadius"] == 4.0
    assert values["borderSmoothing"] == 0.1
    assert "map" not in values
    assert uniform_values(style, texture=7)["map"] == 7
