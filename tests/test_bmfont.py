import json

import pytest

from msdftext.bmfont import BMFont, FontError, Glyph, load_font


class TestBMFont:
    """unit tests for BMFont metadata parsing"""

    def test_metrics(self, font):
        assert font.design_size == 42
        assert font.texture_size == (256, 256)
        assert font.line_height == 50
        assert font.base == 40
        assert font.face == "Test"
        assert font.pages == ["test.png"]

    def test_glyph_lookup(self, font):
        a = font.glyph(ord("A"))
        assert isinstance(a, Glyph)
        assert (a.x, a.y, a.width, a.height) == (0, 0, 20, 30)
        assert a.area == 600
        assert font.glyph(ord("?")) is None

    def test_kerning(self, font):
        assert font.kerning(ord("A"), ord("V")) == -3
        assert font.kerning(ord("V"), ord("A")) == 0

    def test_x_and_cap_height(self, font):
        assert font.x_height == 20
        assert font.cap_height == 30

    def test_missing_sections(self, font_data):
        del font_data["common"]
        with pytest.raises(FontError):
            BMFont.from_dict(font_data)

    def test_missing_common_key(self, font_data):
        font_data["common"] = {"lineHeight": 50, "base": 40}
        with pytest.raises(FontError, match="scaleW"):
            BMFont.from_dict(font_data)

    def test_bad_glyph_entry(self, font_data):
        font_data["chars"] = [{"id": 65, "x": 0}]
        with pytest.raises(FontError):
            BMFont.from_dict(font_data)

    def test_not_a_mapping(self):
        with pytest.raises(ValueError):
            BMFont.from_dict([1, 2, 3])


def test_load_font(tmp_path, font_data):
    path = tmp_path / "test.json"
    path.write_text(json.dumps(font_data), encoding="utf-8")
    font = load_font(path)
    assert font.source == str(path)
    assert len(font.glyphs) == len(font_data["chars"])


def test_load_font_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_font(tmp_path / "nope.json")


def test_load_font_bad_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(FontError):
        load_font(path)
