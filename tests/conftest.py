import pytest

from msdftext.bmfont import BMFont


def _char(ch, x, y, w, h, xoffset, yoffset, xadvance, page=0):
    return {"id": ord(ch), "x": x, "y": y, "width": w, "height": h,
            "xoffset": xoffset, "yoffset": yoffset, "xadvance": xadvance,
            "page": page}


FONT_DATA = {
    "pages": ["test.png"],
    "info": {"face": "Test", "size": 42},
    "common": {"lineHeight": 50, "base": 40, "scaleW": 256, "scaleH": 256},
    "chars": [
        _char(" ", 0, 0, 0, 0, 0, 0, 10),
        _char("A", 0, 0, 20, 30, 1, 5, 22),
        _char("H", 20, 0, 18, 30, 2, 5, 22),
        _char("i", 40, 0, 6, 30, 1, 5, 8),
        _char("V", 50, 0, 20, 30, 0, 5, 20),
        _char("x", 70, 0, 14, 20, 1, 15, 16),
    ],
    "kernings": [
        {"first": ord("A"), "second": ord("V"), "amount": -3},
    ],
}


@pytest.fixture
def font_data():
    return {key: (list(value) if isinstance(value, list) else dict(value))
            for key, value in FONT_DATA.items()}


@pytest.fixture
def font(font_data):
    return BMFont.from_dict(font_data)
