"""Label appearance and placement settings, loadable from YAML."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from msdftext.billboard import (
    BOTTOM, CENTER, HORIZONTAL_ANCHORS, LEFT, NONE, RIGHT, TOP, VERTICAL_ANCHORS,
)
from msdftext.layout import ALIGNMENTS, MODES

Color = Union[int, str, Sequence[float]]
RGBA = Tuple[float, float, float, float]

_HEX_RE = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def to_rgba(color: Color, alpha: float = 1.0) -> RGBA:
    """Convert ``0xRRGGBB``, ``"#rrggbb"``, ``"#rgb"`` or an RGB triple to RGBA floats."""

    if isinstance(color, bool):
        raise ValueError(f"bad color: {color!r}")
    if isinstance(color, int):
        if color < 0 or color > 0xFFFFFF:
            raise ValueError(f"color out of range: {color:#x}")
        r, g, b = (color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF
        rgb = (r / 255.0, g / 255.0, b / 255.0)
    elif isinstance(color, str):
        match = _HEX_RE.match(color.strip())
        if not match:
            raise ValueError(f"bad color string: {color!r}")
        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        return to_rgba(int(digits, 16), alpha)
    else:
        values = tuple(float(c) for c in color)
        if len(values) == 4:
            values, alpha = values[:3], values[3]
        if len(values) != 3 or any(c < 0.0 or c > 1.0 for c in values):
            raise ValueError(f"bad color: {color!r}")
        rgb = values
    return rgb[0], rgb[1], rgb[2], float(alpha)


@dataclass
class LabelStyle:
    """Everything about a label except its text and font.

    ``width`` is the wrap width as a percentage of the viewport width.
    ``position_horz``/``position_vert`` place the anchor point at a
    percentage of the viewport (0 = left/top).
    """

    width: float = 100.0
    alignment: str = CENTER
    text_color: Color = 0x000000
    text_alpha: float = 1.0
    background_color: Color = 0x000000
    background_alpha: float = 0.0
    border_color: Color = 0x000000
    border_alpha: float = 0.0
    border_width: float = 0.0
    border_smoothing: float = 0.0
    border_radius: float = 0.0
    border_buffer: float = 0.0
    font_size: float = 12.0
    anchor_vert: str = CENTER
    anchor_horz: str = CENTER
    position_vert: float = 50.0
    position_horz: float = 50.0
    depth_test: bool = True
    clamp: bool = True
    line_height: Optional[float] = None
    letter_spacing: Optional[float] = None
    tab_size: Optional[float] = None
    mode: Optional[str] = None
    flip_y: bool = True
    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if self.alignment not in ALIGNMENTS:
            raise ValueError(f"alignment must be one of {ALIGNMENTS}, got {self.alignment!r}")
        if self.anchor_horz not in HORIZONTAL_ANCHORS:
            raise ValueError(f"anchor_horz must be one of {HORIZONTAL_ANCHORS}, got {self.anchor_horz!r}")
        if self.anchor_vert not in VERTICAL_ANCHORS:
            raise ValueError(f"anchor_vert must be one of {VERTICAL_ANCHORS}, got {self.anchor_vert!r}")
        if self.mode is not None and self.mode not in MODES:
            raise ValueError(f"mode must be one of {MODES}, got {self.mode!r}")
        for name in ("border_width", "border_radius", "border_buffer", "border_smoothing"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative")
        for name in ("text_alpha", "background_alpha", "border_alpha", "border_smoothing"):
            value = getattr(self, name)
            if value < 0.0 or value > 1.0:
                raise ValueError(f"{name} must be between 0 and 1, got {value}")
        if self.font_size <= 0:
            raise ValueError("font_size must be positive")

    @property
    def has_background(self) -> bool:
        return self.background_alpha > 0

    @property
    def has_borders(self) -> bool:
        return self.border_radius > 0 or self.border_width > 0


_FIELD_NAMES = {f.name for f in fields(LabelStyle)} - {"extra"}


def _snake(key: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


def style_from_dict(data: Dict[str, Any]) -> LabelStyle:
    """Build a ``LabelStyle`` from camelCase or snake_case keys.

    Unknown keys are kept in ``extra``.
    """

    if not isinstance(data, dict):
        raise ValueError(f"label style must be a mapping, got {type(data)!r}")
    known: Dict[str, Any] = {}
    extra: Dict[str, Any] = {}
    for key, value in data.items():
        name = _snake(str(key))
        if name in _FIELD_NAMES:
            known[name] = value
        else:
            extra[key] = value
    return LabelStyle(extra=extra, **known)


def load_style(path: Path | str) -> LabelStyle:
    """Load a YAML label style file."""

    style_path = Path(path)
    if not style_path.exists():
        raise FileNotFoundError(f"label style not found: {style_path}")
    import yaml

    with style_path.open("r", encoding="utf-8") as fp:
        data = yaml.safe_load(fp) or {}
    return style_from_dict(data)


__all__ = [
    "LabelStyle", "load_style", "style_from_dict", "to_rgba",
    "TOP", "BOTTOM", "LEFT", "RIGHT", "CENTER", "NONE",
]
