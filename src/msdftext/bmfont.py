"""BMFont metadata for MSDF font atlases.

Fonts are described by the JSON flavour of the AngelCode BMFont format
emitted by ``msdf-bmfont-xml`` and friends.  Only the parts needed for
layout and UV mapping are modelled: the design size the atlas was
authored at, the atlas page size, per-glyph rectangles and the optional
kerning table.

Example usage:

    from msdftext.bmfont import load_font

    font = load_font("fonts/roboto/regular.json")
    font.design_size          # e.g. 42
    font.glyph(ord("A"))      # Glyph(...)
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

logger = logging.getLogger(__name__)

SPACE_ID = ord(" ")
TAB_ID = ord("\t")

X_HEIGHT_CHARS = "xeaonsrcuvwz"
CAP_HEIGHT_CHARS = "HIEFKLMNTVWXYZ"


class FontError(ValueError):
    """Raised when font metadata is missing required fields."""


@dataclass(frozen=True)
class Glyph:
    """Atlas rectangle and metrics for a single character."""

    id: int
    x: float
    y: float
    width: float
    height: float
    xoffset: float = 0.0
    yoffset: float = 0.0
    xadvance: float = 0.0
    page: int = 0

    @property
    def area(self) -> float:
        return self.width * self.height


@dataclass
class BMFont:
    """Parsed BMFont description."""

    face: str
    size: float
    line_height: float
    base: float
    scale_w: int
    scale_h: int
    glyphs: Dict[int, Glyph] = field(default_factory=dict)
    kernings: Dict[Tuple[int, int], float] = field(default_factory=dict)
    pages: List[str] = field(default_factory=list)
    source: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], source: Optional[str] = None) -> "BMFont":
        if not isinstance(data, Mapping):
            raise FontError(f"font data must be a mapping, got {type(data)!r}")

        missing = [key for key in ("info", "common", "chars") if key not in data]
        if missing:
            raise FontError(f"font data missing required keys: {', '.join(missing)}")

        info = data["info"] or {}
        common = data["common"] or {}
        for section, keys in (("info", ("size",)),
                              ("common", ("lineHeight", "base", "scaleW", "scaleH"))):
            block = info if section == "info" else common
            absent = [k for k in keys if k not in block]
            if absent:
                raise FontError(f"font {section} block missing keys: {', '.join(absent)}")

        glyphs: Dict[int, Glyph] = {}
        for raw in data["chars"] or []:
            try:
                glyph = Glyph(
                    id=int(raw["id"]),
                    x=float(raw["x"]),
                    y=float(raw["y"]),
                    width=float(raw["width"]),
                    height=float(raw["height"]),
                    xoffset=float(raw.get("xoffset", 0)),
                    yoffset=float(raw.get("yoffset", 0)),
                    xadvance=float(raw.get("xadvance", 0)),
                    page=int(raw.get("page", 0) or 0),
                )
            except KeyError as exc:
                raise FontError(f"glyph entry missing key {exc.args[0]!r}: {raw!r}") from exc
            glyphs[glyph.id] = glyph

        kernings: Dict[Tuple[int, int], float] = {}
        for raw in data.get("kernings", []) or []:
            pair = (int(raw["first"]), int(raw["second"]))
            kernings[pair] = float(raw["amount"])

        return cls(
            face=str(info.get("face", "")),
            size=float(info["size"]),
            line_height=float(common["lineHeight"]),
            base=float(common["base"]),
            scale_w=int(common["scaleW"]),
            scale_h=int(common["scaleH"]),
            glyphs=glyphs,
            kernings=kernings,
            pages=list(data.get("pages", []) or []),
            source=source,
        )

    @property
    def design_size(self) -> float:
        """The em size the atlas was rendered at."""
        return self.size

    @property
    def texture_size(self) -> Tuple[int, int]:
        return self.scale_w, self.scale_h

    def glyph(self, char_id: int) -> Optional[Glyph]:
        return self.glyphs.get(char_id)

    def first_glyph(self, chars: str) -> Optional[Glyph]:
        for ch in chars:
            glyph = self.glyphs.get(ord(ch))
            if glyph is not None:
                return glyph
        return None

    def kerning(self, left: int, right: int) -> float:
        return self.kernings.get((left, right), 0.0)

    @property
    def x_height(self) -> float:
        glyph = self.first_glyph(X_HEIGHT_CHARS)
        return glyph.height if glyph else 0.0

    @property
    def cap_height(self) -> float:
        glyph = self.first_glyph(CAP_HEIGHT_CHARS)
        return glyph.height if glyph else 0.0


def load_font(path: Path | str) -> BMFont:
    """Load a BMFont JSON file and return the parsed ``BMFont``."""

    font_path = Path(path)
    if not font_path.exists():
        raise FileNotFoundError(f"font file not found: {font_path}")
    with font_path.open("r", encoding="utf-8") as fp:
        try:
            data = json.load(fp)
        except json.JSONDecodeError as exc:
            raise FontError(f"font file is not valid JSON: {font_path}") from exc
    font = BMFont.from_dict(data, source=str(font_path))
    logger.debug("loaded font %s (%d glyphs, size %s)", font_path, len(font.glyphs), font.size)
    return font
