"""Glyph layout for BMFont atlases.

Turns a string into positioned glyph rectangles: greedy word wrapping
(or no wrapping, or preformatted lines), per-line alignment, kerning,
letter spacing and tab expansion.  The output is consumed by
``msdftext.mesh`` which only needs the atlas rectangle and the pen
position of each visible glyph.

Lines are stacked top-down in font space starting at ``y = -height``,
so y grows toward the last line.  The billboard solver flips the mesh
upright when it is placed in the scene.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import List, NamedTuple, Optional, Sequence, Tuple

from msdftext.bmfont import BMFont, Glyph, SPACE_ID, TAB_ID

ALIGN_LEFT = "left"
ALIGN_CENTER = "center"
ALIGN_RIGHT = "right"
ALIGNMENTS = (ALIGN_LEFT, ALIGN_CENTER, ALIGN_RIGHT)

MODE_NORMAL = "normal"
MODE_NOWRAP = "nowrap"
MODE_PRE = "pre"
MODES = (MODE_NORMAL, MODE_NOWRAP, MODE_PRE)

DEFAULT_TAB_SIZE = 4
NEWLINE = "\n"


@dataclass(frozen=True)
class GlyphRect:
    """A glyph placed by the layout: atlas rectangle plus pen position."""

    glyph: Glyph
    position: Tuple[float, float]
    index: int = 0
    line: int = 0

    @property
    def x(self) -> float:
        return self.glyph.x

    @property
    def y(self) -> float:
        return self.glyph.y

    @property
    def width(self) -> float:
        return self.glyph.width

    @property
    def height(self) -> float:
        return self.glyph.height

    @property
    def xoffset(self) -> float:
        return self.glyph.xoffset

    @property
    def yoffset(self) -> float:
        return self.glyph.yoffset

    @property
    def page(self) -> int:
        return self.glyph.page

    @property
    def area(self) -> float:
        return self.glyph.area


class Line(NamedTuple):
    start: int
    end: int
    width: float


@dataclass(frozen=True)
class TextLayout:
    """Result of a layout pass."""

    glyphs: Tuple[GlyphRect, ...]
    width: float
    height: float
    line_count: int
    line_height: float
    baseline: float
    descender: float


class _Measurer:
    """Measures runs of text against a font, with space/tab fallbacks."""

    def __init__(self, font: BMFont, letter_spacing: float, tab_size: float):
        self.font = font
        self.letter_spacing = letter_spacing
        self.space = None
        self.tab = None
        if font.glyphs:
            space = font.glyph(SPACE_ID)
            if space is None:
                # borrow an advance but never draw the borrowed bitmap
                donor = font.glyph(ord("m")) or next(iter(font.glyphs.values()))
                space = replace(donor, id=SPACE_ID, x=0.0, y=0.0, width=0.0,
                                height=0.0, xoffset=0.0, yoffset=0.0)
            self.space = space
            self.tab = replace(space, id=TAB_ID, x=0.0, y=0.0,
                               width=0.0, height=0.0, xoffset=0.0, yoffset=0.0,
                               xadvance=tab_size * space.xadvance)

    def glyph(self, char_id: int) -> Optional[Glyph]:
        glyph = self.font.glyph(char_id)
        if glyph is not None:
            return glyph
        if char_id == TAB_ID:
            return self.tab
        if char_id == SPACE_ID:
            return self.space
        return None

    def __call__(self, text: str, start: int, end: int, width: float) -> Line:
        if not self.font.glyphs:
            return Line(start, start, 0.0)

        end = min(len(text), end)
        pen = 0.0
        line_width = 0.0
        count = 0
        last = None
        for i in range(start, end):
            glyph = self.glyph(ord(text[i]))
            if glyph is not None:
                if last is not None:
                    pen += self.font.kerning(last.id, glyph.id)
                next_pen = pen + glyph.xadvance + self.letter_spacing
                next_width = pen + glyph.width
                # glyph would cross the limit; stop before it
                if next_width >= width or next_pen >= width:
                    break
                pen = next_pen
                line_width = next_width
                last = glyph
            count += 1

        # rightmost edge lines up with the rendered glyph
        if last is not None:
            line_width += last.xoffset
        return Line(start, start + count, line_width)


def _index_of(text: str, ch: str, start: int, end: int) -> int:
    idx = text.find(ch, start)
    if idx == -1 or idx > end:
        return end
    return idx


def _pre_lines(measure, text, start, end, width) -> List[Line]:
    lines = []
    line_start = start
    for i in range(start, end):
        is_newline = text[i] == NEWLINE
        if is_newline or i == end - 1:
            line_end = i if is_newline else i + 1
            lines.append(measure(text, line_start, line_end, width))
            line_start = i + 1
    return lines


def _greedy_lines(measure, text, start, end, width, mode) -> List[Line]:
    lines = []
    test_width = math.inf if mode == MODE_NOWRAP else width
    while start < end:
        new_line = _index_of(text, NEWLINE, start, end)

        # skip leading whitespace
        while start < new_line and text[start].isspace():
            start += 1

        measured = measure(text, start, new_line, test_width)
        line_end = start + (measured.end - measured.start)
        next_start = line_end + len(NEWLINE)

        # line overflowed: back up to the last whitespace
        if line_end < new_line:
            while line_end > start and not text[line_end].isspace():
                line_end -= 1
            if line_end == start:
                # no whitespace to break on, split the word
                if next_start > start + len(NEWLINE):
                    next_start -= 1
                line_end = next_start
            else:
                next_start = line_end
                while line_end > start and text[line_end - len(NEWLINE)].isspace():
                    line_end -= 1

        if line_end >= start:
            lines.append(measure(text, start, line_end, test_width))
        start = next_start
    return lines


def wrap_lines(measure, text: str, width: Optional[float] = None,
               mode: Optional[str] = None, start: Optional[int] = None,
               end: Optional[int] = None) -> List[Line]:
    """Split ``text`` into measured lines."""

    if mode is not None and mode not in MODES:
        raise ValueError(f"layout mode must be one of {MODES}, got {mode!r}")
    if width == 0 and mode != MODE_NOWRAP:
        return []
    text = text or ""
    limit = math.inf if width is None else float(width)
    first = max(0, start or 0)
    last = len(text) if end is None else min(end, len(text))
    if mode == MODE_PRE:
        return _pre_lines(measure, text, first, last, limit)
    return _greedy_lines(measure, text, first, last, limit, mode)


def layout_text(font: BMFont, text: str, width: Optional[float] = None,
                align: Optional[str] = None, line_height: Optional[float] = None,
                letter_spacing: Optional[float] = None, tab_size: Optional[float] = None,
                mode: Optional[str] = None, start: Optional[int] = None,
                end: Optional[int] = None) -> TextLayout:
    """Lay out ``text`` and return every glyph, whitespace included."""

    align = align or ALIGN_LEFT
    if align not in ALIGNMENTS:
        raise ValueError(f"alignment must be one of {ALIGNMENTS}, got {align!r}")

    text = text or ""
    spacing = letter_spacing or 0.0
    tabs = DEFAULT_TAB_SIZE if tab_size is None else tab_size
    measure = _Measurer(font, spacing, tabs)
    lines = wrap_lines(measure, text, width, mode, start, end)

    min_width = width or 0.0
    max_line_width = max([0.0, min_width] + [line.width for line in lines])

    lh = font.line_height if line_height is None else float(line_height)
    baseline = font.base
    descender = lh - baseline
    height = lh * len(lines) - descender

    glyphs: List[GlyphRect] = []
    y = -height
    for line_index, line in enumerate(lines):
        x = 0.0
        last = None
        for i in range(line.start, line.end):
            glyph = measure.glyph(ord(text[i]))
            if glyph is None:
                continue
            if last is not None:
                x += font.kerning(last.id, glyph.id)
            tx = x
            if align == ALIGN_CENTER:
                tx += (max_line_width - line.width) / 2.0
            elif align == ALIGN_RIGHT:
                tx += max_line_width - line.width
            glyphs.append(GlyphRect(glyph, (tx, y), i, line_index))
            x += glyph.xadvance + spacing
            last = glyph
        y += lh

    return TextLayout(
        glyphs=tuple(glyphs),
        width=max_line_width,
        height=height,
        line_count=len(lines),
        line_height=lh,
        baseline=baseline,
        descender=descender,
    )


def visible_glyphs(glyphs: Sequence[GlyphRect]) -> List[GlyphRect]:
    """Drop glyphs without bitmap area (whitespace)."""
    return [g for g in glyphs if g.width * g.height > 0]


def get_glyphs(font: BMFont, text: str, width: Optional[float] = None,
               align: Optional[str] = None, line_height: Optional[float] = None,
               letter_spacing: Optional[float] = None, tab_size: Optional[float] = None,
               mode: Optional[str] = None, start: Optional[int] = None,
               end: Optional[int] = None) -> List[GlyphRect]:
    """Lay out ``text`` and keep only glyphs that draw something."""

    layout = layout_text(font, text, width, align, line_height, letter_spacing,
                         tab_size, mode, start, end)
    return visible_glyphs(layout.glyphs)
