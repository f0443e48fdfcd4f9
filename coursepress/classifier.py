from __future__ import annotations

"""
classifier.py

Precedence-ordered line classification.

Each rule is an independent function ``(LineContext, StructuringConfig) ->
Optional[Classification]``; ``RULES`` fixes their order and ``classify_line``
returns the first rule that claims the line. The last rule always claims it,
so every line resolves to something (worst case a Paragraph).
"""

import re
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional, Sequence, Tuple

from coursepress.config import StructuringConfig
from coursepress.logger import get_logger
from coursepress.models import (
    Chapter,
    ContentBlock,
    Definition,
    Image,
    Keypoint,
    Paragraph,
    Section,
    SubSection,
    SubSubSection,
    TocEntry,
    Warning as WarningCallout,
)
from coursepress.tables import TAB, collect_pipe_table, collect_tab_table
from coursepress.utils import contains_any, has_dot_leader_page, normalize_block_text

LOG = get_logger(__name__)


class Patterns:
    """Pattern vocabulary for the fixed annotation conventions."""

    CN_DIGITS = "〇零一二三四五六七八九十百兩"

    TOC_HEADER_RX = re.compile(
        r"^[#\s]*(?:目\s*錄|目\s*录|目\s*次|table\s+of\s+contents|contents)\s*[:：]?\s*$",
        re.IGNORECASE,
    )
    CHAPTER_RX = re.compile(
        rf"^(?:第\s*[0-9０-９{CN_DIGITS}]+\s*[章篇部]"
        r"|(?i:chapter|part)\s+(?:\d+|[IVXLC]+)\b"
        r"|#\s+\S)"
    )
    SUBSUBSECTION_RX = re.compile(r"^(?:\d+(?:\.\d+){2,}\.?(?![\d.])|####\s+\S)")
    SUBSECTION_RX = re.compile(r"^(?:\d+\.\d+\.?(?![\d.])|###\s+\S)")
    LIST_ITEM_RX = re.compile(
        r"^(?:[（(]\s*(?:\d{1,3}|[a-zA-Z]|[一二三四五六七八九十]+)\s*[）)]"
        r"|(?:\d{1,3}|[a-zA-Z])[）)]"
        r"|[\u2460-\u2487\u2776-\u2793])"
    )
    SECTION_RX = re.compile(
        rf"^(?:第\s*[0-9{CN_DIGITS}]+\s*[節节項项]"
        r"|\d{1,3}[.、．](?![\d.])"
        r"|\d{1,3}-\d{1,3}(?![\d-])"
        r"|[A-Z][.、](?=\s|$|[^A-Za-z0-9.])"
        r"|[一二三四五六七八九十]+[、．.]"
        r"|##\s+\S"
        r"|[■◆▶►]\s*\S)"
    )
    SENTENCE_END_RX = re.compile(r"[.。!！?？:：;；,，、…]$")
    LETTER_RX = re.compile(r"[^\W\d_]")

    ANNOTATION = r"\[\s*(?:建議|建议|suggestion)\s*[:：]\s*"
    WARNING_RX = re.compile(
        rf"^(?:{ANNOTATION}(?:警示|警告|注意事項|注意事项|warning|caution)\s*\]"
        r"|(?:警示|警告|注意事項|注意事项|warning|caution)\s*[:：]"
        r"|⚠️?)\s*",
        re.IGNORECASE,
    )
    KEYPOINT_RX = re.compile(
        rf"^(?:{ANNOTATION}(?:重點提示|重点提示|重點|重点|提示|key\s*point|tip|note)\s*\]"
        r"|(?:重點提示|重点提示|重點|重点|提示|注意|key\s*point|note|tip)\s*[:：]"
        r"|💡|📌)\s*",
        re.IGNORECASE,
    )
    KEYPOINT_ICONS = ("💡", "📌")
    DEFINITION_ANNOTATION_RX = re.compile(
        rf"^{ANNOTATION}(?:定義|定义|名詞解釋|名词解释|definition|term)\s*[:：]\s*"
        r"(?P<term>[^\]]*)\]\s*(?P<body>.*)$",
        re.IGNORECASE,
    )
    DEFINITION_RX = re.compile(
        r"^(?:定義|定义|名詞解釋|名词解释|definition|term)\s*[:：]\s*(?P<rest>.*)$",
        re.IGNORECASE,
    )
    COLON_RX = re.compile(r"[:：]")
    IMAGE_RX = re.compile(
        rf"^(?:{ANNOTATION}(?:插入圖片|插入图片|圖片|图片|image)\s*[:：]?\s*(?P<a>[^\]]*)\]"
        r"|\[\s*(?:image|img|圖片|图片)\s*[:：]?\s*(?P<b>[^\]]*)\]"
        r"|!\[(?P<c>[^\]]*)\](?:\([^)]*\))?)"
        r"\s*(?P<rest>.*)$",
        re.IGNORECASE,
    )
    GENERIC_IMAGE_WORDS = {"圖片", "图片", "image", "img"}
    BULLET_RX = re.compile(r"^(?:[-*+•●▪‧·○◦]\s*\S|[ivxlc]+[.)]\s+\S|\d{1,3}[.)）]\s*\S)", re.IGNORECASE)
    MARKDOWN_HEADING_RX = re.compile(r"^#{1,6}\s+")


@dataclass(frozen=True)
class ParseState:
    """Scan state threaded through one structuring pass; never shared between calls."""

    in_toc_region: bool = False
    page_counter: int = 1
    lines_on_current_page: int = 0
    scan_cursor: int = 0
    has_content: bool = False


@dataclass(frozen=True)
class LineContext:
    lines: Sequence[str]
    index: int
    state: ParseState
    id_stamp: int = 0

    @property
    def line(self) -> str:
        return self.lines[self.index]

    @property
    def prev_line(self) -> Optional[str]:
        return self.lines[self.index - 1] if self.index > 0 else None

    @property
    def next_line(self) -> Optional[str]:
        return self.lines[self.index + 1] if self.index + 1 < len(self.lines) else None


@dataclass
class Classification:
    rule: str
    state: ParseState
    blocks: List[ContentBlock] = field(default_factory=list)
    toc: List[TocEntry] = field(default_factory=list)
    consumed: int = 1


Rule = Callable[[LineContext, StructuringConfig], Optional[Classification]]


# ---------------------------------------------------------------- predicates

def is_toc_header(line: str) -> bool:
    return bool(Patterns.TOC_HEADER_RX.match(line))


def is_chapter_heading(line: str) -> bool:
    return bool(Patterns.CHAPTER_RX.match(line))


def is_subsubsection_heading(line: str) -> bool:
    return bool(Patterns.SUBSUBSECTION_RX.match(line))


def is_subsection_heading(line: str) -> bool:
    return bool(Patterns.SUBSECTION_RX.match(line))


def is_list_item_marker(line: str) -> bool:
    return bool(Patterns.LIST_ITEM_RX.match(line))


def has_section_marker(line: str) -> bool:
    return bool(Patterns.SECTION_RX.match(line))


def is_image_marker(line: Optional[str]) -> bool:
    return bool(line) and bool(Patterns.IMAGE_RX.match(line))


def is_bullet(line: str) -> bool:
    return bool(Patterns.BULLET_RX.match(line))


def carries_markup(line: str) -> bool:
    """Lines that use an explicit annotation never count as plain short lines."""
    return (
        TAB in line
        or "|" in line
        or line.startswith(("[", "!", "⚠"))
        or any(icon in line for icon in Patterns.KEYPOINT_ICONS)
        or bool(Patterns.WARNING_RX.match(line))
        or bool(Patterns.KEYPOINT_RX.match(line))
        or bool(Patterns.DEFINITION_RX.match(line))
        or is_bullet(line)
    )


def is_short_heading_line(line: str, prev_line: Optional[str], config: StructuringConfig) -> bool:
    """A short plain line right after a blank line reads as a section heading."""
    if prev_line is None or prev_line != "":
        return False
    if len(line) >= config.short_line_max_length:
        return False
    if Patterns.SENTENCE_END_RX.search(line) or not Patterns.LETTER_RX.search(line):
        return False
    return not carries_markup(line)


def heading_text(line: str) -> str:
    text = normalize_block_text(Patterns.MARKDOWN_HEADING_RX.sub("", line))
    return text or line


def marker_text(line: str) -> str:
    return Patterns.MARKDOWN_HEADING_RX.sub("", line).strip() or line


def _image_id(ctx: LineContext, suffix: str = "") -> str:
    return f"img_{ctx.id_stamp}_{ctx.index}{suffix}"


# --------------------------------------------------------------------- rules

def rule_toc_header(ctx: LineContext, config: StructuringConfig) -> Optional[Classification]:
    if not is_toc_header(ctx.line):
        return None
    return Classification("toc_header", replace(ctx.state, in_toc_region=True))


def rule_toc_region(ctx: LineContext, config: StructuringConfig) -> Optional[Classification]:
    if not ctx.state.in_toc_region:
        return None
    # a rendered TOC row keeps the region open even when it names a chapter
    if is_chapter_heading(ctx.line) and not has_dot_leader_page(ctx.line):
        return None
    return Classification("toc_region", ctx.state)


def rule_chapter(ctx: LineContext, config: StructuringConfig) -> Optional[Classification]:
    if not is_chapter_heading(ctx.line):
        return None
    state = replace(ctx.state, in_toc_region=False)
    if state.has_content:
        state = replace(state, page_counter=state.page_counter + 1, lines_on_current_page=0)
    text = heading_text(ctx.line)
    return Classification(
        "chapter",
        state,
        blocks=[Chapter(text=text)],
        toc=[TocEntry(level=1, text=text, page_number=state.page_counter)],
    )


def rule_subsubsection(ctx: LineContext, config: StructuringConfig) -> Optional[Classification]:
    if not is_subsubsection_heading(ctx.line):
        return None
    return Classification("subsubsection", ctx.state, blocks=[SubSubSection(text=marker_text(ctx.line))])


def rule_subsection(ctx: LineContext, config: StructuringConfig) -> Optional[Classification]:
    if not is_subsection_heading(ctx.line):
        return None
    return Classification("subsection", ctx.state, blocks=[SubSection(text=marker_text(ctx.line))])


def rule_list_item(ctx: LineContext, config: StructuringConfig) -> Optional[Classification]:
    if not is_list_item_marker(ctx.line):
        return None
    return Classification("list_item", ctx.state, blocks=[_paragraph(ctx.line)])


def rule_section(ctx: LineContext, config: StructuringConfig) -> Optional[Classification]:
    explicit = has_section_marker(ctx.line)
    if not explicit and not is_short_heading_line(ctx.line, ctx.prev_line, config):
        return None
    text = heading_text(ctx.line)
    toc = [TocEntry(level=2, text=text, page_number=ctx.state.page_counter)] if explicit else []
    return Classification("section" if explicit else "short_line_section", ctx.state, blocks=[Section(text=text)], toc=toc)


def rule_tab_table(ctx: LineContext, config: StructuringConfig) -> Optional[Classification]:
    if TAB not in ctx.line:
        return None
    match = collect_tab_table(ctx.lines, ctx.index, config)
    if match is None:
        return None
    return Classification("tab_table", ctx.state, blocks=[match.table], consumed=match.consumed)


def rule_callout(ctx: LineContext, config: StructuringConfig) -> Optional[Classification]:
    line = ctx.line
    m = Patterns.WARNING_RX.match(line)
    if m:
        text = line[m.end():].strip()
        if text:
            return Classification("warning", ctx.state, blocks=[WarningCallout(text=text)])
    m = Patterns.KEYPOINT_RX.match(line)
    if m:
        text = line[m.end():].strip()
    elif any(icon in line for icon in Patterns.KEYPOINT_ICONS):
        text = line
        for icon in Patterns.KEYPOINT_ICONS:
            text = text.replace(icon, "")
        text = text.strip()
    else:
        return None
    if not text:
        return None
    return Classification("keypoint", ctx.state, blocks=[Keypoint(text=text)])


def split_definition(line: str) -> Optional[Tuple[str, str]]:
    """Split a definition line into (term, definition); None unless both are non-empty."""
    m = Patterns.DEFINITION_ANNOTATION_RX.match(line)
    if m:
        term, body = m.group("term").strip(), m.group("body").strip()
        if term and not body:
            parts = Patterns.COLON_RX.split(term, maxsplit=1)
            if len(parts) == 2:
                term, body = parts[0].strip(), parts[1].strip()
    else:
        m = Patterns.DEFINITION_RX.match(line)
        if not m:
            return None
        parts = Patterns.COLON_RX.split(m.group("rest"), maxsplit=1)
        if len(parts) != 2:
            return None
        term, body = parts[0].strip(), parts[1].strip()
    if not term or not body:
        return None
    return term, body


def rule_definition(ctx: LineContext, config: StructuringConfig) -> Optional[Classification]:
    parts = split_definition(ctx.line)
    if parts is None:
        return None
    term, body = parts
    return Classification("definition", ctx.state, blocks=[Definition(term=term, definition=body)])


def rule_pipe_table(ctx: LineContext, config: StructuringConfig) -> Optional[Classification]:
    match = collect_pipe_table(ctx.lines, ctx.index)
    if match is None:
        return None
    return Classification("pipe_table", ctx.state, blocks=[match.table], consumed=match.consumed)


def rule_image(ctx: LineContext, config: StructuringConfig) -> Optional[Classification]:
    m = Patterns.IMAGE_RX.match(ctx.line)
    if not m:
        return None
    inner = (m.group("a") or m.group("b") or m.group("c") or "").strip()
    if inner.lower() in Patterns.GENERIC_IMAGE_WORDS:
        inner = ""
    description = " ".join(p for p in (inner, m.group("rest").strip()) if p)
    image = Image(
        id=_image_id(ctx),
        description=description or config.default_image_description,
        auto=False,
    )
    return Classification("image", ctx.state, blocks=[image])


def rule_bullet(ctx: LineContext, config: StructuringConfig) -> Optional[Classification]:
    if not is_bullet(ctx.line):
        return None
    return Classification("bullet", ctx.state, blocks=[_paragraph(ctx.line)])


def rule_paragraph(ctx: LineContext, config: StructuringConfig) -> Optional[Classification]:
    return Classification("paragraph", ctx.state, blocks=[_paragraph(ctx.line)])


def _paragraph(line: str) -> Paragraph:
    return Paragraph(text=normalize_block_text(line) or line)


RULES: Tuple[Tuple[str, Rule], ...] = (
    ("toc_header", rule_toc_header),
    ("toc_region", rule_toc_region),
    ("chapter", rule_chapter),
    ("subsubsection", rule_subsubsection),
    ("subsection", rule_subsection),
    ("list_item", rule_list_item),
    ("section", rule_section),
    ("tab_table", rule_tab_table),
    ("callout", rule_callout),
    ("definition", rule_definition),
    ("pipe_table", rule_pipe_table),
    ("image", rule_image),
    ("bullet", rule_bullet),
    ("paragraph", rule_paragraph),
)


def classify_line(
    ctx: LineContext,
    config: StructuringConfig,
    rules: Sequence[Tuple[str, Rule]] = RULES,
) -> Classification:
    """Return the classification of the first rule that claims ``ctx.line``."""
    for name, rule in rules:
        result = rule(ctx, config)
        if result is not None:
            LOG.debug("line %d -> %s (consumed=%d)", ctx.index, result.rule, result.consumed)
            return result
    return rule_paragraph(ctx, config)


def suggest_image(
    source: str, ctx: LineContext, config: StructuringConfig
) -> Optional[Image]:
    """Auto-image suggestion for a paragraph, unless an explicit image follows it."""
    if not config.auto_images:
        return None
    if is_image_marker(_next_non_blank(ctx)):
        return None
    for category in config.image_categories:
        if contains_any(source, category.keywords):
            excerpt = normalize_block_text(source)[:30]
            return Image(
                id=_image_id(ctx, "_auto"),
                description=f"{category.label}：{excerpt}",
                auto=True,
            )
    return None


def _next_non_blank(ctx: LineContext) -> Optional[str]:
    for line in ctx.lines[ctx.index + 1:]:
        if line:
            return line
    return None
