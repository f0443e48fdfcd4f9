import pytest

from coursepress.config import StructuringConfig
from coursepress.fixtures import DEMO_DOCUMENT
from coursepress.models import (
    Chapter,
    Image,
    Paragraph,
    Section,
    StructuredDocument,
    Table,
    TocEntry,
)
from coursepress.structure import StructuringEngine, structure_text


COVERAGE_TEXT = "\n".join(
    [
        "Skin Care Basics",
        "",
        "Chapter 1 Foundations",
        "1. Skin layers",
        "1.1 Epidermis",
        "1.1.1 Cells",
        "The epidermis protects the body.",
        "Tip: Keep skin moist",
        "Warning: Avoid bleeding",
        "Definition: Sebum: skin oil",
        "Name\tUse",
        "Soap\tCleansing",
        "",
        "| Tool | Angle |",
        "|---|---|",
        "| Stick | 45 |",
        "[IMAGE: tool angles]",
        "- Rinse well",
    ]
)


def _types(doc: StructuredDocument):
    return [b.type for b in doc.content]


def test_tab_table_with_header_row(engine):
    doc = engine.structure("Name\tPrice\nA\t10\nB\t20")
    assert doc.title == "Name\tPrice"
    assert doc.content == [
        Table(headers=["Name", "Price"], rows=[["A", "10"], ["B", "20"]], has_real_header=True)
    ]
    assert doc.toc == []


def test_tab_table_without_header_row(engine):
    doc = engine.structure(
        "Apples are red.\tThey grow on trees.\nBananas are yellow.\tThey grow in bunches."
    )
    (table,) = doc.content
    assert table.has_real_header is False
    assert table.headers == ["Column 1", "Column 2"]
    assert len(table.rows) == 2


def test_toc_region_is_skipped(engine):
    doc = engine.structure("目錄\nIntroduction......1\nChapter 1 Basics")
    assert doc.content == [Chapter(text="Chapter 1 Basics")]
    assert doc.toc == [TocEntry(level=1, text="Chapter 1 Basics", page_number=1)]


def test_unterminated_toc_region_discards_rest(engine):
    doc = engine.structure("目錄\nIntroduction......1\nSome prose that never becomes a chapter.")
    assert doc.content == []
    assert doc.toc == []


def test_every_block_kind_is_produced(engine):
    doc = engine.structure(COVERAGE_TEXT)
    assert _types(doc) == [
        "paragraph",
        "chapter",
        "section",
        "subsection",
        "subsubsection",
        "paragraph",
        "keypoint",
        "warning",
        "definition",
        "table",
        "table",
        "image",
        "paragraph",
    ]
    assert doc.title == "Skin Care Basics"
    assert [(e.level, e.text) for e in doc.toc] == [(1, "Chapter 1 Foundations"), (2, "1. Skin layers")]


def test_sample_courseware_blocks(engine, sample_text):
    doc = engine.structure(sample_text)
    assert doc.title == "粉刺管理教材"
    assert _types(doc) == [
        "paragraph",
        "chapter",
        "section",
        "paragraph",
        "image",
        "warning",
        "definition",
        "section",
        "table",
        "chapter",
        "subsection",
        "keypoint",
        "table",
    ]
    image = doc.content[4]
    assert image.description == "皮膚三層結構解剖圖"
    assert image.auto is False
    definition = doc.content[6]
    assert definition.term == "開放性粉刺"
    assert definition.definition == "角質堆積混合皮脂，接觸空氣氧化變黑。"


def test_sample_courseware_coarse_toc_pages(engine, sample_text):
    doc = engine.structure(sample_text)
    assert [(e.level, e.text, e.page_number) for e in doc.toc] == [
        (1, "第一章：基礎理論", 2),
        (2, "1. 皮膚結構", 2),
        (2, "2. 粉刺種類", 2),
        (1, "第二章：操作流程", 3),
    ]


def test_toc_entries_name_heading_blocks(engine, sample_text):
    for text in (sample_text, COVERAGE_TEXT):
        doc = engine.structure(text)
        headings = {b.text for b in doc.content if isinstance(b, (Chapter, Section))}
        assert all(e.text in headings for e in doc.toc)
        assert all(e.level in (1, 2) for e in doc.toc)


def test_duplicate_toc_text_is_kept_once(engine):
    doc = engine.structure("Chapter 1 Intro\n1. Overview\nChapter 1 Intro")
    assert _types(doc) == ["chapter", "section", "chapter"]
    assert [e.text for e in doc.toc] == ["Chapter 1 Intro", "1. Overview"]


def test_chapter_after_content_bumps_coarse_page(engine):
    doc = engine.structure("Opening words.\nChapter 1 Basics")
    assert doc.toc[0].page_number == 2


def test_first_chapter_is_page_one(engine):
    doc = engine.structure("Chapter 1 Basics\nShort note here\nChapter 2 Practice")
    assert [e.page_number for e in doc.toc] == [1, 2]


def test_coarse_counter_wraps_at_lines_per_page():
    engine = StructuringEngine(config=StructuringConfig(lines_per_page=2, auto_images=False))
    doc = engine.structure("Para one\nPara two\nPara three\nChapter 2 X")
    assert doc.toc == [TocEntry(level=1, text="Chapter 2 X", page_number=3)]


@pytest.mark.parametrize("text", ["", "   ", "\n\n\t\n"])
def test_blank_input_gives_placeholder_document(engine, text):
    doc = engine.structure(text)
    assert doc.title == "Untitled Courseware"
    assert doc.content == []
    assert doc.toc == []


def test_title_is_first_non_blank_line(engine):
    doc = engine.structure("\n\n  Course Title  \nBody text.")
    assert doc.title == "Course Title"


def test_non_string_input_is_rejected(engine):
    with pytest.raises(TypeError):
        engine.structure(b"Chapter 1")
    with pytest.raises(TypeError):
        engine.structure(None)


def test_structuring_is_idempotent(sample_text):
    engine = StructuringEngine()
    first = engine.structure(sample_text + "\n\nThe skin structure has three layers.")
    second = engine.structure(sample_text + "\n\nThe skin structure has three layers.")
    assert first == second
    assert first.to_dict() == second.to_dict()


def test_fixture_marker_returns_bundled_document(engine):
    doc = engine.structure("anything at all\n[DEMO_MARK]\n")
    assert doc == DEMO_DOCUMENT
    assert doc is not DEMO_DOCUMENT
    doc.content.clear()
    assert len(DEMO_DOCUMENT.content) == 11


def test_fixture_marker_only_counts_at_the_end(engine):
    doc = engine.structure("[DEMO_MARK]\nChapter 1 Basics")
    assert doc != DEMO_DOCUMENT
    assert doc.toc[0].text == "Chapter 1 Basics"


def test_fixture_path_can_be_disabled():
    engine = StructuringEngine(config=StructuringConfig(auto_images=False), fixture=None)
    doc = engine.structure("Chapter 1 Basics\n[DEMO_MARK]")
    assert _types(doc) == ["chapter", "paragraph"]


def test_auto_image_follows_keyword_paragraph():
    engine = StructuringEngine(id_stamp=5)
    doc = engine.structure("Intro\n\nThe skin structure has three layers.")
    assert doc.content[:2] == [
        Paragraph(text="Intro"),
        Paragraph(text="The skin structure has three layers."),
    ]
    suggestion = doc.content[2]
    assert isinstance(suggestion, Image)
    assert suggestion.auto is True
    assert suggestion.id == "img_5_2_auto"


def test_sample_block_sequence_unchanged_by_auto_images(sample_text):
    plain = StructuringEngine(config=StructuringConfig(auto_images=False)).structure(sample_text)
    auto = StructuringEngine().structure(sample_text)
    assert _types(plain) == _types(auto)


def test_image_ids_are_unique(sample_text):
    doc = StructuringEngine().structure(
        "[IMAGE: one]\n[IMAGE: two]\nThe process has steps.\n" + sample_text
    )
    ids = [b.id for b in doc.content if isinstance(b, Image)]
    assert len(ids) == len(set(ids))
    assert len(ids) >= 3


def test_engine_is_reusable_between_calls(engine):
    engine.structure("目錄\nIntro......1")
    doc = engine.structure("Chapter 1 Basics")
    assert doc.content == [Chapter(text="Chapter 1 Basics")]
    assert doc.toc[0].page_number == 1


def test_module_helper_uses_given_config():
    doc = structure_text("Chapter 1 Basics\n1. Overview", StructuringConfig(auto_images=False))
    assert doc.content == [Chapter(text="Chapter 1 Basics"), Section(text="1. Overview")]


@pytest.mark.parametrize(
    "text",
    [
        "Title\n\tFirst indented paragraph of prose here.\n\tSecond indented paragraph of prose.",
        "Wash the face gently.\t\nRinse with warm water.\t",
    ],
)
def test_edge_tabs_leave_prose_as_paragraphs(engine, text):
    doc = engine.structure(text)
    assert all(isinstance(b, Paragraph) for b in doc.content)
    assert [b.text for b in doc.content] == [line.strip() for line in text.splitlines()]


def test_tab_indented_paragraph_keeps_its_image_suggestion():
    doc = StructuringEngine(id_stamp=3).structure(
        "\tFollow each step of the process carefully.\n\tThen rinse."
    )
    assert _types(doc) == ["paragraph", "image", "paragraph"]
    assert doc.content[1].id == "img_3_0_auto"
