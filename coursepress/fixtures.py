"""Bundled demo courseware returned verbatim for inputs ending in the fixture marker."""

from coursepress.models import StructuredDocument

DEMO_DOCUMENT = StructuredDocument.from_dict(
    {
        "title": "測試教材DEMO",
        "content": [
            {"type": "chapter", "text": "導論：成為頂尖粉刺管理師的思維與責任"},
            {"type": "section", "text": "1. 頂尖粉刺管理師的價值與定位"},
            {
                "type": "paragraph",
                "text": "粉刺管理師不僅僅是清潔皮膚的工匠，更是肌膚健康的守護者。",
            },
            {
                "type": "keypoint",
                "text": "核心價值：技術只能解決當下的問題，觀念與管理才能帶來長久的改善。",
            },
            {"type": "chapter", "text": "第一章：專業基礎理論與科學根基"},
            {"type": "section", "text": "1. 皮膚生理學基礎：清粉刺的操作目標區"},
            {
                "type": "image",
                "id": "img_demo_1",
                "description": "皮膚三層結構解剖圖，標示表皮、真皮、皮下組織",
                "auto": False,
            },
            {
                "type": "warning",
                "text": "只要看到出血，通常代表已經傷及真皮層的乳頭層。",
            },
            {
                "type": "definition",
                "term": "開放性粉刺 (Blackheads)",
                "definition": "角質堆積混合皮脂，接觸空氣氧化變黑，位於毛孔表面。",
            },
            {"type": "chapter", "text": "第二章：核心技術操作流程"},
            {
                "type": "table",
                "headers": ["步驟", "說明"],
                "rows": [["清潔", "移除表面油脂"], ["ODT 軟化", "密封促進角質水合"], ["導出", "順毛流引流"]],
                "hasRealHeader": True,
            },
        ],
        "toc": [
            {"level": 1, "text": "導論：成為頂尖粉刺管理師的思維與責任", "pageNumber": 1},
            {"level": 2, "text": "1. 頂尖粉刺管理師的價值與定位", "pageNumber": 1},
            {"level": 1, "text": "第一章：專業基礎理論與科學根基", "pageNumber": 2},
            {"level": 2, "text": "1. 皮膚生理學基礎：清粉刺的操作目標區", "pageNumber": 2},
            {"level": 1, "text": "第二章：核心技術操作流程", "pageNumber": 3},
        ],
    }
)


def is_fixture_text(text: str, marker: str) -> bool:
    """True when the input ends, trailing whitespace aside, with the fixture marker."""
    return bool(marker) and text.rstrip().endswith(marker)
