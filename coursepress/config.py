from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from coursepress.logger import get_logger

LOG = get_logger(__name__)


class ImageCategory(BaseModel):
    """A keyword family that makes a paragraph a candidate for an illustration."""

    name: str
    label: str
    keywords: List[str]


DEFAULT_HEADER_KEYWORDS: List[str] = [
    "名稱", "項目", "類別", "類型", "說明", "內容", "數量", "價格", "單位", "備註",
    "日期", "時間", "步驟", "編號", "方法", "特徵", "比較",
    "name", "item", "type", "category", "description", "quantity", "qty",
    "price", "unit", "note", "date", "time", "step", "no.", "id", "total",
]

DEFAULT_IMAGE_CATEGORIES: List[ImageCategory] = [
    ImageCategory(
        name="structural",
        label="結構圖",
        keywords=["結構", "構造", "組成", "層", "解剖", "structure", "anatomy", "layer", "component"],
    ),
    ImageCategory(
        name="procedural",
        label="流程圖",
        keywords=["步驟", "流程", "程序", "操作", "手法", "procedure", "step", "process", "workflow"],
    ),
    ImageCategory(
        name="diagrammatic",
        label="示意圖",
        keywords=["示意", "圖解", "圖表", "位置", "角度", "diagram", "chart", "illustration", "angle"],
    ),
    ImageCategory(
        name="comparative",
        label="比較圖",
        keywords=["比較", "對比", "差異", "前後", "compare", "comparison", "versus", "difference"],
    ),
    ImageCategory(
        name="exemplary",
        label="範例圖",
        keywords=["範例", "例如", "實例", "案例", "example", "for instance", "case study"],
    ),
]

DEFAULT_BLOCK_HEIGHTS: Dict[str, int] = {
    "chapter": 140,
    "section": 64,
    "subsection": 52,
    "subsubsection": 44,
    "paragraph": 84,
    "keypoint": 110,
    "warning": 110,
    "definition": 96,
    "table": 90,
    "image": 320,
}


class StructuringConfig(BaseModel):
    lines_per_page: int = Field(default=30, ge=1)
    short_line_max_length: int = Field(default=20, ge=1)
    header_cell_max_length: int = Field(default=20, ge=1)
    header_keywords: List[str] = Field(default_factory=lambda: list(DEFAULT_HEADER_KEYWORDS))
    image_categories: List[ImageCategory] = Field(
        default_factory=lambda: [c.model_copy(deep=True) for c in DEFAULT_IMAGE_CATEGORIES]
    )
    auto_images: bool = True
    placeholder_title: str = "Untitled Courseware"
    default_image_description: str = "教材圖片"
    synthetic_column_label: str = "Column {n}"
    fixture_marker: str = "[DEMO_MARK]"


class PaginationConfig(BaseModel):
    # A4 at 96 dpi
    page_height: int = Field(default=1123, gt=0)
    margin_top: int = Field(default=76, ge=0)
    margin_bottom: int = Field(default=76, ge=0)
    block_heights: Dict[str, int] = Field(default_factory=lambda: dict(DEFAULT_BLOCK_HEIGHTS))
    table_row_height: int = Field(default=32, ge=0)

    @property
    def printable_height(self) -> int:
        return self.page_height - self.margin_top - self.margin_bottom

    def height_for(self, kind: str) -> int:
        return self.block_heights.get(kind, self.block_heights.get("paragraph", 0))


def load_config(path: Optional[str]) -> Tuple[StructuringConfig, PaginationConfig]:
    """Load both configs from a JSON file; a missing path yields the defaults.

    The file may hold ``structuring`` and ``pagination`` objects; absent keys
    keep their default values. Raises ``pydantic.ValidationError`` on bad values.
    """
    if not path:
        return StructuringConfig(), PaginationConfig()

    data = json.loads(Path(path).read_text(encoding="utf-8"))
    structuring = StructuringConfig.model_validate(data.get("structuring") or {})
    pagination = PaginationConfig.model_validate(data.get("pagination") or {})
    LOG.info("Loaded configuration from %s", path)
    return structuring, pagination
