"""
Shared fixtures for the coursepress test-suite.

Most tests switch auto-image suggestions off so that every block maps to a
source line; tests about suggestions turn them back on explicitly.
"""

from typing import List, Optional

import pytest

from coursepress.classifier import Classification, LineContext, ParseState, classify_line
from coursepress.config import PaginationConfig, StructuringConfig
from coursepress.pagination import PageEstimator
from coursepress.structure import StructuringEngine


SAMPLE_COURSEWARE = "\n".join(
    [
        "粉刺管理教材",
        "目錄",
        "第一章：基礎理論......1",
        "第二章：操作流程......5",
        "",
        "第一章：基礎理論",
        "1. 皮膚結構",
        "皮膚由外而內分別為表皮層、真皮層與皮下組織。",
        "[建議：插入圖片：皮膚三層結構解剖圖]",
        "[建議：警示] 只要看到出血，就代表操作過當。",
        "[建議：定義：開放性粉刺] 角質堆積混合皮脂，接觸空氣氧化變黑。",
        "2. 粉刺種類",
        "步驟\t說明",
        "清潔\t移除油脂",
        "軟化\t密封水合",
        "",
        "第二章：操作流程",
        "1.1 工具準備",
        "[建議：重點提示] 標準流程：清潔→軟化→導出。",
        "| 工具 | 用途 |",
        "|---|---|",
        "| 引流棒 | 施壓引流 |",
    ]
)


@pytest.fixture
def config() -> StructuringConfig:
    return StructuringConfig(auto_images=False)


@pytest.fixture
def engine(config) -> StructuringEngine:
    return StructuringEngine(config=config)


@pytest.fixture
def estimator() -> PageEstimator:
    return PageEstimator(PaginationConfig())


@pytest.fixture
def sample_text() -> str:
    return SAMPLE_COURSEWARE


@pytest.fixture
def classify(config):
    """Classify ``lines[index]`` the way the engine would."""

    def _classify(
        lines: List[str],
        index: int = 0,
        state: Optional[ParseState] = None,
        cfg: Optional[StructuringConfig] = None,
        id_stamp: int = 7,
    ) -> Classification:
        ctx = make_context(lines, index, state, id_stamp)
        return classify_line(ctx, cfg or config)

    return _classify


def make_context(
    lines: List[str], index: int = 0, state: Optional[ParseState] = None, id_stamp: int = 7
) -> LineContext:
    stripped = [line.strip() for line in lines]
    return LineContext(
        lines=stripped,
        index=index,
        state=state or ParseState(),
        id_stamp=id_stamp,
    )


@pytest.fixture
def make_ctx():
    return make_context
