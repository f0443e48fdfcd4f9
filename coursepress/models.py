from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


UNKNOWN_PAGE = "unknown"


class _Block(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page_number: Optional[int] = Field(default=None, alias="pageNumber", ge=1)


class Chapter(_Block):
    type: Literal["chapter"] = "chapter"
    text: str


class Section(_Block):
    type: Literal["section"] = "section"
    text: str


class SubSection(_Block):
    type: Literal["subsection"] = "subsection"
    text: str


class SubSubSection(_Block):
    type: Literal["subsubsection"] = "subsubsection"
    text: str


class Paragraph(_Block):
    type: Literal["paragraph"] = "paragraph"
    text: str


class Keypoint(_Block):
    type: Literal["keypoint"] = "keypoint"
    text: str


class Warning(_Block):
    type: Literal["warning"] = "warning"
    text: str


class Definition(_Block):
    type: Literal["definition"] = "definition"
    term: str
    definition: str


class Table(_Block):
    type: Literal["table"] = "table"
    headers: List[str]
    rows: List[List[str]]
    has_real_header: bool = Field(default=True, alias="hasRealHeader")


class Image(_Block):
    type: Literal["image"] = "image"
    id: str
    description: str
    auto: bool = False


ContentBlock = Annotated[
    Union[
        Chapter,
        Section,
        SubSection,
        SubSubSection,
        Paragraph,
        Keypoint,
        Warning,
        Definition,
        Table,
        Image,
    ],
    Field(discriminator="type"),
]


class TocEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    level: int = Field(ge=1, le=2)
    text: str
    page_number: Union[int, Literal["unknown"], None] = Field(
        default=None, alias="pageNumber"
    )


class StructuredDocument(BaseModel):
    title: str
    content: List[ContentBlock] = Field(default_factory=list)
    toc: List[TocEntry] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Plain-data form handed to renderers (camelCase keys)."""
        return self.model_dump(by_alias=True)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StructuredDocument":
        return cls.model_validate(data)


class StructureReport(BaseModel):
    title: str
    block_count: int
    counts_by_type: Dict[str, int]
    page_count: int
    toc_count: int
    toc_resolved: int
    toc_unknown: List[str]
    auto_images: int


def block_text(block: ContentBlock) -> Optional[str]:
    """Primary text of a block, or None for kinds that carry no single text."""
    if isinstance(block, Definition):
        return block.term
    if isinstance(block, Image):
        return block.description
    if isinstance(block, Table):
        return None
    return block.text
