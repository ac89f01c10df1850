"""Wiki page and link graph models."""

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field


class WikiPage(BaseModel):
    """One markdown page, parsed from its file and never mutated afterwards."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    slug: str
    title: str
    description: str | None = None
    category: str | None = None
    keywords: list[str] = Field(default_factory=list)
    related: list[str] = Field(default_factory=list)
    see_also: list[str] = Field(default_factory=list, alias="seeAlso")


@dataclass
class LinkGraph:
    """Bidirectional link graph over all wiki pages.

    Edges pointing at slugs with no page are kept; lookups drop them.
    """

    pages: dict[str, WikiPage] = field(default_factory=dict)
    forward_links: dict[str, set[str]] = field(default_factory=dict)
    backlinks: dict[str, set[str]] = field(default_factory=dict)


@dataclass
class TocItem:
    """Heading entry in a page table of contents."""

    id: str
    text: str
    level: int


class SearchHit(BaseModel):
    """Full-text search match for one page."""

    slug: str
    title: str
    description: str = ""
    category: str | None = None
    keywords: list[str] = Field(default_factory=list)
    matches: list[str] = Field(default_factory=list)
    url: str


@dataclass
class PageView:
    """Everything needed to render one page alongside its link context."""

    page: WikiPage
    body: str
    toc: list[TocItem] = field(default_factory=list)
    backlinks: list[WikiPage] = field(default_factory=list)
    related: list[WikiPage] = field(default_factory=list)
    category_pages: list[WikiPage] = field(default_factory=list)
    graph_available: bool = True
