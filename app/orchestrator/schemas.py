"""Pydantic models for tool input/output and cached envelopes.

Split into: records from upstream, tool arguments, and tool responses.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

ISSUE_DATE_PATTERN = (
    r"^(\d{4}-\d{2}-\d{2}/|\d{4}-\d{2}/|/\d{4}-\d{2}-\d{2}"
    r"|\d{4}-\d{2}-\d{2}/\d{4}-\d{2}-\d{2}|\d{4}-\d{2})$"
)


# ═══════════════ UPSTREAM RECORDS ═══════════════

class Notice(BaseModel):
    """One procurement notice as returned by the KKJ search API.

    Fields the API is known to emit are declared; anything else it sends is
    kept in ``model_extra`` and serialised back out unchanged.
    """

    model_config = ConfigDict(extra="allow", frozen=True, coerce_numbers_to_str=True)

    ResultId: str | int
    ProjectName: str
    OrganizationName: str
    CftIssueDate: str

    Key: str | None = None
    ExternalDocumentURI: str | None = None
    ProjectDescription: str | None = None
    Date: str | None = None
    FileType: str | None = None
    FileSize: int | str | None = None
    LgCode: int | str | None = None
    PrefectureName: str | None = None
    CityCode: int | str | None = None
    CityName: str | None = None
    Category: str | None = None
    ProcedureType: str | None = None
    Certification: str | None = None
    TenderSubmissionDeadline: str | None = None
    OpeningTendersEvent: str | None = None
    PeriodEndTime: str | None = None

    @property
    def result_key(self) -> str:
        """ResultId as a string; upstream sends it as either type."""
        return str(self.ResultId)

    def matches(self, result_id: str | int) -> bool:
        return self.result_key == str(result_id)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class CachedSearchResult(BaseModel):
    """Envelope stored under ``search:<hash>`` in the shared store."""
    params: dict[str, str] = Field(default_factory=dict)
    results: list[Notice] = Field(default_factory=list)
    fetchedAt: int = 0
    totalCount: int = 0


# ═══════════════ TOOL ARGUMENTS ═══════════════

class SearchNoticesArgs(BaseModel):
    query: str | None = Field(None, description="Keyword query (AND, OR, NOT, ANDNOT operators allowed)")
    project_name: str | None = Field(None, description="Search by project name")
    organization_name: str | None = Field(None, description="Search by organization name")
    lg_code: str | None = Field(None, description="Two-digit prefecture code")
    category: Literal["1", "2", "3"] | None = Field(
        None, description="Category (1: goods, 2: construction, 3: services)",
    )
    procedure_type: Literal["1", "2"] | None = Field(
        None, description="Procedure type (1: open competitive bidding etc.)",
    )
    certification: Literal["A", "B", "C", "D"] | None = Field(None, description="Qualification grade")
    cft_issue_date: str | None = Field(
        None,
        pattern=ISSUE_DATE_PATTERN,
        description=(
            "Issue date (2025-12-01/ = on or after Dec 1, /2025-12-31 = up to Dec 31, "
            "2025-12-01/2025-12-31 = range, 2025-12 = from Dec 1 onwards)"
        ),
    )
    page: int = Field(1, ge=1, description="Page number (default: 1)")
    description_length: int = Field(
        100, ge=0, description="Characters of ProjectDescription to include per item (0 = none)",
    )


class GetNoticeDetailsArgs(BaseModel):
    result_id: str = Field(description="ResultId obtained from search_notices")
    project_name: str | None = Field(None, description="Project name (used for fallback search on cache miss)")
    organization_name: str | None = Field(
        None, description="Organization name (used for fallback search on cache miss)",
    )
    query: str | None = Field(None, description="Keyword query (used for fallback search on cache miss)")
    lg_code: str | None = Field(None, description="Prefecture code (used for fallback search on cache miss)")

    @field_validator("result_id", mode="before")
    @classmethod
    def _coerce_result_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


# ═══════════════ TOOL RESPONSES ═══════════════

class NoticeListItem(BaseModel):
    """Compact view of a notice for result lists."""
    ResultId: str | int
    ProjectName: str
    OrganizationName: str
    CftIssueDate: str
    ExternalDocumentURI: str | None = None
    ProjectDescription: str | None = None


class PaginatedSearchResult(BaseModel):
    currentPage: int
    totalAvailable: int
    results: list[NoticeListItem] = Field(default_factory=list)
    hasNextPage: bool = False
