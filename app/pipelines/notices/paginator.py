"""Paginator — fixed-size pages over a result set, projected to list items."""

from app.config import settings
from app.orchestrator.schemas import Notice, NoticeListItem, PaginatedSearchResult

ELLIPSIS = "…"


def truncate(text: str, length: int) -> str:
    if len(text) <= length:
        return text
    return text[:length] + ELLIPSIS


def project_notice(notice: Notice, description_length: int = 100) -> NoticeListItem:
    """Reduce a notice to the fields a result list shows."""
    description = None
    if description_length > 0 and notice.ProjectDescription:
        description = truncate(notice.ProjectDescription, description_length)
    return NoticeListItem(
        ResultId=notice.ResultId,
        ProjectName=notice.ProjectName,
        OrganizationName=notice.OrganizationName,
        CftIssueDate=notice.CftIssueDate,
        ExternalDocumentURI=notice.ExternalDocumentURI,
        ProjectDescription=description,
    )


def paginate(
    notices: list[Notice],
    page: int,
    page_size: int | None = None,
    description_length: int = 100,
) -> PaginatedSearchResult:
    """Slice page `page` (1-based). Pages past the end are empty."""
    size = page_size or settings.page_size
    start = (page - 1) * size
    end = start + size
    return PaginatedSearchResult(
        currentPage=page,
        totalAvailable=len(notices),
        results=[project_notice(n, description_length) for n in notices[start:end]],
        hasNextPage=len(notices) > end,
    )
