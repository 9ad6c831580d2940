"""Query builder — tool arguments to the canonical KKJ parameter set.

Empty or missing arguments are left out; the API treats an empty value as a
filter. Every parameter set carries a Count hint so one upstream call covers
several pages.
"""

import logging
import re

from app.config import settings
from app.integrations.kkj_api import CRITERIA_FIELDS
from app.orchestrator.schemas import GetNoticeDetailsArgs, SearchNoticesArgs

logger = logging.getLogger(__name__)

SEARCH_FIELDS = {
    "query": "Query",
    "project_name": "Project_Name",
    "organization_name": "Organization_Name",
    "lg_code": "LG_Code",
    "category": "Category",
    "procedure_type": "Procedure_Type",
    "certification": "Certification",
}

# Fields get_notice_details accepts as fallback-search hints
HINT_FIELDS = {
    "project_name": "Project_Name",
    "organization_name": "Organization_Name",
    "query": "Query",
    "lg_code": "LG_Code",
}

_YEAR_MONTH_RE = re.compile(r"^\d{4}-\d{2}$")


def normalize_issue_date(value: str) -> str:
    """YYYY-MM means "from the first of that month"; other forms pass through."""
    if _YEAR_MONTH_RE.match(value):
        converted = f"{value}-01/"
        logger.info("Date format auto-converted | %s -> %s", value, converted)
        return converted
    return value


def has_search_criteria(params: dict[str, str]) -> bool:
    return any(params.get(field) for field in CRITERIA_FIELDS)


def build_search_params(args: SearchNoticesArgs, count_hint: int | None = None) -> dict[str, str]:
    params = {"Count": str(count_hint or settings.search_count_hint)}
    for arg_name, param_name in SEARCH_FIELDS.items():
        value = getattr(args, arg_name)
        if value:
            params[param_name] = value
    if args.cft_issue_date:
        params["CFT_Issue_Date"] = normalize_issue_date(args.cft_issue_date)
    return params


def build_fallback_params(args: GetNoticeDetailsArgs, count_hint: int | None = None) -> dict[str, str]:
    """Parameters for a fallback search: supplied hints only, plus Count."""
    params = {"Count": str(count_hint or settings.search_count_hint)}
    for arg_name, param_name in HINT_FIELDS.items():
        value = getattr(args, arg_name)
        if value:
            params[param_name] = value
    return params
