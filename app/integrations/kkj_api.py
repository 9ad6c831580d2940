"""KKJ (官公需情報ポータルサイト) search API integration.

Docs: http://www.kkj.go.jp/doc/ja/api_guide.pdf
Endpoint: http://www.kkj.go.jp/api/  (GET, XML response)

The API only supports search; there is no lookup by ResultId.
"""

import logging
import re
import time
from typing import Any
from xml.etree import ElementTree

import httpx
from pydantic import ValidationError as RecordError

from app.config import settings
from app.errors import (
    UpstreamHttpError,
    UpstreamNetworkError,
    UpstreamParseError,
    ValidationError,
)
from app.orchestrator.schemas import Notice

logger = logging.getLogger(__name__)

# At least one of these must be present or the API rejects the request
CRITERIA_FIELDS = ("Query", "Project_Name", "Organization_Name", "LG_Code")

_INTEGER_RE = re.compile(r"^-?(0|[1-9]\d*)$")


class KKJClient:
    """Async client for the KKJ public procurement search API."""

    def __init__(self, base_url: str | None = None, timeout: int | None = None):
        self.base_url = base_url or settings.kkj_api_base_url
        self.timeout = timeout if timeout is not None else settings.kkj_timeout_seconds

    async def search(self, params: dict[str, str]) -> list[Notice]:
        """Run one search and return every notice in the response.

        Raises UpstreamHttpError for non-2xx answers and UpstreamNetworkError
        for transport failures. An empty match set is an empty list.
        """
        if not any(params.get(field) for field in CRITERIA_FIELDS):
            raise ValidationError(
                "At least one of Query, Project_Name, Organization_Name, or LG_Code must be specified"
            )

        query = {k: str(v) for k, v in params.items() if v not in (None, "")}

        start = time.monotonic()
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.base_url, params=query)
        except httpx.HTTPError as e:
            elapsed_ms = int((time.monotonic() - start) * 1000)
            logger.error("KKJ request error | %dms | %s", elapsed_ms, str(e)[:200])
            raise UpstreamNetworkError(e) from e

        elapsed_ms = int((time.monotonic() - start) * 1000)
        if not response.is_success:
            logger.warning("KKJ | status=%d | %dms | params=%s", response.status_code, elapsed_ms, query)
            raise UpstreamHttpError(response.status_code)

        records = self._parse_xml(response.text)
        notices = self._to_notices(records)
        logger.info("KKJ OK | results=%d | %dms | params=%s", len(notices), elapsed_ms, query)
        return notices

    def _to_notices(self, records: list[dict[str, Any]]) -> list[Notice]:
        """Validate records one by one; a malformed record is logged and skipped."""
        notices = []
        for record in records:
            try:
                notices.append(Notice.model_validate(record))
            except RecordError as e:
                logger.warning(
                    "KKJ record skipped | result_id=%s | %s",
                    record.get("ResultId"), str(e).replace("\n", " ")[:200],
                )
        return notices

    def _parse_xml(self, xml_text: str) -> list[dict[str, Any]]:
        """Translate a KKJ XML response into one dict per SearchResult."""
        if not xml_text.strip():
            return []
        try:
            root = ElementTree.fromstring(xml_text)
        except ElementTree.ParseError as e:
            logger.error("KKJ XML parse error: %s", str(e)[:200])
            raise UpstreamParseError(f"Failed to parse XML: {e}") from e

        return [_element_to_dict(elem) for elem in root.iterfind(".//SearchResults/SearchResult")]


def _element_to_dict(elem: ElementTree.Element) -> dict[str, Any]:
    """Map child elements to keys; repeated children become lists."""
    data: dict[str, Any] = {f"@_{k}": _coerce_scalar(v) for k, v in elem.attrib.items()}
    for child in elem:
        value = _element_value(child)
        if child.tag in data:
            existing = data[child.tag]
            if not isinstance(existing, list):
                data[child.tag] = [existing]
            data[child.tag].append(value)
        else:
            data[child.tag] = value
    return data


def _element_value(elem: ElementTree.Element) -> Any:
    text = (elem.text or "").strip()
    if len(elem) == 0 and not elem.attrib:
        return _coerce_scalar(text)
    data = _element_to_dict(elem)
    if text:
        data["#text"] = _coerce_scalar(text)
    return data


def _coerce_scalar(text: str) -> Any:
    """Plain integers become int; everything else (leading zeros included) stays text."""
    if _INTEGER_RE.match(text):
        return int(text)
    return text
