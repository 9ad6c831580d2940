"""Tool router — maps agent tool calls to the notice pipeline.

Responsibilities:
  - Describe the available tools (name, description, argument schema)
  - Validate arguments with the pydantic argument models
  - Dispatch to NoticePipeline with the caller's result store
  - Turn failures into agent-protocol error payloads
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as ArgumentsError

from app.errors import KKJError
from app.orchestrator.schemas import GetNoticeDetailsArgs, SearchNoticesArgs
from app.pipelines.notices import NoticePipeline
from app.services.result_store import ResultStore

logger = logging.getLogger(__name__)

SEARCH_DESCRIPTION = (
    "Search notices on the KKJ public procurement portal. Returns summaries, "
    "10 per page. Use get_notice_details for the full record of a notice."
)
DETAILS_DESCRIPTION = (
    "Get the full record of one notice (description, attachments, dates). "
    "Pass a ResultId from search_notices. If the notice is not cached, pass "
    "project_name, organization_name, query or lg_code so it can be searched again."
)


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    arguments: type[BaseModel]


TOOLS = {
    "search_notices": ToolSpec("search_notices", SEARCH_DESCRIPTION, SearchNoticesArgs),
    "get_notice_details": ToolSpec("get_notice_details", DETAILS_DESCRIPTION, GetNoticeDetailsArgs),
}


class UnknownToolError(KeyError):
    pass


class ToolRouter:
    """Dispatcher for the two notice tools."""

    def __init__(self, pipeline: NoticePipeline | None = None):
        self.pipeline = pipeline or NoticePipeline()

    def has_tool(self, name: str) -> bool:
        return name in TOOLS

    def list_tools(self) -> list[dict[str, Any]]:
        return [
            {
                "name": spec.name,
                "description": spec.description,
                "inputSchema": spec.arguments.model_json_schema(),
            }
            for spec in TOOLS.values()
        ]

    async def dispatch(self, name: str, arguments: dict[str, Any], store: ResultStore) -> dict[str, Any]:
        """Run a tool and return its JSON result. Raises on any failure."""
        spec = TOOLS.get(name)
        if spec is None:
            raise UnknownToolError(name)

        args = spec.arguments.model_validate(arguments or {})
        if name == "search_notices":
            result = await self.pipeline.search_notices(args, store)
            return result.model_dump(mode="json", exclude_none=True)
        notice = await self.pipeline.get_notice_details(args, store)
        return notice.to_payload()

    async def call_tool(self, name: str, arguments: dict[str, Any], store: ResultStore) -> dict[str, Any]:
        """Run a tool and wrap the outcome in a {content, isError} envelope."""
        try:
            result = await self.dispatch(name, arguments, store)
        except UnknownToolError:
            return _error_payload(f"Unknown tool: {name}")
        except (KKJError, ArgumentsError) as e:
            logger.warning("Tool failed | tool=%s | %s", name, str(e)[:300])
            return _error_payload(f"Error: {e}")
        except Exception as e:
            logger.exception("Tool crashed | tool=%s", name)
            return _error_payload(f"Error: {e}")

        return {
            "content": [{"type": "text", "text": json.dumps(result, ensure_ascii=False, indent=2)}],
            "isError": False,
        }


def _error_payload(text: str) -> dict[str, Any]:
    return {"content": [{"type": "text", "text": text}], "isError": True}
