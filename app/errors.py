"""Domain exceptions shared by the upstream client, stores and tool handlers.

Transport edges (router, FastAPI, stdio server) turn these into error payloads.
"""

HINT_FIELDS = ("project_name", "organization_name", "query", "lg_code")

DATE_FORMATS_HINT = "YYYY-MM-DD/, /YYYY-MM-DD, YYYY-MM-DD/YYYY-MM-DD"


class KKJError(Exception):
    """Base class for every error raised by this service."""


class ValidationError(KKJError):
    """Search request carries no criteria the upstream API accepts."""


class UpstreamError(KKJError):
    """The KKJ search API could not be used."""


class UpstreamHttpError(UpstreamError):
    """Upstream answered with a non-2xx status."""

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(f"HTTP error! status: {status_code} - {_status_hint(status_code)}")


class UpstreamNetworkError(UpstreamError):
    """DNS failure, refused connection, timeout and other transport problems."""

    def __init__(self, cause: BaseException):
        self.cause = cause
        super().__init__(f"Failed to fetch data from API: {cause}")


class UpstreamParseError(UpstreamError):
    """Upstream body is not well-formed XML."""


class NoticeLookupError(KKJError):
    """A detail lookup failed for a specific ResultId.

    The message of every subclass names the ResultId, which is how the
    resolver tells an already descriptive error from a raw one.
    """

    def __init__(self, result_id: str, message: str):
        self.result_id = result_id
        super().__init__(message)


class CacheMissGuidedError(NoticeLookupError):
    def __init__(self, result_id: str):
        super().__init__(
            result_id,
            f'ResultId "{result_id}" was not found in the cache.\n\n'
            "To retrieve this notice, try one of the following:\n\n"
            "1. Run search_notices first so the notice is loaded into the cache.\n\n"
            "2. Call get_notice_details again with hint parameters so a fallback search can run:\n"
            '   - project_name: project name (e.g. "road maintenance")\n'
            '   - organization_name: organization name (e.g. "Ministry of Land")\n'
            '   - query: keyword query (e.g. "construction AND Tokyo")\n'
            '   - lg_code: prefecture code (e.g. "13" for Tokyo)\n\n'
            "Note: the KKJ API cannot look up a notice by ResultId directly, so the notice\n"
            "is extracted from the results of a search built from these parameters.",
        )


class FallbackNotFoundError(NoticeLookupError):
    def __init__(self, result_id: str, result_count: int, count_hint: int):
        self.result_count = result_count
        super().__init__(
            result_id,
            f'ResultId "{result_id}" was not found.\n\n'
            f"The fallback search returned {result_count} notices, "
            "but none of them had this ResultId.\n\n"
            "Please check:\n"
            "- that the ResultId is correct\n"
            f"- that the hints ({', '.join(HINT_FIELDS)}) describe the notice\n"
            f"- that the notice is within the fetched window (latest {count_hint} results)",
        )


class FallbackApiError(NoticeLookupError):
    def __init__(self, result_id: str, cause: BaseException):
        self.cause = cause
        super().__init__(
            result_id,
            f'Fallback search for ResultId "{result_id}" failed with an API error: {cause}',
        )


def _status_hint(status_code: int) -> str:
    if status_code == 400:
        return f"Invalid request parameters. Check the date format ({DATE_FORMATS_HINT})."
    if status_code == 404:
        return "API endpoint not found."
    if status_code == 500:
        return (
            "A server error occurred. Check the parameter formats.\n"
            f"In particular, check the date range format ({DATE_FORMATS_HINT})."
        )
    if status_code == 503:
        return "The service is temporarily unavailable. Please wait a while and retry later."
    return "An unexpected error occurred."
