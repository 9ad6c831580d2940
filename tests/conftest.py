"""Shared test fixtures and configuration."""

import os

import pytest

# Session store, no auth, no Redis during tests
os.environ.setdefault("STORE_BACKEND", "session")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("API_KEYS", "")

from app.orchestrator.schemas import Notice  # noqa: E402


class FakeKKJClient:
    """Stands in for KKJClient; replays queued results or raises queued errors."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: list[dict[str, str]] = []

    async def search(self, params: dict[str, str]) -> list[Notice]:
        self.calls.append(dict(params))
        if not self.responses:
            raise AssertionError(f"unexpected upstream search: {params}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return list(response)


class FakeRedis:
    """Minimal async Redis double recording SETEX calls."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.data: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key):
        if self.fail:
            raise ConnectionError("redis down")
        return self.data.get(key)

    async def setex(self, key, ttl, value):
        if self.fail:
            raise ConnectionError("redis down")
        self.data[key] = value
        self.ttls[key] = ttl

    async def aclose(self):
        pass


def make_notice(result_id, **fields) -> Notice:
    data = {
        "ResultId": result_id,
        "ProjectName": f"Project {result_id}",
        "OrganizationName": "Sample City",
        "CftIssueDate": "2025-12-24T00:00:00+09:00",
    }
    data.update(fields)
    return Notice.model_validate(data)


def make_notices(count: int, start: int = 1) -> list[Notice]:
    return [make_notice(str(i)) for i in range(start, start + count)]


@pytest.fixture
def notice_pdf():
    return make_notice(
        "1",
        Key="dGVzdF9rZXlfZm9yX21vY2tfZGF0YV8wMDE=",
        ExternalDocumentURI="https://example.com/notice/001.pdf",
        ProjectName="Test school renovation",
        Date="2025-12-24T10:30:00+09:00",
        FileType="pdf",
        FileSize=410222,
        LgCode=99,
        PrefectureName="Sample Prefecture",
        CityCode=999999,
        CityName="Test City",
        Category="工事",
        ProjectDescription=(
            "Renovation of the Test school building, including seismic reinforcement. "
            "See the attached specification for details."
        ),
    )


@pytest.fixture
def notice_html():
    return make_notice(
        "2",
        ExternalDocumentURI="https://example.com/portal/notice/002",
        ProjectName="Sample hospital equipment upgrade",
        FileType="html",
        FileSize="",
        ProcedureType="一般競争入札",
    )


@pytest.fixture
def notice_numeric_id():
    return make_notice(1, ProjectName="Numeric id notice")


@pytest.fixture
def sample_search_xml():
    """KKJ API response with three results; the third has no ExternalDocumentURI."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<Results>
  <Version>1.0</Version>
  <SearchResults>
    <SearchHits>3</SearchHits>
    <SearchResult>
      <ResultId>1</ResultId>
      <Key>dGVzdF9rZXk=</Key>
      <ExternalDocumentURI>https://example.com/notice/001.pdf</ExternalDocumentURI>
      <ProjectName>テスト第一学校校舎改修工事</ProjectName>
      <Date>2025-12-24T10:30:00+09:00</Date>
      <FileType>pdf</FileType>
      <FileSize>410222</FileSize>
      <LgCode>99</LgCode>
      <PrefectureName>サンプル県</PrefectureName>
      <CityCode>999999</CityCode>
      <OrganizationName>サンプル県テスト市</OrganizationName>
      <CftIssueDate>2025-12-24T00:00:00+09:00</CftIssueDate>
      <Category>工事</Category>
      <ProjectDescription>  テスト第一学校の校舎改修工事を実施します。  </ProjectDescription>
      <Attachments>
        <Attachment><Name>spec.pdf</Name><Uri>https://example.com/a/1.pdf</Uri></Attachment>
        <Attachment><Name>map.pdf</Name><Uri>https://example.com/a/2.pdf</Uri></Attachment>
      </Attachments>
    </SearchResult>
    <SearchResult>
      <ResultId>2</ResultId>
      <ExternalDocumentURI>https://example.com/portal/notice/002</ExternalDocumentURI>
      <ProjectName>サンプル病院設備更新工事</ProjectName>
      <FileType>html</FileType>
      <FileSize></FileSize>
      <LgCode>01</LgCode>
      <OrganizationName>サンプル医療機構テスト病院</OrganizationName>
      <CftIssueDate>2025-12-23T00:00:00+09:00</CftIssueDate>
      <ProcedureType>一般競争入札</ProcedureType>
    </SearchResult>
    <SearchResult>
      <ResultId>3</ResultId>
      <ProjectName>公共施設外壁塗装工事</ProjectName>
      <OrganizationName>サンプル省サンプル部</OrganizationName>
      <CftIssueDate>2025-12-22T00:00:00+09:00</CftIssueDate>
    </SearchResult>
  </SearchResults>
</Results>"""


@pytest.fixture
def sample_single_xml():
    return """<?xml version="1.0" encoding="UTF-8"?>
<Results>
  <SearchResults>
    <SearchHits>1</SearchHits>
    <SearchResult>
      <ResultId>7</ResultId>
      <ProjectName>道路整備工事</ProjectName>
      <OrganizationName>国土交通省</OrganizationName>
      <CftIssueDate>2025-11-01T00:00:00+09:00</CftIssueDate>
    </SearchResult>
  </SearchResults>
</Results>"""


@pytest.fixture
def sample_empty_xml():
    return """<?xml version="1.0" encoding="UTF-8"?>
<Results>
  <SearchResults>
    <SearchHits>0</SearchHits>
  </SearchResults>
</Results>"""
