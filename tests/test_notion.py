# tests/test_notion.py
import json

import httpx
import pytest

from mcp_cloud_browser.collaboration import extract_page_id
from mcp_cloud_browser.dispatch import ToolDispatcher
from mcp_cloud_browser.errors import CollaborationError, InvalidPageUrlError
from mcp_cloud_browser.tools.notion import build_entry_properties

from _utils import FakeProvider, make_context, notion_client

PAGE_ID = "0123456789abcdef0123456789abcdef"


class Recorder:
    """MockTransport handler that records requests and replies from a queue."""

    def __init__(self, *responses):
        self.requests = []
        self._responses = list(responses) or [httpx.Response(200, json={})]

    def __call__(self, request):
        self.requests.append(request)
        if len(self._responses) > 1:
            return self._responses.pop(0)
        return self._responses[0]

    @property
    def last(self):
        return self.requests[-1]

    def last_json(self):
        return json.loads(self.last.content)


def call(event_loop, ctx, name, arguments=None):
    return event_loop.run_until_complete(ToolDispatcher(ctx).dispatch(name, arguments))


def test_extract_page_id_from_url_variants():
    assert extract_page_id(f"https://www.notion.so/My-Page-{PAGE_ID}") == PAGE_ID
    assert extract_page_id("https://notion.so/01234567-89ab-cdef-0123-456789abcdef?pvs=4") == PAGE_ID


def test_extract_page_id_rejects_url_without_id():
    with pytest.raises(InvalidPageUrlError):
        extract_page_id("https://www.notion.so/default-page")


def test_read_page_uses_configured_default(event_loop):
    rec = Recorder(httpx.Response(200, json={"object": "list", "results": []}))
    provider = FakeProvider()
    ctx = make_context(provider=provider, notion=notion_client(rec))

    result = call(event_loop, ctx, "notion_read_page", {})

    assert result.is_error is False
    assert json.loads(result.text) == {"object": "list", "results": []}
    assert rec.last.method == "GET"
    assert rec.last.url.path == f"/v1/blocks/{PAGE_ID}/children"
    assert rec.last.headers["Authorization"] == "Bearer secret_test"
    assert rec.last.headers["Notion-Version"] == "2022-06-28"
    assert provider.connects == 0
    assert len(ctx.registry) == 0


def test_read_page_with_invalid_url(event_loop):
    rec = Recorder()
    ctx = make_context(notion=notion_client(rec))

    result = call(event_loop, ctx, "notion_read_page", {"pageUrl": "https://example.com/nothing"})
    assert result.is_error is True
    assert result.text == "Failed to read page: Could not extract page ID from Notion URL"
    assert rec.requests == []


@pytest.mark.parametrize(
    "tool, message",
    [("notion_update_page", "Page updated successfully"), ("notion_append_content", "Content appended successfully")],
)
def test_update_and_append_add_paragraph(event_loop, tool, message):
    rec = Recorder()
    ctx = make_context(notion=notion_client(rec))

    result = call(event_loop, ctx, tool, {"pageId": "p1", "content": "Hello"})

    assert result.text == message
    assert rec.last.method == "PATCH"
    assert rec.last.url.path == "/v1/blocks/p1/children"
    block = rec.last_json()["children"][0]
    assert block["type"] == "paragraph"
    assert block["paragraph"]["rich_text"][0]["text"]["content"] == "Hello"


def test_read_comments(event_loop):
    rec = Recorder(httpx.Response(200, json={"results": [{"id": "c1"}]}))
    ctx = make_context(notion=notion_client(rec))

    result = call(event_loop, ctx, "notion_read_comments", {"pageId": "p1"})

    assert json.loads(result.text) == {"results": [{"id": "c1"}]}
    assert rec.last.url.path == "/v1/comments"
    assert rec.last.url.params["block_id"] == "p1"


def test_add_comment(event_loop):
    rec = Recorder()
    ctx = make_context(notion=notion_client(rec))

    result = call(event_loop, ctx, "notion_add_comment", {"pageId": "p1", "comment": "LGTM"})

    assert result.text == "Comment added successfully"
    assert rec.last.method == "POST"
    assert rec.last_json() == {
        "parent": {"page_id": "p1"},
        "rich_text": [{"text": {"content": "LGTM"}}],
    }


def test_add_to_database(event_loop):
    rec = Recorder(httpx.Response(200, json={"id": "aaaa-bbbb-cccc"}))
    ctx = make_context(notion=notion_client(rec))

    result = call(
        event_loop,
        ctx,
        "notion_add_to_database",
        {"title": "Bug", "tags": ["p1", "ui"], "content": "Steps to reproduce"},
    )

    assert result.text == "Created database entry: https://notion.so/aaaabbbbcccc"
    body = rec.last_json()
    assert rec.last.url.path == "/v1/pages"
    assert body["parent"] == {"database_id": "db-default"}
    assert body["properties"]["Name"]["title"][0]["text"]["content"] == "Bug"
    assert body["properties"]["Tags"]["multi_select"] == [{"name": "p1"}, {"name": "ui"}]
    assert body["children"][0]["paragraph"]["rich_text"][0]["text"]["content"] == "Steps to reproduce"


def test_add_to_database_explicit_id_without_content(event_loop):
    rec = Recorder(httpx.Response(200, json={"id": "x"}))
    ctx = make_context(notion=notion_client(rec))

    call(event_loop, ctx, "notion_add_to_database", {"databaseId": "db-1", "title": "T"})
    body = rec.last_json()
    assert body["parent"] == {"database_id": "db-1"}
    assert "children" not in body
    assert "Tags" not in body["properties"]


def test_build_entry_properties_extra_overrides():
    props = build_entry_properties("T", ["a"], {"Tags": {"multi_select": []}, "Status": {"select": {"name": "Open"}}})
    assert props["Tags"] == {"multi_select": []}
    assert props["Status"] == {"select": {"name": "Open"}}


@pytest.mark.parametrize(
    "status, text",
    [
        (401, "Invalid or expired Notion token"),
        (403, "Forbidden - check integration permissions"),
        (404, "Resource not found"),
        (429, "Rate limit exceeded"),
    ],
)
def test_error_statuses_become_failure_results(event_loop, status, text):
    ctx = make_context(notion=notion_client(Recorder(httpx.Response(status, json={}))))

    result = call(event_loop, ctx, "notion_read_comments", {"pageId": "p1"})
    assert result.is_error is True
    assert result.text == f"Failed to read comments: {text}"


def test_generic_error_includes_api_message(event_loop):
    client = notion_client(Recorder(httpx.Response(400, json={"message": "body failed validation"})))

    with pytest.raises(CollaborationError) as ei:
        event_loop.run_until_complete(client.create_comment("p1", "x"))
    assert str(ei.value) == "Notion API error (HTTP 400): body failed validation"
    assert ei.value.status_code == 400


def test_network_error_is_wrapped(event_loop):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = notion_client(handler)
    with pytest.raises(CollaborationError) as ei:
        event_loop.run_until_complete(client.list_comments("p1"))
    assert str(ei.value) == "Network error: connection refused"
    assert ei.value.status_code is None
