"""
Pytest configuration and fixtures
"""

import json
import time

import httpx
import pytest


def make_page(page_id, name="Ann", email="ann@example.com", **extra_properties):
    """Build a Notion page dict with a title and an email property"""
    properties = {
        "Name": {
            "id": "title",
            "type": "title",
            "title": [{"type": "text", "plain_text": name}] if name is not None else []
        },
        "Email": {"id": "%3AEm", "type": "email", "email": email},
    }
    properties.update(extra_properties)
    return {
        "object": "page",
        "id": page_id,
        "url": f"https://www.notion.so/{page_id}",
        "properties": properties
    }


class FakeNotion:
    """
    Scripted Notion query endpoint for httpx.MockTransport.

    Each entry of `responses` is either a list of records (a successful page)
    or an httpx.Response / exception to return or raise for that request.
    """

    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []
        self.request_times = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.request_times.append(time.monotonic())
        self.requests.append(json.loads(request.content or b"{}"))

        index = len(self.requests) - 1
        scripted = self.responses[index]
        if isinstance(scripted, Exception):
            raise scripted
        if isinstance(scripted, httpx.Response):
            return scripted

        has_more = index < len(self.responses) - 1
        return httpx.Response(200, json={
            "object": "list",
            "results": scripted,
            "next_cursor": f"cursor-{index + 1}" if has_more else None,
            "has_more": has_more
        })

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def sample_pages():
    """Three pages of a users collection"""
    return [
        make_page("r1", name=" Ann ", email=""),
        make_page("r2", name="Bob", email="bob@example.com"),
        make_page("r3", name=None, email=None),
    ]


@pytest.fixture
def full_properties():
    """One property of every supported kind, in a fixed order"""
    return {
        "Name": {"type": "title", "title": [{"plain_text": " Acme "}, {"plain_text": "Corp"}]},
        "Notes": {"type": "rich_text", "rich_text": [{"plain_text": "first line"}]},
        "Email": {"type": "email", "email": " info@acme.io "},
        "Phone": {"type": "phone_number", "phone_number": None},
        "Site": {"type": "url", "url": "https://acme.io"},
        "Owner": {
            "type": "people",
            "people": [
                {"object": "user", "name": "Ann", "person": {"email": "ann@acme.io"}},
                {"object": "user", "name": "Build Bot", "bot": {}}
            ]
        },
        "Deals": {"type": "relation", "relation": [{"id": "d1"}, {"id": "d2"}]},
        "Stage": {"type": "select", "select": {"id": "s1", "name": "Lead", "color": "red"}},
        "Contacts": {
            "type": "rollup",
            "rollup": {
                "type": "array",
                "array": [
                    {"type": "title", "title": [{"plain_text": "Ann "}]},
                    {"type": "title", "title": [{"plain_text": " Bob"}]}
                ],
                "function": "show_original"
            }
        },
        "Size": {"type": "number", "number": 42},
    }


@pytest.fixture
def page_factory():
    return make_page


@pytest.fixture
def fake_notion():
    """Factory: fake_notion([[...records...], [...]]) -> FakeNotion"""
    return FakeNotion
