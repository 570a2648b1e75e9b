"""
Pytest configuration and fixtures for StarTrack client tests.

HTTP is faked with httpx.MockTransport; each test supplies a handler that
answers by method and path.
"""
import json
from typing import Callable, Dict, List

import httpx
import pytest

from startrack import Address, Parcel, StartrackClient

from tests.factories import ACCOUNT_NUMBER, API_KEY, API_PASSWORD


class RecordingHandler:
    """
    MockTransport handler that records requests and answers from a route table.

    Routes map (METHOD, path-suffix) to an httpx.Response or a callable
    taking the request.
    """

    def __init__(self, routes: Dict[tuple, object]):
        self.routes = routes
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for (method, suffix), answer in self.routes.items():
            if request.method == method and request.url.path.endswith(suffix):
                if callable(answer):
                    return answer(request)
                # fresh copy so one route can answer repeated calls
                return httpx.Response(answer.status_code, headers=answer.headers, content=answer.content)
        return httpx.Response(404, json={"errors": [{"code": "404", "message": "No route"}]})

    def body(self, index: int = -1) -> dict:
        return json.loads(self.requests[index].content)


@pytest.fixture
def make_client() -> Callable[..., tuple]:
    """Build a StartrackClient wired to a RecordingHandler."""

    def _make(routes: Dict[tuple, object], **kwargs):
        handler = RecordingHandler(routes)
        client = StartrackClient(
            API_KEY,
            API_PASSWORD,
            ACCOUNT_NUMBER,
            transport=httpx.MockTransport(handler),
            **kwargs,
        )
        return client, handler

    return _make


@pytest.fixture
def sender() -> Address:
    return Address(
        name="Jane Sender",
        business_name="Sender Pty Ltd",
        lines=["1 Collins Street", "Level 2"],
        suburb="MELBOURNE",
        state="VIC",
        postcode="3000",
        country="AU",
        phone="0399999999",
        email="sender@example.com",
    )


@pytest.fixture
def receiver() -> Address:
    return Address(
        name="John Receiver",
        lines=["10 George Street"],
        suburb="SYDNEY",
        state="NSW",
        postcode="2000",
        country="AU",
        phone="0288888888",
        email="receiver@example.com",
    )


@pytest.fixture
def parcels() -> List[Parcel]:
    return [
        Parcel(length=10, height=20, width=5, weight=1.5, value=100.0, item_reference="A1"),
        Parcel(length=30, height=1, width=1, weight=0.5, item_reference="B2", authority_to_leave=True),
    ]
