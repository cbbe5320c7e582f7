"""Shared fixtures: canned manifest/catalog payloads and a fake HTTP session."""

import json
import threading

import pytest
import requests

MANIFEST_URL = "https://mars.example/msl-raw-images/image/image_manifest.json"


def catalog_url(sol):
    return f"https://mars.example/msl-raw-images/image/images_sol{sol}.json"


def make_response(url, payload=None, status=200, body=None):
    """Build a real ``requests.Response`` holding ``payload`` as JSON."""
    response = requests.Response()
    response.status_code = status
    response.url = url
    response.encoding = "utf-8"
    if body is None:
        body = json.dumps(payload)
    response._content = body.encode("utf-8")
    return response


def image_payload(item_name, sol="00002", sample_type="full", instrument="MAST_LEFT"):
    return {
        "sol": sol,
        "instrument": instrument,
        "urlList": f"https://mars.example/raw/{item_name}.JPG",
        "lmst": "Sol-00002M10:12:13.000",
        "utc": "2012-08-08T04:57:42Z",
        "sampleType": sample_type,
        "itemName": item_name,
    }


def manifest_payload(sols=(1, 2, 3)):
    return {
        "latest_sol": max(sols) if sols else 0,
        "num_images": 10 * len(sols),
        "sols": [
            {
                "sol": sol,
                "num_images": 10,
                "catalog_url": catalog_url(sol),
                "last_updated": "2012-08-09T12:00:00Z",
            }
            for sol in sols
        ],
    }


def catalog_payload(sol, images):
    return {"sol": sol, "images": images}


class FakeSession:
    """
    Stand-in for ``requests.Session`` that answers GETs from a route table.

    A route value may be a ``requests.Response``, an exception instance to
    raise, or a callable taking ``(url, timeout)``.
    """

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.requested = []
        self.timeouts = []
        self.closed = False
        self._lock = threading.Lock()

    def get(self, url, timeout=None):
        with self._lock:
            self.requested.append(url)
            self.timeouts.append(timeout)
        route = self.routes.get(url)
        if route is None:
            raise requests.ConnectionError(f"No route to {url}")
        if isinstance(route, BaseException):
            raise route
        if callable(route):
            return route(url, timeout)
        return route

    def close(self):
        self.closed = True


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def three_sol_routes():
    """Manifest with sols 1-3; sol 2 has one thumbnail among three entries."""
    return {
        MANIFEST_URL: make_response(MANIFEST_URL, manifest_payload((1, 2, 3))),
        catalog_url(1): make_response(
            catalog_url(1),
            catalog_payload(1, [image_payload("SOL1_A", sol="00001")]),
        ),
        catalog_url(2): make_response(
            catalog_url(2),
            catalog_payload(
                2,
                [
                    image_payload("SOL2_A"),
                    image_payload("SOL2_THUMB", sample_type="thumbnail"),
                    image_payload("SOL2_B", sample_type="subframe"),
                ],
            ),
        ),
        catalog_url(3): make_response(
            catalog_url(3),
            catalog_payload(
                3,
                [image_payload("SOL3_A", sol="00003"), image_payload("SOL3_B", sol="00003")],
            ),
        ),
    }
