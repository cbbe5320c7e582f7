"""
Tests for scripts/cache_latest.py
"""

import importlib.util
import json
import os
import signal
import sys
import threading
from pathlib import Path

import pytest

from mars_raw_images.data import image_cache as image_cache_module
from mars_raw_images.data.image_cache import ImageCache
from mars_raw_images.data.raw_images_client import RawImagesClient
from tests.conftest import MANIFEST_URL, FakeSession, catalog_url

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "cache_latest.py"


@pytest.fixture
def script(monkeypatch):
    spec = importlib.util.spec_from_file_location("cache_latest", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    monkeypatch.setattr(image_cache_module, "_image_cache", ImageCache())
    return module


def _use_session(monkeypatch, script, session):
    monkeypatch.setattr(
        script,
        "RawImagesClient",
        lambda timeout=None: RawImagesClient(timeout=timeout, session=session),
    )


def test_prints_latest_images_as_json(script, monkeypatch, capsys, three_sol_routes):
    _use_session(monkeypatch, script, FakeSession(three_sol_routes))

    code = script.main(["--manifest-url", MANIFEST_URL, "--sols", "2", "--count", "3", "--json"])

    assert code == 0
    output = json.loads(capsys.readouterr().out)
    assert [i["itemName"] for i in output["images"]] == ["SOL2_A", "SOL2_B", "SOL3_A"]


def test_manifest_failure(script, monkeypatch):
    _use_session(monkeypatch, script, FakeSession())

    assert script.main(["--manifest-url", MANIFEST_URL]) == 1


def test_not_enough_images(script, monkeypatch, capsys, three_sol_routes):
    """Fewer cached images than requested prints what exists and exits 2"""
    _use_session(monkeypatch, script, FakeSession(three_sol_routes))

    code = script.main(["--manifest-url", MANIFEST_URL, "--sols", "1", "--count", "5", "--json"])

    assert code == 2
    output = json.loads(capsys.readouterr().out)
    assert len(output["images"]) == 2


@pytest.mark.skipif(sys.platform == "win32", reason="needs POSIX signal delivery")
def test_interrupt_cancels_load(script, monkeypatch, capsys, three_sol_routes):
    """Ctrl-C while a catalog is in flight cancels the load and exits 1"""
    release = threading.Event()
    sol3 = three_sol_routes[catalog_url(3)]

    def interrupted_route(url, timeout):
        os.kill(os.getpid(), signal.SIGINT)
        release.wait(5)
        return sol3

    three_sol_routes[catalog_url(3)] = interrupted_route
    _use_session(monkeypatch, script, FakeSession(three_sol_routes))
    handler_before = signal.getsignal(signal.SIGINT)

    try:
        code = script.main(["--manifest-url", MANIFEST_URL, "--sols", "2", "--json"])
    finally:
        release.set()

    assert code == 1
    assert capsys.readouterr().out == ""
    assert "SOL3_A" not in {i.item_name for i in image_cache_module.get_image_cache().snapshot()}
    assert signal.getsignal(signal.SIGINT) is handler_before
