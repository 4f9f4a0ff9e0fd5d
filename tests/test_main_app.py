"""
test_main_app.py - Background extraction worker of the main window
Run with: pytest tests/test_main_app.py -v
"""
import os
import queue
import sys
from types import SimpleNamespace

import pytest

pytest.importorskip("tkinter")

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import main_app
from extraction import COMMUNICATION_ERROR, ExtractionError
from models import ExtractedRecord
from main_app import RateioApp


def run_worker(monkeypatch, extract):
    monkeypatch.setattr(main_app, "extract_from_image", extract)
    app = SimpleNamespace(_pending=queue.Queue())
    RateioApp._extract_worker(app, b"img", "image/png", "gemini-test")
    return app._pending.get_nowait()


class TestExtractWorker:

    def test_success_is_queued(self, monkeypatch):
        record = ExtractedRecord(1.0, [], [])
        assert run_worker(monkeypatch, lambda *a, **k: record) == ("ok", record)

    def test_extraction_error_message_is_queued(self, monkeypatch):
        def fail(*a, **k):
            raise ExtractionError("falhou")

        assert run_worker(monkeypatch, fail) == ("error", "falhou")

    def test_unexpected_error_still_releases_ui(self, monkeypatch):
        def crash(*a, **k):
            raise RuntimeError("boom")

        assert run_worker(monkeypatch, crash) == ("error", COMMUNICATION_ERROR)
