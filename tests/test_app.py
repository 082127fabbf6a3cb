"""Tests for the Flask API."""

from __future__ import annotations

import json

import pytest

import app as app_module


class InlineThread:
    """Runs the target immediately instead of in the background."""

    def __init__(self, target, args=(), daemon=None):
        self.target = target
        self.args = args

    def start(self):
        self.target(*self.args)

    def join(self):
        pass


@pytest.fixture
def trace_path(tmp_path, monkeypatch):
    path = tmp_path / "trace.json"
    monkeypatch.setattr(app_module, "TRACE_PATH", str(path))
    return path


@pytest.fixture
def client(trace_path):
    app_module.app.config["TESTING"] = True
    return app_module.app.test_client()


@pytest.fixture
def inline_threads(monkeypatch):
    monkeypatch.setattr(app_module.threading, "Thread", InlineThread)


def test_trace_not_ready_without_file(client):
    response = client.get("/trace")
    assert response.status_code == 200
    assert response.get_json() == {"ready": False, "events": []}


def test_solve_writes_trace(client, inline_threads):
    response = client.post("/solve", json={"words": ["a", "a"], "result": "b"})
    assert response.status_code == 200
    body = response.get_json()
    assert body["status"] == "started"
    assert body["words"] == ["A", "A"]
    assert body["result"] == "B"

    trace = client.get("/trace").get_json()
    assert trace["ready"] is True
    end = trace["events"][-2]
    assert end["type"] == "END"
    assert end["result"] == {"A": 1, "B": 2}


def test_solve_passes_options(client, inline_threads):
    client.post("/solve", json={
        "words": ["A", "A"], "result": "B", "presets": {"A": 3}, "workers": 2,
    })
    events = client.get("/trace").get_json()["events"]
    assert events[0]["workers"] == 2
    assert events[-2]["result"] == {"A": 3, "B": 6}


def test_solve_reports_no_solution(client, inline_threads):
    client.post("/solve", json={"words": ["A"], "result": "B"})
    trace = client.get("/trace").get_json()
    assert trace["ready"] is True
    assert trace["events"][-2]["result"] is None
    assert trace["events"][-2]["reason"] == "no solution found"


@pytest.mark.parametrize(
    "payload",
    [
        {"words": [], "result": "B"},
        {"words": ["A1"], "result": "B"},
        {"words": ["A"], "result": ""},
        {"words": ["A"], "result": "B", "workers": 0},
        {"words": ["A"], "result": "B", "presets": ["A"]},
        {"words": ["A"], "result": "B", "workers": 11},
        {"words": ["A"], "result": "B", "workers": 1_000_000_000},
        {"words": ["A"], "result": "B", "workers": True},
        {"words": ["A"], "result": "B", "allow_leading_zero": "false"},
        {"words": ["A"], "result": "B", "case_sensitive": 1},
    ],
)
def test_solve_rejects_bad_puzzle(client, inline_threads, trace_path, payload):
    response = client.post("/solve", json=payload)
    assert response.status_code == 400
    assert "error" in response.get_json()
    assert not trace_path.exists()


def test_solve_rejects_non_json(client):
    response = client.post("/solve", data="nope", content_type="text/plain")
    assert response.status_code == 400


def test_trace_waits_for_solver_done(client, trace_path):
    trace_path.write_text(json.dumps([{"type": "START"}]), encoding="utf-8")
    trace = client.get("/trace").get_json()
    assert trace == {"ready": False, "events": [{"type": "START"}]}


def test_trace_tolerates_partial_file(client, trace_path, monkeypatch):
    monkeypatch.setattr(app_module.time, "sleep", lambda _: None)
    trace_path.write_text('[{"type": "ST', encoding="utf-8")
    assert client.get("/trace").get_json() == {"ready": False, "events": []}


def test_clear_removes_trace(client, trace_path):
    trace_path.write_text("[]", encoding="utf-8")
    assert client.post("/clear").get_json() == {"cleared": True}
    assert not trace_path.exists()
    assert client.post("/clear").get_json() == {"cleared": True}


def test_run_solver_logs_errors(trace_path, monkeypatch, caplog):
    def broken(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(app_module, "solve_cryptarithm", broken)
    app_module.run_solver(["A"], "B", {})
    assert "Solver error" in caplog.text
