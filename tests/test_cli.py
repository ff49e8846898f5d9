from __future__ import annotations

import json
from datetime import datetime, timezone

import httpx
import pandas as pd
from typer.testing import CliRunner

from prodgrid.cli import main as cli_main
from prodgrid.cli.main import app
from prodgrid.client import ScheduleClient
from prodgrid.telemetry import read_jsonl

runner = CliRunner()


def _patch_client(monkeypatch, handler) -> None:
    class _MockClient(ScheduleClient):
        def __init__(self, base_url=None, *, timeout=ScheduleClient.TIMEOUT, transport=None):
            super().__init__(base_url, timeout=timeout, transport=httpx.MockTransport(handler))

    monkeypatch.setattr(cli_main, "ScheduleClient", _MockClient)


def test_layout_daily_writes_csv(tmp_path, examples_dir):
    out = tmp_path / "layout.csv"
    result = runner.invoke(
        app,
        [
            "layout",
            str(examples_dir / "response.json"),
            "--origin",
            "2024-01-25T08:00:00",
            "--out",
            str(out),
        ],
    )
    assert result.exit_code == 0, result.output
    assert "4 block(s) normalised" in result.output
    df = pd.read_csv(out)
    assert len(df) == 4
    assert set(df["machine_id"]) == {"Linea_1", "Linea_2"}
    assert df["top_px"].min() == 640


def test_layout_individual_splits_overnight_order(tmp_path, examples_dir):
    out = tmp_path / "week.csv"
    result = runner.invoke(
        app,
        [
            "layout",
            str(examples_dir / "response.json"),
            "--request",
            str(examples_dir / "request.yaml"),
            "--mode",
            "individual",
            "-m",
            "Linea_2",
            "--out",
            str(out),
        ],
    )
    assert result.exit_code == 0, result.output
    df = pd.read_csv(out)
    assert list(df["block_id"]) == ["OT1004", "OT1004"]
    assert list(df["is_continuation"]) == [False, True]
    assert list(df["day"]) == ["2024-01-25", "2024-01-26"]


def test_layout_requires_origin(examples_dir):
    result = runner.invoke(app, ["layout", str(examples_dir / "response.json")])
    assert result.exit_code == 1
    assert "--origin" in result.output


def test_layout_unknown_profile(examples_dir):
    result = runner.invoke(
        app,
        ["layout", str(examples_dir / "response.json"), "--origin", "2024-01-25T08:00:00", "--profile", "huge"],
    )
    assert result.exit_code == 1
    assert "Unknown profile" in result.output


def test_layout_empty_day(examples_dir):
    result = runner.invoke(
        app,
        [
            "layout",
            str(examples_dir / "response.json"),
            "--origin",
            "2024-01-25T08:00:00",
            "--date",
            "2024-01-28",
        ],
    )
    assert result.exit_code == 0, result.output
    assert "No blocks in the visible window." in result.output


def test_logs_command(examples_dir, tmp_path):
    result = runner.invoke(app, ["logs", str(examples_dir / "response.json")])
    assert result.exit_code == 0
    assert result.output.splitlines() == ["scheduler: 4 orders placed", "scheduler: 1 order late"]

    empty = tmp_path / "empty.json"
    empty.write_text(json.dumps({"schedule": []}), encoding="utf-8")
    result = runner.invoke(app, ["logs", str(empty)])
    assert result.exit_code == 0
    assert "No log lines in response." in result.output


def test_profiles_command():
    result = runner.invoke(app, ["profiles"])
    assert result.exit_code == 0
    for name in ("default", "compact", "tall"):
        assert name in result.output


def test_fetch_saves_response_and_telemetry(monkeypatch, tmp_path, examples_dir):
    payload = json.loads((examples_dir / "response.json").read_text(encoding="utf-8"))
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=payload)

    _patch_client(monkeypatch, handler)
    out = tmp_path / "response.json"
    log_path = tmp_path / "fetch.jsonl"
    result = runner.invoke(
        app,
        [
            "fetch",
            str(examples_dir / "request.yaml"),
            "--url",
            "http://backend",
            "--date",
            "2024-02-01",
            "--out",
            str(out),
            "--telemetry-log",
            str(log_path),
        ],
    )
    assert result.exit_code == 0, result.output
    assert "4 block(s), 2 log line(s)" in result.output
    assert seen["url"] == "http://backend/api/schedule"
    assert seen["body"]["start_datetime"] == "2024-02-01T08:00:00"
    assert seen["body"]["setup_times"]["A-B"] == 1.5
    saved = json.loads(out.read_text(encoding="utf-8"))
    assert len(saved["schedule"]) == 5
    (record,) = list(read_jsonl(log_path))
    assert record["status"] == "ok"
    assert record["block_count"] == 4
    assert record["origin"] == "2024-02-01T08:00:00"


def test_fetch_reports_validation_error(monkeypatch, tmp_path, examples_dir):
    detail = [{"loc": ["body", "orders"], "msg": "field required", "type": "missing"}]
    _patch_client(monkeypatch, lambda request: httpx.Response(422, json={"detail": detail}))
    out = tmp_path / "response.json"
    log_path = tmp_path / "fetch.jsonl"
    result = runner.invoke(
        app,
        ["fetch", str(examples_dir / "request.yaml"), "--out", str(out), "--telemetry-log", str(log_path)],
    )
    assert result.exit_code == 1
    assert "Validation error" in result.output
    assert not out.exists()
    (record,) = list(read_jsonl(log_path))
    assert record["status"] == "error"
    assert record["status_code"] == 422
    assert record["error"].startswith("Validation error:\nbody.orders: field required")


def test_layout_with_aware_request_origin(tmp_path, examples_dir):
    request = tmp_path / "request.json"
    request.write_text(json.dumps({"start_datetime": "2024-01-25T08:00:00Z"}), encoding="utf-8")
    out = tmp_path / "layout.csv"
    result = runner.invoke(
        app,
        ["layout", str(examples_dir / "response.json"), "--request", str(request), "--out", str(out)],
    )
    assert result.exit_code == 0, result.output
    assert len(pd.read_csv(out)) == 4


def test_now_command_uses_profile_scale(monkeypatch):
    zones = []

    def frozen_now(zone):
        zones.append(zone)
        return datetime(2024, 1, 25, 10, 30, tzinfo=timezone.utc)

    monkeypatch.setattr(cli_main, "now_in_zone", frozen_now)
    result = runner.invoke(app, ["now", "--profile", "compact", "--zone", "UTC"])
    assert result.exit_code == 0, result.output
    assert "2024-01-25 10:30 UTC: marker at 420.0px, initial scroll 220.0px" in result.output

    result = runner.invoke(app, ["now"])
    assert result.exit_code == 0, result.output
    assert "marker at 840.0px, initial scroll 640.0px" in result.output
    assert zones == ["UTC", "America/Santiago"]
