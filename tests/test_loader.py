from __future__ import annotations

import asyncio
import json
from datetime import date

import httpx

from prodgrid.client import ScheduleClient, ScheduleLoader
from prodgrid.schedule import ScheduleRequest
from prodgrid.timeline import ViewMode, ViewParams

BASE_REQUEST = ScheduleRequest.model_validate({"start_datetime": "2024-01-20T08:00:00", "orders": []})


def _response_for(label: str) -> dict:
    return {
        "schedule": [
            {"machine": "Linea_1", "type": "OT", "id": f"OT-{label}", "start": 0, "end": 2},
            {"machine": "Linea_2", "type": "OT", "id": f"OT-{label}-2", "start": 1, "end": 3},
        ],
        "logs": [label],
    }


def test_superseded_load_is_discarded():
    async def scenario():
        gate = asyncio.Event()
        seen: list[str] = []

        async def handler(request: httpx.Request) -> httpx.Response:
            start = json.loads(request.content)["start_datetime"]
            seen.append(start)
            if start.startswith("2024-01-25"):
                await gate.wait()
            return httpx.Response(200, json=_response_for(start[:10]))

        loader = ScheduleLoader(ScheduleClient("http://backend", transport=httpx.MockTransport(handler)), BASE_REQUEST)
        slow = asyncio.create_task(loader.load(ViewParams(day=date(2024, 1, 25))))
        await asyncio.sleep(0)
        fast = await loader.load(ViewParams(day=date(2024, 1, 26)))
        gate.set()
        stale = await slow
        return loader, seen, stale, fast

    loader, seen, stale, fast = asyncio.run(scenario())
    assert sorted(seen) == ["2024-01-25T08:00:00", "2024-01-26T08:00:00"]
    assert stale is None
    assert fast is not None and fast.ok
    assert [b.id for b in fast.blocks] == ["OT-2024-01-26", "OT-2024-01-26-2"]
    assert loader.latest is fast
    assert loader.latest_params.day == date(2024, 1, 26)
    assert loader.generation == 2


def test_individual_load_keeps_selected_machine():
    handler = lambda request: httpx.Response(200, json=_response_for("week"))  # noqa: E731
    loader = ScheduleLoader(ScheduleClient("http://backend", transport=httpx.MockTransport(handler)), BASE_REQUEST)
    params = ViewParams(day=date(2024, 1, 22), mode=ViewMode.INDIVIDUAL, machine_id="Linea_2")
    result = asyncio.run(loader.load(params))
    assert result is not None
    assert [b.machine_id for b in result.blocks] == ["Linea_2"]
    assert result.logs == ("week",)


def test_failed_load_yields_error_result():
    handler = lambda request: httpx.Response(500, json={"detail": "solver crashed"})  # noqa: E731
    loader = ScheduleLoader(ScheduleClient("http://backend", transport=httpx.MockTransport(handler)), BASE_REQUEST)
    result = asyncio.run(loader.load(ViewParams(day=date(2024, 1, 25))))
    assert result is not None
    assert not result.ok
    assert result.blocks == ()
    assert result.error == "solver crashed (Status: 500)"
    assert loader.latest is result


def test_aware_request_origin_is_laid_out_in_its_timezone():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["start"] = json.loads(request.content)["start_datetime"]
        return httpx.Response(200, json=_response_for("utc"))

    request = ScheduleRequest.model_validate({"start_datetime": "2024-01-20T08:00:00Z", "orders": []})
    loader = ScheduleLoader(ScheduleClient("http://backend", transport=httpx.MockTransport(handler)), request)
    result = asyncio.run(loader.load(ViewParams(day=date(2024, 1, 26))))
    assert result is not None and result.ok
    assert seen["start"].startswith("2024-01-26T08:00:00")
    assert [b.id for b in result.blocks] == ["OT-utc", "OT-utc-2"]
    assert all(b.start_time.utcoffset().total_seconds() == 0 for b in result.blocks)
