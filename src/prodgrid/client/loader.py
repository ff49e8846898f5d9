"""Asynchronous schedule loading with stale-result suppression."""

from __future__ import annotations

from dataclasses import replace

from prodgrid.config import ViewSettings
from prodgrid.core.errors import ScheduleFetchError
from prodgrid.schedule.contract import ScheduleRequest
from prodgrid.timeline.days import blocks_tzinfo
from prodgrid.timeline.grid import ViewParams
from prodgrid.timeline.visibility import ViewMode, select_visible, view_window

from .http import FetchResult, ScheduleClient

__all__ = ["visible_result", "ScheduleLoader"]


def visible_result(result: FetchResult, params: ViewParams, settings: ViewSettings) -> FetchResult:
    """Restrict a loaded schedule to the blocks the view can show."""
    if not result.ok:
        return result
    mode = ViewMode(params.mode)
    days = settings.week_days if mode is ViewMode.INDIVIDUAL else None
    start, end = view_window(params.day, mode, days, tz=blocks_tzinfo(result.blocks))
    machines = None
    if mode is ViewMode.INDIVIDUAL and params.machine_id:
        machines = [params.machine_id]
    blocks = select_visible(result.blocks, start, end, machines)
    return replace(result, blocks=tuple(blocks))


class ScheduleLoader:
    """Load schedules for successive view parameters; the last request wins.

    Every :meth:`load` call supersedes the ones still in flight. Their network calls are
    allowed to finish, but their results are discarded (``load`` returns ``None``) so a
    slow, outdated response never replaces the layout of the current parameters.

    Parameters
    ----------
    client:
        :class:`ScheduleClient` used for the asynchronous POST.
    base_request:
        Request body re-anchored at 08:00 of the visible day for every load.
    settings:
        View settings (defaults to :class:`ViewSettings`).
    """

    def __init__(
        self,
        client: ScheduleClient,
        base_request: ScheduleRequest,
        settings: ViewSettings | None = None,
    ) -> None:
        self.client = client
        self.base_request = base_request
        self.settings = settings or ViewSettings()
        self.latest: FetchResult | None = None
        self.latest_params: ViewParams | None = None
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def is_current(self, generation: int) -> bool:
        return generation == self._generation

    async def load(self, params: ViewParams) -> FetchResult | None:
        self._generation += 1
        generation = self._generation
        request = self.base_request.with_origin(params.day)
        try:
            response = await self.client.afetch_schedule(request)
        except ScheduleFetchError as exc:
            result = FetchResult.failed(exc.message)
        else:
            result = FetchResult.from_response(response, request)
        if not self.is_current(generation):
            return None
        result = visible_result(result, params, self.settings)
        self.latest = result
        self.latest_params = params
        return result
