"""Per-key single-flight for generative wizard steps.

Duplicate concurrent entries for the same (step, sop) share one in-flight
call instead of each running it. State is per process; duplicate requests
landing on different workers are still caught by the "steps already exist"
check in the draft workflow.
"""

import asyncio
from typing import Any, Awaitable, Callable, Hashable


class SingleFlight:
    def __init__(self):
        self._inflight: dict[Hashable, asyncio.Task] = {}

    def in_flight(self, key: Hashable) -> bool:
        return key in self._inflight

    async def run(self, key: Hashable, fn: Callable[[], Awaitable[Any]]) -> Any:
        """
        Run ``fn`` once per key at a time.

        Callers arriving while a call for the same key is running await that
        call's result (or exception). The key is released when it finishes,
        so a later explicit retry runs again.
        """
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(fn())
            self._inflight[key] = task
            task.add_done_callback(lambda _t: self._inflight.pop(key, None))
        return await asyncio.shield(task)


generation_flights = SingleFlight()
