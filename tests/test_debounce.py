import asyncio
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from write_notes.services.debounce import Debouncer


def test_reschedule_fires_only_last_callback():
    async def scenario():
        fired = []
        timer = Debouncer(20)

        timer.schedule(lambda: fired.append("first"))
        timer.schedule(lambda: fired.append("second"))
        assert timer.pending

        await asyncio.sleep(0.08)
        assert fired == ["second"]
        assert not timer.pending

    asyncio.run(scenario())


def test_cancel_prevents_callback():
    async def scenario():
        fired = []
        timer = Debouncer(20)

        timer.schedule(lambda: fired.append(1))
        timer.cancel()

        await asyncio.sleep(0.05)
        assert fired == []

    asyncio.run(scenario())
