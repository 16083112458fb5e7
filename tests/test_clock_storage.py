# -*- coding: utf-8 -*-

from __future__ import annotations

import asyncio
import shutil
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

from snapcalorie.clock.models import VirtualClockState
from snapcalorie.clock.storage import DAY_COUNT_KEY, DAY_OFFSET_KEY, LAST_REAL_DATE_KEY, ClockStore
from snapcalorie.clock.ticker import ClockTicker
from snapcalorie.store import JsonFileStore, MemoryStore, load_json, save_json

NOW = int(datetime(2024, 3, 10, 12, tzinfo=timezone(timedelta(hours=3))).timestamp()) * 1000


class TestJsonFileStore(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = Path(tempfile.mkdtemp(prefix="snapcal-test-"))

    def tearDown(self) -> None:
        shutil.rmtree(self._tmp, ignore_errors=True)

    def test_absent_key_loads_none(self) -> None:
        store = JsonFileStore(self._tmp / "missing")
        self.assertIsNone(store.load("snapcalorie_meals"))

    def test_save_creates_directory_and_overwrites(self) -> None:
        store = JsonFileStore(self._tmp / "data")
        store.save("snapcalorie_day_count", "3")
        store.save("snapcalorie_day_count", "4")
        self.assertEqual(store.load("snapcalorie_day_count"), "4")
        self.assertTrue((self._tmp / "data" / "snapcalorie_day_count.json").exists())

    def test_rejects_path_like_keys(self) -> None:
        store = JsonFileStore(self._tmp)
        with self.assertRaises(ValueError):
            store.save("../escape", "x")

    def test_corrupt_json_falls_back_to_default(self) -> None:
        store = MemoryStore({"k": "{not json"})
        with self.assertLogs("snapcalorie.store", level="WARNING"):
            self.assertEqual(load_json(store, "k", []), [])

    def test_json_helpers(self) -> None:
        store = MemoryStore()
        save_json(store, "k", {"a": [1, 2]})
        self.assertEqual(load_json(store, "k", None), {"a": [1, 2]})
        self.assertEqual(load_json(store, "other", "default"), "default")


class TestClockStore(unittest.TestCase):
    def test_first_run_defaults(self) -> None:
        state = ClockStore(MemoryStore(), 3).load(NOW)
        self.assertEqual(state, VirtualClockState(day_offset=0, day_count=1, last_observed_real_date="2024-03-10"))

    def test_round_trip_uses_three_keys(self) -> None:
        backing = MemoryStore()
        clock_store = ClockStore(backing, 3)
        state = VirtualClockState(day_offset=2, day_count=9, last_observed_real_date="2024-03-08")
        clock_store.save(state)
        self.assertEqual(backing.data[DAY_OFFSET_KEY], "2")
        self.assertEqual(backing.data[DAY_COUNT_KEY], "9")
        self.assertEqual(backing.data[LAST_REAL_DATE_KEY], "2024-03-08")
        self.assertEqual(clock_store.load(NOW), state)

    def test_bad_values_fall_back_individually(self) -> None:
        backing = MemoryStore(
            {
                DAY_OFFSET_KEY: "-4",
                DAY_COUNT_KEY: "twelve",
                LAST_REAL_DATE_KEY: "2024-02-30",
            }
        )
        with self.assertLogs("snapcalorie.clock.storage", level="WARNING"):
            state = ClockStore(backing, 3).load(NOW)
        self.assertEqual(state.day_offset, 0)
        self.assertEqual(state.day_count, 1)
        self.assertEqual(state.last_observed_real_date, "2024-03-10")


class TestClockTicker(unittest.TestCase):
    def test_ticks_until_stopped(self) -> None:
        calls: list[int] = []

        async def scenario() -> None:
            ticker = ClockTicker(lambda: calls.append(1), interval=0.01)
            ticker.start()
            self.assertTrue(ticker.running)
            await asyncio.sleep(0.05)
            await ticker.stop()
            self.assertFalse(ticker.running)

        asyncio.run(scenario())
        self.assertGreaterEqual(len(calls), 2)

    def test_failing_check_does_not_stop_loop(self) -> None:
        calls: list[int] = []

        def check() -> None:
            calls.append(1)
            raise RuntimeError("boom")

        async def scenario() -> None:
            ticker = ClockTicker(check, interval=0.01)
            ticker.start()
            await asyncio.sleep(0.05)
            await ticker.stop()

        with self.assertLogs("snapcalorie.clock.ticker", level="ERROR"):
            asyncio.run(scenario())
        self.assertGreaterEqual(len(calls), 2)


if __name__ == "__main__":
    unittest.main()
