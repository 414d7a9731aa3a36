from __future__ import annotations

from django.test import SimpleTestCase

from apps.assistants.services.pagination import drain_holding_last

from .fakes import FakePage


class DrainHoldingLastTests(SimpleTestCase):
    def _drain(self, pages):
        first = FakePage(pages)
        events = first.log
        for item in drain_holding_last(first):
            events.append(("item", item))
        return events

    def test_last_item_of_each_page_waits_for_next_page_fetch(self):
        events = self._drain([["a", "b", "c"], ["d", "e"], ["f"]])
        self.assertEqual(
            events,
            [
                ("item", "a"),
                ("item", "b"),
                ("fetch", 1),
                ("item", "c"),
                ("item", "d"),
                ("fetch", 2),
                ("item", "e"),
                ("item", "f"),
            ],
        )

    def test_single_page_yields_everything_without_fetching(self):
        events = self._drain([["a", "b"]])
        self.assertEqual(events, [("item", "a"), ("item", "b")])

    def test_empty_listing_yields_nothing(self):
        self.assertEqual(list(drain_holding_last(FakePage([[]]))), [])
        self.assertEqual(list(drain_holding_last(FakePage([]))), [])
