"""Tests for viewport intersection tracking."""

from __future__ import annotations

import asyncio
import unittest

from skillforge_ui.document import Document, Element
from skillforge_ui.visibility import TriggerMode, Viewport, VisibilityWatcher


class ViewportTests(unittest.TestCase):
    def test_intersection_ratio_respects_bottom_margin(self) -> None:
        document = Document()
        element = document.body.append(Element(top=700, height=100))
        viewport = Viewport(height=800)
        self.assertAlmostEqual(viewport.intersection_ratio(element), 1.0)
        self.assertAlmostEqual(viewport.intersection_ratio(element, -50), 0.5)

    def test_detached_element_never_intersects(self) -> None:
        self.assertEqual(Viewport().intersection_ratio(Element(top=0, height=10)), 0.0)

    def test_scroll_listeners_run_before_watchers(self) -> None:
        viewport = Viewport()
        order: list[str] = []
        viewport.add_scroll_listener(lambda _y: order.append("listener"))
        watcher = VisibilityWatcher(viewport)
        watcher.check = lambda: order.append("watcher")  # type: ignore[method-assign]
        viewport.scroll_to(10)
        self.assertEqual(order, ["listener", "watcher"])

    def test_scroll_to_clamps_at_zero(self) -> None:
        viewport = Viewport(scroll_y=20)
        viewport.scroll_by(-100)
        self.assertEqual(viewport.scroll_y, 0.0)


class VisibilityWatcherTests(unittest.IsolatedAsyncioTestCase):
    """Validate once/repeat semantics, ordering and error isolation."""

    def setUp(self) -> None:
        self.document = Document()
        self.viewport = Viewport(height=800)

    def _element(self, top: float, height: float = 100) -> Element:
        return self.document.body.append(Element(top=top, height=height))

    async def test_initial_entry_is_delivered_asynchronously(self) -> None:
        watcher = VisibilityWatcher(self.viewport, threshold=0, root_margin_bottom=0)
        element = self._element(10)
        seen: list[Element] = []
        watcher.observe(element, TriggerMode.ONCE, seen.append)
        self.assertEqual(seen, [])
        await asyncio.sleep(0)
        self.assertEqual(seen, [element])
        self.assertFalse(watcher.is_observing(element))

    async def test_once_fires_a_single_time(self) -> None:
        watcher = VisibilityWatcher(self.viewport)
        element = self._element(2000)
        seen: list[Element] = []
        watcher.observe(element, TriggerMode.ONCE, seen.append)
        await asyncio.sleep(0)
        self.assertEqual(seen, [])
        self.viewport.scroll_to(1800)
        self.viewport.scroll_to(0)
        self.viewport.scroll_to(1800)
        self.assertEqual(seen, [element])

    async def test_repeat_fires_on_each_entry(self) -> None:
        watcher = VisibilityWatcher(self.viewport)
        element = self._element(2000)
        seen: list[Element] = []
        watcher.observe(element, TriggerMode.REPEAT, seen.append)
        self.viewport.scroll_to(1800)
        self.viewport.scroll_to(1850)
        self.viewport.scroll_to(0)
        self.viewport.scroll_to(1800)
        self.assertEqual(seen, [element, element])
        self.assertTrue(watcher.is_observing(element))

    async def test_threshold_requires_enough_overlap(self) -> None:
        watcher = VisibilityWatcher(self.viewport, threshold=0.5, root_margin_bottom=0)
        element = self._element(1000, height=200)
        seen: list[Element] = []
        watcher.observe(element, TriggerMode.ONCE, seen.append)
        self.viewport.scroll_to(250)  # 50px of 200 visible.
        self.assertEqual(seen, [])
        self.viewport.scroll_to(400)
        self.assertEqual(seen, [element])

    async def test_simultaneous_entries_follow_document_order(self) -> None:
        watcher = VisibilityWatcher(self.viewport)
        first = self._element(1000)
        second = self._element(1100)
        seen: list[Element] = []
        watcher.observe(second, TriggerMode.ONCE, seen.append)
        watcher.observe(first, TriggerMode.ONCE, seen.append)
        self.viewport.scroll_to(900)
        self.assertEqual(seen, [first, second])

    async def test_duplicate_observe_is_ignored(self) -> None:
        watcher = VisibilityWatcher(self.viewport)
        element = self._element(0)
        seen: list[str] = []
        watcher.observe(element, TriggerMode.ONCE, lambda _el: seen.append("first"))
        watcher.observe(element, TriggerMode.ONCE, lambda _el: seen.append("second"))
        self.assertEqual(len(watcher), 1)
        await asyncio.sleep(0)
        self.assertEqual(seen, ["first"])

    async def test_unobserve_and_disconnect(self) -> None:
        watcher = VisibilityWatcher(self.viewport)
        element = self._element(2000)
        seen: list[Element] = []
        watcher.observe(element, TriggerMode.REPEAT, seen.append)
        watcher.unobserve(element)
        self.viewport.scroll_to(1800)
        watcher.observe(element, TriggerMode.REPEAT, seen.append)
        watcher.disconnect()
        self.viewport.scroll_to(0)
        self.viewport.scroll_to(1800)
        self.assertEqual(seen, [])
        self.assertEqual(len(watcher), 0)

    async def test_failing_callback_does_not_stop_the_group(self) -> None:
        watcher = VisibilityWatcher(self.viewport, name="test")
        broken = self._element(1000)
        healthy = self._element(1100)
        seen: list[Element] = []

        def _boom(_element: Element) -> None:
            raise RuntimeError("boom")

        watcher.observe(broken, TriggerMode.ONCE, _boom)
        watcher.observe(healthy, TriggerMode.ONCE, seen.append)
        with self.assertLogs("skillforge_ui.visibility", level="ERROR"):
            self.viewport.scroll_to(900)
        self.assertEqual(seen, [healthy])

    async def test_observe_requires_callback(self) -> None:
        watcher = VisibilityWatcher(self.viewport)
        with self.assertRaises(ValueError):
            watcher.observe(self._element(0))


if __name__ == "__main__":
    unittest.main()
