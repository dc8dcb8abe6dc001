"""Tests for the scroll animation controller."""

from __future__ import annotations

import asyncio
import unittest

from skillforge_ui.animations import (
    AnimationWatchers,
    ScrollAnimationController,
    parse_counter_text,
)
from skillforge_ui.document import Document, Element
from skillforge_ui.visibility import Viewport


class ParseCounterTextTests(unittest.TestCase):
    def test_digits_and_suffix(self) -> None:
        self.assertEqual(parse_counter_text("1234+"), (1234, "+"))
        self.assertEqual(parse_counter_text("98%"), (98, "%"))
        self.assertEqual(parse_counter_text("10,000+"), (10000, ",+"))

    def test_no_digits_targets_zero(self) -> None:
        self.assertEqual(parse_counter_text("Many"), (0, "Many"))
        self.assertEqual(parse_counter_text(""), (0, ""))


class ScrollAnimationControllerTests(unittest.IsolatedAsyncioTestCase):
    """Validate reveal, parallax, counters, stagger and text reveal."""

    def setUp(self) -> None:
        self.document = Document()
        self.viewport = Viewport(height=800)
        self.controller = ScrollAnimationController(
            self.document,
            self.viewport,
            AnimationWatchers.create(self.viewport),
            counter_duration=0.05,
            counter_steps=5,
            stagger_delay=0.02,
            frame_interval=0.005,
        )

    async def asyncTearDown(self) -> None:
        self.controller.teardown()

    async def test_reveal_marks_visible_cards_once(self) -> None:
        near = self.document.body.append(Element(classes=["course-card"], top=100, height=200))
        far = self.document.body.append(Element(classes=["feature-card"], top=3000, height=200))
        self.controller.start()
        self.assertTrue(far.has_class("animate-on-scroll"))
        await asyncio.sleep(0)
        self.assertTrue(near.has_class("animate"))
        self.assertTrue(near.has_class("animated"))
        self.assertFalse(far.has_class("animate"))
        self.viewport.scroll_to(2800)
        self.assertTrue(far.has_class("animated"))

    async def test_counter_reaches_exact_target_with_suffix(self) -> None:
        stat = self.document.body.append(Element(classes=["stat"], top=0, height=100))
        heading = stat.append(Element("h3", text="1234+", top=0, height=40))
        self.controller.start()
        await asyncio.sleep(0)
        state = self.controller.counter_state(heading)
        self.assertIsNotNone(state)
        self.assertEqual((state.target, state.suffix), (1234, "+"))
        await asyncio.sleep(0.15)
        self.assertEqual(heading.text_content, "1234+")
        self.assertIsNone(self.controller.counter_state(heading))

    async def test_counter_intermediate_values_are_floored(self) -> None:
        number = self.document.body.append(Element(classes=["stat-number"], text="7", height=10))
        writes: list[str] = []
        set_text = number.set_text

        def _record(text: str) -> None:
            writes.append(text)
            set_text(text)

        number.set_text = _record  # type: ignore[method-assign]
        state = self.controller.animate_counter(number)
        while state.running:
            await asyncio.sleep(0.005)
        # 7 / 5 steps = 1.4 per step.
        self.assertEqual(writes, ["1", "2", "4", "5", "7"])

    async def test_zero_target_counter_terminates(self) -> None:
        number = self.document.body.append(Element(classes=["stat-number"], text="N/A", height=10))
        state = self.controller.animate_counter(number)
        await asyncio.sleep(0.15)
        self.assertFalse(state.running)
        self.assertEqual(number.text_content, "0N/A")

    async def test_counter_stops_when_element_detached(self) -> None:
        number = self.document.body.append(Element(classes=["stat-number"], text="500", height=10))
        state = self.controller.animate_counter(number)
        self.controller.remove_element(number)
        await asyncio.sleep(0.1)
        self.assertFalse(state.running)
        self.assertEqual(number.text_content, "500")
        self.assertEqual(self.controller.pending_timers, 0)

    async def test_parallax_coalesces_to_one_frame(self) -> None:
        layer = self.document.body.append(Element(classes=["parallax"], dataset={"speed": "0.2"}))
        plain = self.document.body.append(Element(classes=["parallax"]))
        self.controller.start()
        self.viewport.scroll_to(100)
        self.viewport.scroll_to(200)
        self.assertEqual(self.controller.pending_timers, 1)
        await asyncio.sleep(0.03)
        self.assertEqual(layer.style["transform"], "translateY(-40px)")
        self.assertEqual(plain.style["transform"], "translateY(-100px)")

    async def test_stagger_reveals_children_in_order(self) -> None:
        group = self.document.body.append(Element(classes=["stagger-animation"], top=0, height=300))
        children = [group.append(Element(height=100)) for _ in range(3)]
        self.controller.start()
        await asyncio.sleep(0.01)
        self.assertEqual([c.has_class("animated") for c in children], [True, False, False])
        await asyncio.sleep(0.06)
        self.assertTrue(all(c.has_class("animated") for c in children))
        self.assertIsNone(self.controller.stagger_group(group))

    async def test_stagger_teardown_cancels_pending_children(self) -> None:
        group = self.document.body.append(Element(classes=["stagger-animation"], top=0, height=300))
        children = [group.append(Element(height=100)) for _ in range(4)]
        self.controller.animate_group(group)
        await asyncio.sleep(0.01)
        self.controller.remove_element(group)
        await asyncio.sleep(0.1)
        self.assertTrue(children[0].has_class("animated"))
        self.assertFalse(any(c.has_class("animated") for c in children[1:]))
        self.assertEqual(self.controller.pending_timers, 0)

    async def test_stagger_stops_when_group_detached(self) -> None:
        group = self.document.body.append(Element(classes=["stagger-animation"], top=0, height=300))
        children = [group.append(Element(height=100)) for _ in range(4)]
        self.controller.animate_group(group)
        await asyncio.sleep(0.01)
        group.remove()
        await asyncio.sleep(0.1)
        self.assertTrue(children[0].has_class("animated"))
        self.assertEqual([c.has_class("animated") for c in children[1:]], [False, False, False])
        self.assertIsNone(self.controller.stagger_group(group))
        self.assertEqual(self.controller.pending_timers, 0)

    async def test_text_reveal_splits_characters(self) -> None:
        heading = self.document.body.append(Element(classes=["text-reveal"], text="Hi you", height=40))
        self.controller.start()
        tags = [child.tag for child in heading.children]
        self.assertEqual(tags, ["span", "span", "#text", "span", "span", "span"])
        self.assertEqual(heading.text_content, "Hi you")
        await asyncio.sleep(0)
        self.assertTrue(heading.has_class("revealed"))

    async def test_page_load_marks_main_content(self) -> None:
        main = self.document.body.append(Element("main"))
        self.controller.start()
        self.assertTrue(main.has_class("page-load"))

    async def test_teardown_releases_only_own_registrations(self) -> None:
        card = self.document.body.append(Element(classes=["course-card"], top=3000, height=100))
        self.controller.start()
        self.assertTrue(self.controller.watchers.reveal.is_observing(card))
        self.controller.teardown()
        self.assertFalse(self.controller.watchers.reveal.is_observing(card))
        self.assertEqual(self.controller.pending_timers, 0)


if __name__ == "__main__":
    unittest.main()
