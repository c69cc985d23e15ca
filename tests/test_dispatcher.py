"""Tests for the session event reducer.

Walks the setup sequence (size report, pixel geometry, icon batch) and the
interaction flows: click-to-launch, launch failure flashes, guarded deferred
clears, close-on-launch, and both resize policies.
"""

from __future__ import annotations

import unittest

from PIL import Image

from appshelf.config import AppEntry, BehaviorSpec, GridSpec, ShelfConfig, StyleSpec
from appshelf.dispatcher import (
    ERROR_FLASH_SECONDS,
    SELECTION_FLASH_SECONDS,
    dispatch,
    initial_commands,
)
from appshelf.events import (
    ClearError,
    ClearScreen,
    ClearSelection,
    Defer,
    FramePainted,
    IconsLoaded,
    KeyPress,
    LaunchApp,
    LaunchResult,
    LoadIcons,
    MOUSE_PRESS,
    MOUSE_RELEASE,
    MouseEvent,
    QueryTerminalGeometry,
    Quit,
    Redraw,
    TerminalGeometryReport,
    Tick,
    WindowSize,
)
from appshelf.geometry import CellDim
from appshelf.icons import RenderedIcon
from appshelf.render_cache import CacheKey, RenderCache
from appshelf.state import SessionState


def _config(*, close_on_launch: bool = False, reflow_on_resize: bool = False, app_count: int = 5) -> ShelfConfig:
    return ShelfConfig(
        grid=GridSpec(rows=1, columns=5),
        style=StyleSpec(border=False, padding=0),
        behavior=BehaviorSpec(close_on_launch=close_on_launch, reflow_on_resize=reflow_on_resize),
        apps=tuple(
            AppEntry(name=f"App {idx}", package=f"com.example.app{idx}", activity=".Main" if idx == 2 else "")
            for idx in range(app_count)
        ),
    )


class _Harness:
    def __init__(self, config: ShelfConfig) -> None:
        self.config = config
        self.state = SessionState(app_count=len(config.apps))
        self.cache = RenderCache()

    def send(self, event: object) -> list[object]:
        return dispatch(self.state, self.cache, self.config, event)

    def make_ready(self, columns: int = 100, rows: int = 40) -> None:
        self.send(WindowSize(columns, rows))
        self.send(TerminalGeometryReport(CellDim(10, 20)))


class SetupSequenceTests(unittest.TestCase):
    def test_initial_state(self) -> None:
        state = SessionState(app_count=3)

        self.assertFalse(state.ready)
        self.assertIsNone(state.selected)
        self.assertEqual(state.error_flash, [False, False, False])
        self.assertTrue(state.needs_full_redraw)
        self.assertEqual(initial_commands(), [LoadIcons()])

    def test_first_size_report_requests_geometry_query(self) -> None:
        harness = _Harness(_config())

        commands = harness.send(WindowSize(100, 40))

        self.assertEqual(commands, [QueryTerminalGeometry()])
        self.assertEqual((harness.state.term_width, harness.state.term_height), (100, 40))
        self.assertFalse(harness.state.ready)

    def test_geometry_report_marks_ready_and_clears_cache(self) -> None:
        harness = _Harness(_config())
        harness.send(WindowSize(100, 40))
        harness.cache.put(CacheKey(0, 20, 10), RenderedIcon(b"x", 1, 1))

        commands = harness.send(TerminalGeometryReport(CellDim(12, 24)))

        self.assertEqual(commands, [ClearScreen()])
        self.assertTrue(harness.state.ready)
        self.assertEqual(harness.state.cell_px, CellDim(12, 24))
        self.assertEqual(len(harness.cache), 0)

    def test_icons_loaded_fills_slots_and_requests_full_redraw(self) -> None:
        harness = _Harness(_config(app_count=2))
        harness.state.needs_full_redraw = False
        icons = (Image.new("RGBA", (4, 4)), Image.new("RGBA", (4, 4)))

        commands = harness.send(IconsLoaded(icons))

        self.assertEqual(commands, [Redraw()])
        self.assertTrue(harness.state.icons_loaded)
        self.assertTrue(harness.state.needs_full_redraw)
        self.assertIs(harness.state.icons[1], icons[1])

    def test_frame_painted_with_icons_clears_full_redraw(self) -> None:
        harness = _Harness(_config())

        harness.send(FramePainted(icons_drawn=False))
        self.assertTrue(harness.state.needs_full_redraw)
        harness.send(FramePainted(icons_drawn=True))
        self.assertFalse(harness.state.needs_full_redraw)


class ResizePolicyTests(unittest.TestCase):
    def test_later_resizes_are_ignored_by_default(self) -> None:
        harness = _Harness(_config())
        harness.make_ready()
        harness.cache.put(CacheKey(0, 20, 10), RenderedIcon(b"x", 1, 1))

        commands = harness.send(WindowSize(100, 20))

        self.assertEqual(commands, [])
        self.assertEqual((harness.state.term_width, harness.state.term_height), (100, 40))
        self.assertEqual(len(harness.cache), 1)

    def test_reflow_policy_reprocesses_resizes(self) -> None:
        harness = _Harness(_config(reflow_on_resize=True))
        harness.make_ready()
        harness.cache.put(CacheKey(0, 20, 10), RenderedIcon(b"x", 1, 1))

        commands = harness.send(WindowSize(80, 30))

        self.assertEqual(commands, [QueryTerminalGeometry()])
        self.assertEqual((harness.state.term_width, harness.state.term_height), (80, 30))
        self.assertEqual(len(harness.cache), 0)

    def test_reflow_policy_skips_unchanged_size(self) -> None:
        harness = _Harness(_config(reflow_on_resize=True))
        harness.make_ready()
        self.assertEqual(harness.send(WindowSize(100, 40)), [])


class PointerTests(unittest.TestCase):
    def test_release_on_cell_selects_and_launches(self) -> None:
        harness = _Harness(_config())
        harness.make_ready()

        commands = harness.send(MouseEvent(MOUSE_RELEASE, x=45, y=35))

        self.assertEqual(harness.state.selected, 2)
        self.assertEqual(
            commands,
            [
                LaunchApp(index=2, package="com.example.app2", activity=".Main"),
                Defer(SELECTION_FLASH_SECONDS, ClearSelection(2, harness.state.selection_serial)),
                Redraw(),
            ],
        )

    def test_press_and_wheel_do_nothing(self) -> None:
        harness = _Harness(_config())
        harness.make_ready()

        self.assertEqual(harness.send(MouseEvent(MOUSE_PRESS, x=45, y=35)), [])
        self.assertEqual(harness.send(MouseEvent("wheel", x=45, y=35, button="wheel")), [])
        self.assertIsNone(harness.state.selected)

    def test_release_outside_grid_does_nothing(self) -> None:
        harness = _Harness(_config())
        harness.make_ready()

        self.assertEqual(harness.send(MouseEvent(MOUSE_RELEASE, x=45, y=3)), [])
        self.assertIsNone(harness.state.selected)

    def test_release_before_ready_is_ignored(self) -> None:
        harness = _Harness(_config())
        harness.send(WindowSize(100, 40))

        self.assertEqual(harness.send(MouseEvent(MOUSE_RELEASE, x=45, y=35)), [])

    def test_stale_clear_selection_is_ignored(self) -> None:
        harness = _Harness(_config())
        harness.make_ready()
        harness.send(MouseEvent(MOUSE_RELEASE, x=45, y=35))
        first_serial = harness.state.selection_serial
        harness.send(MouseEvent(MOUSE_RELEASE, x=65, y=35))

        self.assertEqual(harness.send(ClearSelection(2, first_serial)), [])
        self.assertEqual(harness.state.selected, 3)
        self.assertEqual(harness.send(ClearSelection(3, harness.state.selection_serial)), [Redraw()])
        self.assertIsNone(harness.state.selected)


class LaunchResultTests(unittest.TestCase):
    def test_failure_flashes_error_then_clears(self) -> None:
        harness = _Harness(_config())
        harness.make_ready()

        commands = harness.send(LaunchResult(1, error="Error: Activity not started"))

        self.assertTrue(harness.state.error_flash[1])
        self.assertTrue(harness.state.running)
        deferred = commands[0]
        self.assertIsInstance(deferred, Defer)
        self.assertEqual(deferred.delay_seconds, ERROR_FLASH_SECONDS)
        self.assertEqual(commands[1:], [Redraw()])

        self.assertEqual(harness.send(deferred.event), [Redraw()])
        self.assertFalse(harness.state.error_flash[1])
        self.assertTrue(harness.state.running)

    def test_clear_error_is_noop_when_already_clear(self) -> None:
        harness = _Harness(_config())
        self.assertEqual(harness.send(ClearError(1, 0)), [])
        self.assertFalse(harness.state.error_flash[1])

    def test_clear_error_is_noop_after_newer_failure(self) -> None:
        harness = _Harness(_config())
        first = harness.send(LaunchResult(1, error="Error: one"))[0]
        second = harness.send(LaunchResult(1, error="Error: two"))[0]

        self.assertEqual(harness.send(first.event), [])
        self.assertTrue(harness.state.error_flash[1])
        self.assertEqual(harness.send(second.event), [Redraw()])
        self.assertFalse(harness.state.error_flash[1])

    def test_clear_error_ignores_invalid_index(self) -> None:
        harness = _Harness(_config())
        self.assertEqual(harness.send(ClearError(42, 1)), [])

    def test_success_quits_only_with_close_on_launch(self) -> None:
        harness = _Harness(_config())
        self.assertEqual(harness.send(LaunchResult(0)), [])
        self.assertTrue(harness.state.running)

        closing = _Harness(_config(close_on_launch=True))
        self.assertEqual(closing.send(LaunchResult(0)), [Quit()])
        self.assertFalse(closing.state.running)


class KeyAndTickTests(unittest.TestCase):
    def test_quit_keys(self) -> None:
        for key in ("q", "ESC", "CTRL_C"):
            with self.subTest(key=key):
                harness = _Harness(_config())
                self.assertEqual(harness.send(KeyPress(key)), [Quit()])

    def test_other_keys_are_ignored(self) -> None:
        harness = _Harness(_config())
        self.assertEqual(harness.send(KeyPress("x")), [])
        self.assertTrue(harness.state.running)

    def test_tick_redraws_only_when_label_changes(self) -> None:
        harness = _Harness(_config())
        harness.make_ready()

        self.assertEqual(harness.send(Tick("09:41")), [Redraw()])
        self.assertEqual(harness.send(Tick("09:41")), [])
        self.assertEqual(harness.state.clock_label, "09:41")


if __name__ == "__main__":
    unittest.main()
