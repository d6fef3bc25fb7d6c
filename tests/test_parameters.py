#!/usr/bin/env python3
"""
Tests for the parameter model: ranges, snapping, listeners and suppression.
"""

import sys
import unittest
from unittest.mock import Mock
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from screen_dimmer.parameters import (
    DEFAULT_SETTINGS,
    Parameter,
    ParameterModel,
    Settings,
)


class TestParameter(unittest.TestCase):
    """Range and step handling of a single parameter."""

    def setUp(self):
        self.param = Parameter("gamma", "Gamma", 0.50, 2.50, 0.01, 1.00)

    def test_initial_value_is_default(self):
        self.assertEqual(self.param.value, 1.00)

    def test_value_is_clamped_to_range(self):
        self.param.set_value(5.0)
        self.assertEqual(self.param.value, 2.50)
        self.param.set_value(-1.0)
        self.assertEqual(self.param.value, 0.50)

    def test_value_is_snapped_to_step(self):
        self.param.set_value(1.234)
        self.assertAlmostEqual(self.param.value, 1.23, places=6)

    def test_number_of_steps(self):
        self.assertEqual(self.param.number_of_steps, 200)
        temp = Parameter("temperature", "Temperature (K)", 1000, 10000, 100, 6500, fmt="%.0f", unit="K")
        self.assertEqual(temp.number_of_steps, 90)

    def test_format_value_with_unit(self):
        temp = Parameter("temperature", "Temperature (K)", 1000, 10000, 100, 6500, fmt="%.0f", unit="K")
        self.assertEqual(temp.format_value(), "6500 K")
        self.assertEqual(self.param.format_value(0.5), "0.50")

    def test_listener_called_on_change(self):
        listener = Mock()
        self.param.add_listener(listener)
        self.assertTrue(self.param.set_value(1.5))
        listener.assert_called_once_with("gamma", 1.5)

    def test_listener_not_called_when_value_unchanged(self):
        listener = Mock()
        self.param.add_listener(listener)
        self.assertFalse(self.param.set_value(1.0))
        listener.assert_not_called()

    def test_set_value_without_notify(self):
        listener = Mock()
        self.param.add_listener(listener)
        self.param.set_value(2.0, notify=False)
        self.assertEqual(self.param.value, 2.0)
        listener.assert_not_called()

    def test_remove_listener(self):
        listener = Mock()
        self.param.add_listener(listener)
        self.param.remove_listener(listener)
        self.param.set_value(2.0)
        listener.assert_not_called()


class TestParameterModel(unittest.TestCase):
    """The three settings together."""

    def setUp(self):
        self.model = ParameterModel()
        self.changes = []
        self.model.add_change_listener(lambda name, value: self.changes.append((name, value)))

    def test_defaults(self):
        self.assertEqual(self.model.snapshot(), Settings(6500, 1.00, 1.00))
        self.assertEqual(self.model.snapshot(), DEFAULT_SETTINGS)

    def test_ranges(self):
        self.assertEqual((self.model.temperature.minimum, self.model.temperature.maximum), (1000, 10000))
        self.assertEqual((self.model.brightness.minimum, self.model.brightness.maximum), (0.10, 1.00))
        self.assertEqual((self.model.gamma.minimum, self.model.gamma.maximum), (0.50, 2.50))

    def test_snapshot_is_immune_to_later_changes(self):
        self.model.set_value("temperature", 4000)
        snap = self.model.snapshot()
        self.model.set_value("temperature", 3000)
        self.assertEqual(snap.temperature, 4000)
        self.assertIsInstance(snap.temperature, int)

    def test_user_changes_reach_listener(self):
        self.model.set_value("brightness", 0.5)
        self.assertEqual(self.changes, [("brightness", 0.5)])

    def test_get_unknown_parameter(self):
        with self.assertRaises(KeyError):
            self.model.get("contrast")

    def test_suppressed_writes_do_not_notify(self):
        with self.model.suppressed():
            self.assertTrue(self.model.is_suppressed)
            self.model.set_value("gamma", 2.0)
        self.assertFalse(self.model.is_suppressed)
        self.assertEqual(self.changes, [])
        self.assertEqual(self.model.gamma.value, 2.0)

    def test_suppression_cleared_after_exception(self):
        with self.assertRaises(RuntimeError):
            with self.model.suppressed():
                raise RuntimeError("boom")
        self.assertFalse(self.model.is_suppressed)

    def test_restore_yields_defaults_from_any_position(self):
        for temp, bright, gamma in [(1000, 0.10, 0.50), (10000, 1.00, 2.50), (3400, 0.73, 1.81)]:
            self.model.set_value("temperature", temp)
            self.model.set_value("brightness", bright)
            self.model.set_value("gamma", gamma)
            self.changes.clear()

            values = self.model.restore()

            self.assertEqual(values, {"temperature": 6500, "brightness": 1.00, "gamma": 1.00})
            self.assertEqual(self.model.snapshot(), DEFAULT_SETTINGS)
            self.assertEqual(self.changes, [], "restore must not notify change listeners")

    def test_restore_still_updates_widget_listeners(self):
        widget_listener = Mock()
        self.model.temperature.add_listener(widget_listener)
        self.model.set_value("temperature", 3000)
        widget_listener.reset_mock()

        self.model.restore()

        widget_listener.assert_called_once_with("temperature", 6500)


if __name__ == '__main__':
    unittest.main(verbosity=2)
