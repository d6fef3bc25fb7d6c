#!/usr/bin/env python3
"""
Tests for YAML configuration loading and saving.
"""

import sys
import tempfile
import unittest
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import yaml

from screen_dimmer.config import Config


class TestConfig(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)
        self.path = Path(self.tmpdir.name) / "config.yaml"

    def write(self, data):
        self.path.write_text(yaml.safe_dump(data) if not isinstance(data, str) else data)

    def test_missing_file_keeps_defaults(self):
        config = Config(self.path)
        with self.assertLogs('screen_dimmer.config', level='WARNING'):
            self.assertFalse(config.load())
        self.assertEqual(config.redshift.command, "redshift")
        self.assertEqual(config.redshift.method, "randr")
        self.assertEqual(config.redshift.timeout, 3.0)
        self.assertEqual(config.timing.debounce_ms, 250)
        self.assertEqual(config.gui.theme, "dark")

    def test_load_values(self):
        self.write({
            'redshift': {'command': '/opt/bin/redshift', 'method': 'vidmode', 'timeout': 5},
            'timing': {'debounce_ms': 100},
            'gui': {'theme': 'light', 'topmost': True, 'remember_geometry': False},
        })
        config = Config(self.path)
        self.assertTrue(config.load())
        self.assertEqual(config.redshift.command, '/opt/bin/redshift')
        self.assertEqual(config.redshift.method, 'vidmode')
        self.assertEqual(config.redshift.timeout, 5.0)
        self.assertEqual(config.timing.debounce_ms, 100)
        self.assertEqual(config.gui.theme, 'light')
        self.assertTrue(config.gui.topmost)
        self.assertFalse(config.gui.remember_geometry)

    def test_partial_file_uses_defaults_for_rest(self):
        self.write({'timing': {'debounce_ms': 400}})
        config = Config(self.path)
        self.assertTrue(config.load())
        self.assertEqual(config.timing.debounce_ms, 400)
        self.assertEqual(config.redshift.timeout, 3.0)

    def test_empty_file(self):
        self.write("")
        config = Config(self.path)
        self.assertTrue(config.load())
        self.assertEqual(config.redshift.command, "redshift")

    def test_invalid_yaml(self):
        self.write("redshift: [unclosed")
        config = Config(self.path)
        with self.assertLogs('screen_dimmer.config', level='ERROR'):
            self.assertFalse(config.load())

    def test_invalid_values_fall_back(self):
        self.write({'redshift': {'timeout': -1}, 'timing': {'debounce_ms': -5}})
        config = Config(self.path)
        self.assertTrue(config.load())
        self.assertEqual(config.redshift.timeout, 3.0)
        self.assertEqual(config.timing.debounce_ms, 250)

    def test_non_mapping_top_level(self):
        self.write("- just\n- a list\n")
        config = Config(self.path)
        with self.assertLogs('screen_dimmer.config', level='ERROR'):
            self.assertFalse(config.load())

    def test_scalar_section_falls_back_to_defaults(self):
        self.write("redshift: redshift-gtk\ntiming: 100\ngui:\n  topmost: true\n")
        config = Config(self.path)
        with self.assertLogs('screen_dimmer.config', level='WARNING') as logs:
            self.assertTrue(config.load())
        self.assertEqual(config.redshift.command, "redshift")
        self.assertEqual(config.redshift.timeout, 3.0)
        self.assertEqual(config.timing.debounce_ms, 250)
        self.assertTrue(config.gui.topmost)
        self.assertTrue(any("'redshift'" in line for line in logs.output))

    def test_save_and_reload(self):
        config = Config(Path(self.tmpdir.name) / "nested" / "config.yaml")
        config.timing.debounce_ms = 150
        config.gui.topmost = True
        self.assertTrue(config.save())

        reloaded = Config(config.config_path)
        self.assertTrue(reloaded.load())
        self.assertEqual(reloaded.timing.debounce_ms, 150)
        self.assertTrue(reloaded.gui.topmost)


if __name__ == '__main__':
    unittest.main(verbosity=2)
