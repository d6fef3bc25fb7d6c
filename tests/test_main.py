#!/usr/bin/env python3
"""
Tests for the entry point: startup check and one-shot commands.
"""

import io
import sys
import unittest
from contextlib import redirect_stdout
from unittest.mock import patch
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import main
from screen_dimmer.config import Config
from screen_dimmer.redshift import CommandResult, Outcome


NOT_FOUND = "Error: 'redshift' not found in PATH. Install it (e.g., sudo apt install redshift)."


class TestStartupStatus(unittest.TestCase):

    @patch('screen_dimmer.redshift.shutil.which', return_value=None)
    def test_missing_tool_reported_before_interaction(self, mock_which):
        app = main.ScreenDimmerApp(Config())
        with self.assertLogs('main', level='ERROR'):
            self.assertEqual(app.startup_status(), NOT_FOUND)
        self.assertEqual(app.controller.status_text, NOT_FOUND)

    @patch('screen_dimmer.redshift.shutil.which', return_value="/usr/bin/redshift")
    def test_tool_present(self, mock_which):
        app = main.ScreenDimmerApp(Config())
        self.assertEqual(app.startup_status(), "Ready.")
        self.assertEqual(app.controller.status_text, "Ready.")

    def test_app_uses_config(self):
        config = Config()
        config.timing.debounce_ms = 80
        config.redshift.timeout = 1.5
        app = main.ScreenDimmerApp(config)
        self.assertEqual(app.controller.debounce_ms, 80)
        self.assertEqual(app.runner.timeout, 1.5)


@patch('screen_dimmer.redshift.shutil.which', return_value="/usr/bin/redshift")
class TestRunOnce(unittest.TestCase):

    def run_once(self, **kwargs):
        out = io.StringIO()
        with redirect_stdout(out):
            code = main.run_once(Config(), **kwargs)
        return code, out.getvalue().strip()

    @patch('screen_dimmer.redshift.RedshiftRunner.apply')
    def test_apply_clamps_and_fills_defaults(self, mock_apply, mock_which):
        mock_apply.return_value = CommandResult("apply", Outcome.COMPLETED, "Applied.", 0)
        code, out = self.run_once(temperature=20000, brightness=0.557)

        self.assertEqual(code, 0)
        self.assertEqual(out, "Applied.")
        settings = mock_apply.call_args[0][0]
        self.assertEqual(settings.temperature, 10000)
        self.assertAlmostEqual(settings.brightness, 0.56)
        self.assertEqual(settings.gamma, 1.0)

    @patch('screen_dimmer.redshift.RedshiftRunner.reset')
    def test_reset(self, mock_reset, mock_which):
        mock_reset.return_value = CommandResult("reset", Outcome.COMPLETED, "Reset to defaults.", 0)
        code, out = self.run_once(reset=True)
        self.assertEqual(code, 0)
        self.assertEqual(out, "Reset to defaults.")

    @patch('screen_dimmer.redshift.RedshiftRunner.apply')
    def test_failure_exit_code(self, mock_apply, mock_which):
        mock_apply.return_value = CommandResult("apply", Outcome.FAILED, "redshift error: exit status 1", 1)
        code, out = self.run_once(gamma=1.2)
        self.assertEqual(code, 1)
        self.assertEqual(out, "redshift error: exit status 1")

    def test_missing_tool(self, mock_which):
        mock_which.return_value = None
        code, out = self.run_once(reset=True)
        self.assertEqual(code, 1)
        self.assertEqual(out, NOT_FOUND)


if __name__ == '__main__':
    unittest.main(verbosity=2)
