#!/usr/bin/env python3
"""
Screen Dimmer - redshift control panel for Linux
================================================

Adjust colour temperature, brightness and gamma of X11 displays through
redshift's one-shot mode.

Features:
- Debounced live apply while dragging sliders
- Superseded redshift calls are cancelled, slow ones time out
- Reset to defaults (redshift -x)

Usage:
    python main.py [--config PATH] [--debug]
    python main.py --reset
    python main.py --temperature 4500 --brightness 0.8 --gamma 1.0

    Options:
        --config PATH       Path to configuration file
        --debug             Enable debug logging
        --reset             Clear adjustments and exit
        --temperature K     Apply temperature (1000-10000) and exit
        --brightness B      Apply brightness (0.10-1.00) and exit
        --gamma G           Apply gamma (0.50-2.50) and exit
"""

# Disable IBus integration to prevent high CPU usage
# Must be set before any tkinter imports
import os
os.environ['GTK_IM_MODULE'] = ''
os.environ['QT_IM_MODULE'] = ''
os.environ['XMODIFIERS'] = ''

import argparse
import logging
import signal
import sys
from pathlib import Path
from typing import Optional


# Set up logging first
def setup_logging(debug: bool = False, log_file: Optional[Path] = None):
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO

    handlers = [logging.StreamHandler(sys.stdout)]

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=handlers,
    )

logger = logging.getLogger(__name__)


def load_config(config_path: Optional[Path]):
    """Load the configuration file, falling back to defaults."""
    from screen_dimmer.config import Config

    config = Config(config_path)
    if not config.load():
        logger.warning("Using default configuration")
    return config


def run_once(config, reset: bool = False, temperature: Optional[float] = None,
             brightness: Optional[float] = None, gamma: Optional[float] = None) -> int:
    """Run one redshift invocation synchronously and print the result."""
    from screen_dimmer.parameters import ParameterModel
    from screen_dimmer.redshift import RedshiftRunner, RedshiftError, check_redshift_available

    available, msg = check_redshift_available(config.redshift.command)
    if not available:
        print(msg)
        return 1

    runner = RedshiftRunner(
        command=config.redshift.command,
        method=config.redshift.method,
        timeout=config.redshift.timeout,
    )

    try:
        if reset:
            result = runner.reset()
        else:
            # Clamp and snap through the model so CLI values obey slider ranges
            model = ParameterModel()
            with model.suppressed():
                if temperature is not None:
                    model.temperature.set_value(temperature)
                if brightness is not None:
                    model.brightness.set_value(brightness)
                if gamma is not None:
                    model.gamma.set_value(gamma)
            result = runner.apply(model.snapshot())
        result.raise_for_status()
    except RedshiftError as e:
        print(e)
        return 1

    print(result.message)
    return 0


class ScreenDimmerApp:
    """
    Main application controller.

    Wires the parameter model, the redshift runner, the debounce controller
    and the control panel together.
    """

    def __init__(self, config):
        """
        Initialize the application.

        Args:
            config: Loaded Config
        """
        from screen_dimmer.controller import DimmerController
        from screen_dimmer.dispatch import UpdateQueue
        from screen_dimmer.parameters import ParameterModel
        from screen_dimmer.redshift import RedshiftRunner

        self.config = config
        self.model = ParameterModel()
        self.updates = UpdateQueue()
        self.runner = RedshiftRunner(
            command=config.redshift.command,
            method=config.redshift.method,
            timeout=config.redshift.timeout,
        )
        self.controller = DimmerController(
            self.model,
            self.runner,
            self.updates,
            debounce_ms=config.timing.debounce_ms,
        )
        self.panel = None

    def startup_status(self) -> str:
        """Status shown before any interaction."""
        from screen_dimmer.redshift import check_redshift_available

        available, msg = check_redshift_available(self.config.redshift.command)
        if available:
            logger.info(msg)
            status = "Ready."
        else:
            logger.error(msg)
            status = msg
        self.controller.set_status(status)
        return status

    def run(self) -> int:
        """Run the application (blocking)."""
        from screen_dimmer.gui.panel_ctk import DimmerPanelCTk

        logger.info("Starting Screen Dimmer...")
        status = self.startup_status()

        self.panel = DimmerPanelCTk(
            self.model,
            self.controller,
            self.updates,
            theme=self.config.gui.theme,
            topmost=self.config.gui.topmost,
            remember_geometry=self.config.gui.remember_geometry,
        )

        def signal_handler(signum, frame):
            logger.info(f"Received signal {signum}")
            self.updates.post(self.panel._on_window_close)

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

        try:
            self.panel.run(initial_status=status)
        except KeyboardInterrupt:
            pass
        finally:
            self.controller.shutdown()

        logger.info("Screen Dimmer stopped")
        return 0


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Screen Dimmer - redshift control panel",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    parser.add_argument(
        '--config', '-c',
        type=Path,
        help='Path to configuration file'
    )
    parser.add_argument(
        '--debug', '-d',
        action='store_true',
        help='Enable debug logging'
    )

    # Quick commands
    parser.add_argument(
        '--reset', '-x',
        action='store_true',
        help='Clear all adjustments and exit'
    )
    parser.add_argument(
        '--temperature', '-t',
        type=float,
        metavar='K',
        help='Apply colour temperature and exit'
    )
    parser.add_argument(
        '--brightness', '-b',
        type=float,
        metavar='VALUE',
        help='Apply brightness and exit'
    )
    parser.add_argument(
        '--gamma', '-g',
        type=float,
        metavar='VALUE',
        help='Apply gamma and exit'
    )

    args = parser.parse_args()

    one_shot = args.reset or any(
        v is not None for v in (args.temperature, args.brightness, args.gamma)
    )

    # Setup logging
    log_file = None
    if not one_shot:
        log_file = Path.home() / ".local" / "share" / "screen-dimmer" / "screen-dimmer.log"
    setup_logging(args.debug, log_file)

    config = load_config(args.config)

    if one_shot:
        return run_once(
            config,
            reset=args.reset,
            temperature=args.temperature,
            brightness=args.brightness,
            gamma=args.gamma,
        )

    return ScreenDimmerApp(config).run()


if __name__ == '__main__':
    sys.exit(main())
