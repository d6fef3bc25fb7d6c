"""
Screen Dimmer - redshift control panel for Linux
================================================

Adjust colour temperature, brightness and gamma with:
- Debounced live apply while dragging sliders
- Superseded and slow redshift calls cancelled or timed out
- One-click reset to defaults
"""

__version__ = "1.0.0"
__author__ = "Screen Dimmer"

from .config import Config
from .controller import DimmerController
from .dispatch import UpdateQueue
from .parameters import ParameterModel, Settings, DEFAULT_SETTINGS
from .redshift import RedshiftRunner, RedshiftError, CancelToken

__all__ = [
    "Config",
    "DimmerController",
    "UpdateQueue",
    "ParameterModel",
    "Settings",
    "DEFAULT_SETTINGS",
    "RedshiftRunner",
    "RedshiftError",
    "CancelToken",
]
