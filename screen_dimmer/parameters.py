"""
Parameter Model - temperature, brightness and gamma settings
============================================================
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterator, List, NamedTuple

logger = logging.getLogger(__name__)


TEMPERATURE = "temperature"
BRIGHTNESS = "brightness"
GAMMA = "gamma"


class Settings(NamedTuple):
    """Immutable snapshot of the three values sent to redshift."""
    temperature: int
    brightness: float
    gamma: float


DEFAULT_SETTINGS = Settings(temperature=6500, brightness=1.00, gamma=1.00)


@dataclass
class Parameter:
    """A continuous setting with a range, a step and change listeners."""
    name: str
    label: str
    minimum: float
    maximum: float
    step: float
    default: float
    fmt: str = "%.2f"
    unit: str = ""
    value: float = field(init=False)
    _listeners: List[Callable[[str, float], None]] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self):
        self.value = self.normalize(self.default)

    @property
    def number_of_steps(self) -> int:
        """Number of slider steps between minimum and maximum."""
        return int(round((self.maximum - self.minimum) / self.step))

    def normalize(self, value: float) -> float:
        """Clamp to the range and snap to the step grid."""
        value = min(max(float(value), self.minimum), self.maximum)
        steps = round((value - self.minimum) / self.step)
        snapped = self.minimum + steps * self.step
        # Keep float noise out of the displayed and formatted values
        return round(min(snapped, self.maximum), 6)

    def format_value(self, value: float = None) -> str:
        text = self.fmt % (self.value if value is None else value)
        if self.unit:
            text += " " + self.unit
        return text

    def add_listener(self, callback: Callable[[str, float], None]):
        """Register callback(name, value) fired after every value change."""
        self._listeners.append(callback)

    def remove_listener(self, callback: Callable[[str, float], None]):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def set_value(self, value: float, notify: bool = True) -> bool:
        """
        Set a new value.

        Args:
            value: Requested value (clamped and snapped)
            notify: Whether to call listeners

        Returns:
            True if the stored value changed
        """
        new_value = self.normalize(value)
        if new_value == self.value:
            return False
        self.value = new_value
        if notify:
            for callback in list(self._listeners):
                callback(self.name, new_value)
        return True


class ParameterModel:
    """
    The three settings of the panel plus the suppression flag.

    Listeners registered with ``add_change_listener`` see user-driven changes
    only; writes performed inside ``suppressed()`` do not reach them.
    """

    def __init__(self):
        self.temperature = Parameter(
            TEMPERATURE, "Temperature (K)", 1000, 10000, 100,
            DEFAULT_SETTINGS.temperature, fmt="%.0f", unit="K",
        )
        self.brightness = Parameter(
            BRIGHTNESS, "Brightness", 0.10, 1.00, 0.01, DEFAULT_SETTINGS.brightness,
        )
        self.gamma = Parameter(
            GAMMA, "Gamma", 0.50, 2.50, 0.01, DEFAULT_SETTINGS.gamma,
        )
        self._suppressed = False
        self._lock = threading.RLock()
        self._change_listeners: List[Callable[[str, float], None]] = []

        for param in self.parameters():
            param.add_listener(self._on_parameter_changed)

    def parameters(self) -> List[Parameter]:
        return [self.temperature, self.brightness, self.gamma]

    def get(self, name: str) -> Parameter:
        for param in self.parameters():
            if param.name == name:
                return param
        raise KeyError(name)

    @property
    def is_suppressed(self) -> bool:
        return self._suppressed

    def add_change_listener(self, callback: Callable[[str, float], None]):
        """Register callback(name, value) for user-driven changes."""
        self._change_listeners.append(callback)

    def _on_parameter_changed(self, name: str, value: float):
        if self._suppressed:
            logger.debug(f"Suppressed change notification: {name}={value}")
            return
        for callback in list(self._change_listeners):
            callback(name, value)

    def set_value(self, name: str, value: float) -> bool:
        return self.get(name).set_value(value)

    def snapshot(self) -> Settings:
        """Capture the current values."""
        return Settings(
            temperature=int(self.temperature.value),
            brightness=self.brightness.value,
            gamma=self.gamma.value,
        )

    @contextmanager
    def suppressed(self) -> Iterator[None]:
        """Silence change listeners for programmatic writes."""
        with self._lock:
            self._suppressed = True
            try:
                yield
            finally:
                self._suppressed = False

    def restore(self, settings: Settings = DEFAULT_SETTINGS) -> Dict[str, float]:
        """
        Write settings back without notifying change listeners.

        Returns:
            Dict of parameter name to the value now stored
        """
        with self.suppressed():
            self.temperature.set_value(settings.temperature)
            self.brightness.set_value(settings.brightness)
            self.gamma.set_value(settings.gamma)
        logger.debug(f"Restored settings: {settings}")
        return {p.name: p.value for p in self.parameters()}
