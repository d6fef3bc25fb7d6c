"""
CustomTkinter-based Control Panel
=================================
Sliders for temperature, brightness and gamma with a reset button
"""

import json
import logging
import re
import tkinter as tk
from pathlib import Path
from typing import Callable, Dict, Optional

import customtkinter as ctk
from PIL import Image, ImageTk

from ..controller import DimmerController
from ..dispatch import UpdateQueue
from ..parameters import Parameter, ParameterModel

# Window geometry persistence file
WINDOW_GEOMETRY_FILE = Path.home() / ".config" / "screen-dimmer" / "window_geometry.json"

ASSETS_DIR = Path(__file__).parent.parent.parent / "assets"

logger = logging.getLogger(__name__)


class LabeledSlider:
    """A title, a current-value label, and a slider between min/max labels."""

    def __init__(self, parent, param: Parameter, colors: Dict[str, str], fonts: Dict[str, int],
                 on_user_change: Callable[[Parameter, float], None]):
        self.param = param
        self._on_user_change = on_user_change
        self._updating_from_code = False

        self.frame = ctk.CTkFrame(parent, fg_color="transparent")

        header = ctk.CTkFrame(self.frame, fg_color="transparent")
        header.pack(fill="x")
        ctk.CTkLabel(
            header, text=param.label, font=ctk.CTkFont(size=fonts['title']), anchor="w"
        ).pack(side="left")
        self.value_label = ctk.CTkLabel(
            header, text=param.format_value(),
            font=ctk.CTkFont(size=fonts['value'], weight="bold"),
            text_color=colors['accent'],
        )
        self.value_label.pack(side="right")

        row = ctk.CTkFrame(self.frame, fg_color="transparent")
        row.pack(fill="x", pady=(2, 0))
        ctk.CTkLabel(
            row, text=param.format_value(param.minimum),
            font=ctk.CTkFont(size=fonts['small']), text_color=colors['text_dim'],
        ).pack(side="left")
        ctk.CTkLabel(
            row, text=param.format_value(param.maximum),
            font=ctk.CTkFont(size=fonts['small']), text_color=colors['text_dim'],
        ).pack(side="right")

        self.slider = ctk.CTkSlider(
            row, from_=param.minimum, to=param.maximum,
            number_of_steps=param.number_of_steps,
            progress_color=colors['accent'],
            button_color=colors['accent'],
            button_hover_color=colors['accent_hover'],
            command=self._slider_callback,
        )
        self.slider.set(param.value)
        self.slider.pack(side="left", fill="x", expand=True, padx=10)

        param.add_listener(self._on_param_changed)

    def pack(self, **kwargs):
        self.frame.pack(**kwargs)

    def _slider_callback(self, value):
        # Skip if the slider is being set programmatically (prevents feedback loops)
        if not self._updating_from_code:
            self._on_user_change(self.param, value)

    def _on_param_changed(self, name: str, value: float):
        self.value_label.configure(text=self.param.format_value(value))
        self._updating_from_code = True
        try:
            self.slider.set(value)
        finally:
            self._updating_from_code = False


class DimmerPanelCTk:
    """
    Control panel window using CustomTkinter.

    The Tk mainloop runs on the calling thread, which becomes the
    interaction thread: it drains the UpdateQueue every POLL_INTERVAL_MS.
    """

    COLORS = {
        'accent': '#FF6B00',
        'accent_hover': '#FF8533',
        'bg': '#313131',
        'header': '#494949',
        'panel': '#414141',
        'border': '#373737',
        'divider': '#ffffff',
        'text': '#ffffff',
        'text_dim': '#888888',
    }

    FONT_SIZES = {
        'title': 13,
        'value': 14,
        'small': 10,
        'button': 12,
        'status': 12,
    }

    POLL_INTERVAL_MS = 50

    def __init__(
        self,
        model: ParameterModel,
        controller: DimmerController,
        updates: UpdateQueue,
        theme: str = "dark",
        topmost: bool = False,
        remember_geometry: bool = True,
    ):
        """Initialize the panel. The window is created by run()."""
        self.model = model
        self.controller = controller
        self.updates = updates
        self.theme = theme
        self.topmost = topmost
        self.remember_geometry = remember_geometry

        self._root: Optional[ctk.CTk] = None
        self._status_label = None
        self._reset_btn = None
        self._sliders: Dict[str, LabeledSlider] = {}
        self._icon_images = []
        self._status_text = "Ready."
        self._running = False

        controller.set_status_callback(self.set_status)

    def _create_window(self):
        """Create the CustomTkinter window."""
        ctk.set_appearance_mode(self.theme)
        ctk.set_default_color_theme("blue")

        self._root = ctk.CTk(className='screen-dimmer')
        self._root.title("Screen Dimmer")
        self._root.configure(fg_color=self.COLORS['bg'])
        self._set_window_icon()

        if self.topmost:
            self._root.attributes('-topmost', True)
        self._root.protocol("WM_DELETE_WINDOW", self._on_window_close)

        saved_geom = self._load_window_geometry() if self.remember_geometry else None
        if saved_geom:
            width = saved_geom.get('width', 400)
            height = saved_geom.get('height', 320)
            x = saved_geom.get('x', 0)
            y = saved_geom.get('y', 0)
            self._root.geometry(f"{width}x{height}+{x}+{y}")
            logger.info(f"Restored window geometry: {width}x{height}+{x}+{y}")
        else:
            self._root.geometry("400x320")
        self._root.minsize(320, 300)

        # Header bar
        header = ctk.CTkFrame(self._root, fg_color=self.COLORS['header'], corner_radius=0)
        header.pack(fill="x")
        self._reset_btn = ctk.CTkButton(
            header,
            text="⟳  Reset to defaults",
            font=ctk.CTkFont(size=self.FONT_SIZES['button']),
            fg_color=self.COLORS['panel'],
            hover_color=self.COLORS['accent_hover'],
            corner_radius=8,
            command=self._on_reset_clicked,
        )
        self._reset_btn.pack(side="left", padx=8, pady=8)

        # Settings panel
        panel = ctk.CTkFrame(
            self._root,
            fg_color=self.COLORS['panel'],
            border_color=self.COLORS['border'],
            border_width=1,
            corner_radius=10,
        )
        panel.pack(fill="x", padx=10, pady=10)

        for index, param in enumerate([self.model.brightness, self.model.temperature, self.model.gamma]):
            if index:
                ctk.CTkFrame(panel, height=1, fg_color=self.COLORS['divider'], corner_radius=0).pack(
                    fill="x", padx=12
                )
            slider = LabeledSlider(panel, param, self.COLORS, self.FONT_SIZES, self._on_slider_changed)
            slider.pack(fill="x", padx=12, pady=8)
            self._sliders[param.name] = slider

        self._status_label = ctk.CTkLabel(
            self._root,
            text=self._status_text,
            font=ctk.CTkFont(size=self.FONT_SIZES['status']),
            text_color=self.COLORS['text'],
            anchor="w",
            justify="left",
            wraplength=380,
        )
        self._status_label.pack(fill="x", padx=12, pady=(0, 10))

    def _on_slider_changed(self, param: Parameter, value: float):
        param.set_value(value)

    def _on_reset_clicked(self):
        logger.info("Reset requested")
        self.controller.reset()

    def set_status(self, text: str):
        """Set the status text. Interaction thread only; other threads post to the UpdateQueue."""
        self._status_text = text
        if self._status_label is not None:
            self._status_label.configure(text=text)

    def _poll_updates(self):
        self.updates.drain()
        if self._running and self._root is not None:
            self._root.after(self.POLL_INTERVAL_MS, self._poll_updates)

    def _set_window_icon(self):
        """Set the window icon."""
        try:
            icon_sizes = []
            for size in [16, 32, 48, 64]:
                size_path = ASSETS_DIR / f"icon_{size}.png"
                if size_path.exists():
                    icon_sizes.append(ImageTk.PhotoImage(Image.open(size_path)))

            if not icon_sizes:
                # Draw it if the PNGs were never generated
                from assets.icon import create_icon
                icon_sizes = [ImageTk.PhotoImage(create_icon(size)) for size in (32, 64)]

            self._icon_images = icon_sizes
            self._root.iconphoto(True, *icon_sizes)
        except Exception as e:
            logger.debug(f"Could not set window icon: {e}")

    def _load_window_geometry(self) -> Optional[Dict]:
        """Load saved window geometry from file."""
        try:
            if WINDOW_GEOMETRY_FILE.exists():
                with open(WINDOW_GEOMETRY_FILE, 'r') as f:
                    return json.load(f)
        except (OSError, ValueError) as e:
            logger.debug(f"Could not load window geometry: {e}")
        return None

    def _save_window_geometry(self):
        """Save current window geometry to file."""
        if not self._root or not self.remember_geometry:
            return
        geometry = self._root.geometry()
        # Parse "WIDTHxHEIGHT+X+Y" format
        match = re.match(r'(\d+)x(\d+)\+(-?\d+)\+(-?\d+)', geometry)
        if not match:
            return
        data = {
            'width': int(match.group(1)),
            'height': int(match.group(2)),
            'x': int(match.group(3)),
            'y': int(match.group(4)),
        }
        try:
            WINDOW_GEOMETRY_FILE.parent.mkdir(parents=True, exist_ok=True)
            with open(WINDOW_GEOMETRY_FILE, 'w') as f:
                json.dump(data, f)
            logger.debug(f"Saved window geometry: {data}")
        except OSError as e:
            logger.debug(f"Could not save window geometry: {e}")

    def _on_window_close(self):
        logger.info("Window closed, shutting down...")
        self._running = False
        self._save_window_geometry()
        self.controller.shutdown()
        self._root.quit()

    def run(self, initial_status: Optional[str] = None):
        """Create the window and run the Tk mainloop on this thread (blocking)."""
        self.updates.bind_to_current_thread()
        if initial_status:
            self._status_text = initial_status
        self._create_window()
        self._running = True
        self._root.after(self.POLL_INTERVAL_MS, self._poll_updates)
        self._root.mainloop()
        try:
            self._root.destroy()
        except tk.TclError as e:
            logger.debug(f"Window already destroyed: {e}")
