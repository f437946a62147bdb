"""Messages, input state and queues shared between the game and the UI thread."""

from __future__ import annotations

import enum
import queue
from collections.abc import Hashable
from dataclasses import dataclass, field
from typing import Union

from .draw_cmd import DrawOp


@dataclass
class AtlasUpload:
    """A dirty rectangle of RGBA pixels to copy into the atlas texture."""

    x: int
    y: int
    width: int
    height: int
    pixels: bytes


@dataclass
class UiFrame:
    """One frame of UI draw output."""

    commands: list[DrawOp]
    atlas_uploads: list[AtlasUpload]
    atlas_size: tuple[int, int]
    dpi_scale: float


class MouseButton(enum.Enum):
    LEFT = "left"
    RIGHT = "right"
    MIDDLE = "middle"
    BACK = "back"
    FORWARD = "forward"


_BUTTON_INDEX = {MouseButton.LEFT: 0, MouseButton.RIGHT: 1, MouseButton.MIDDLE: 2}


@dataclass(frozen=True)
class WindowResized:
    width: float
    height: float
    dpi: float


@dataclass(frozen=True)
class MouseMoved:
    x: float
    y: float


@dataclass(frozen=True)
class MouseButtonInput:
    button: MouseButton
    pressed: bool


@dataclass(frozen=True)
class KeyInput:
    """A key press or release; ``code`` is any hashable key identifier."""

    code: Hashable
    pressed: bool


@dataclass(frozen=True)
class Scroll:
    dx: float
    dy: float


@dataclass(frozen=True)
class CharTyped:
    char: str


@dataclass(frozen=True)
class Shutdown:
    """Asks the UI thread to stop."""


UiInput = Union[WindowResized, MouseMoved, MouseButtonInput, KeyInput, Scroll, CharTyped, Shutdown]


def _flags() -> list[bool]:
    return [False, False, False]


@dataclass
class UiInputState:
    """Input accumulated for the current UI frame.

    Mouse button lists are indexed left, right, middle.
    """

    window_size: tuple[float, float] = (0.0, 0.0)
    dpi_scale: float = 0.0
    mouse_pos: tuple[float, float] = (0.0, 0.0)
    mouse_buttons: list[bool] = field(default_factory=_flags)
    mouse_just_pressed: list[bool] = field(default_factory=_flags)
    mouse_just_released: list[bool] = field(default_factory=_flags)
    scroll_delta: tuple[float, float] = (0.0, 0.0)
    keys_pressed: set[Hashable] = field(default_factory=set)
    keys_just_pressed: set[Hashable] = field(default_factory=set)
    keys_just_released: set[Hashable] = field(default_factory=set)

    def has_window_size(self) -> bool:
        """True once a positive window size has been received."""
        width, height = self.window_size
        return width > 0.0 and height > 0.0

    def begin_frame(self) -> None:
        """Reset the per-frame transient state."""
        self.mouse_just_pressed = _flags()
        self.mouse_just_released = _flags()
        self.scroll_delta = (0.0, 0.0)
        self.keys_just_pressed.clear()
        self.keys_just_released.clear()

    def key_just_pressed(self, code: Hashable) -> bool:
        return code in self.keys_just_pressed

    def key_pressed(self, code: Hashable) -> bool:
        return code in self.keys_pressed

    def apply(self, event: UiInput) -> None:
        """Fold one input event into the state."""
        match event:
            case WindowResized(width=width, height=height, dpi=dpi):
                self.window_size = (width, height)
                self.dpi_scale = dpi
            case MouseMoved(x=x, y=y):
                self.mouse_pos = (x, y)
            case MouseButtonInput(button=button, pressed=pressed):
                idx = _BUTTON_INDEX.get(button)
                if idx is None:
                    return
                held = self.mouse_buttons[idx]
                if pressed and not held:
                    self.mouse_just_pressed[idx] = True
                if not pressed and held:
                    self.mouse_just_released[idx] = True
                self.mouse_buttons[idx] = pressed
            case Scroll(dx=dx, dy=dy):
                sx, sy = self.scroll_delta
                self.scroll_delta = (sx + dx, sy + dy)
            case KeyInput(code=code, pressed=True):
                if code not in self.keys_pressed:
                    self.keys_pressed.add(code)
                    self.keys_just_pressed.add(code)
            case KeyInput(code=code, pressed=False):
                if code in self.keys_pressed:
                    self.keys_pressed.discard(code)
                    self.keys_just_released.add(code)
            case CharTyped() | Shutdown():
                pass
            case _:
                raise TypeError(f"unsupported input event: {type(event).__name__}")


@dataclass(frozen=True)
class Clicked:
    id: int


@dataclass(frozen=True)
class Hovered:
    id: int


UiEvent = Union[Clicked, Hovered]


@dataclass
class UiChannels:
    """The game side of the UI queues."""

    input_tx: queue.SimpleQueue
    frame_rx: queue.SimpleQueue
    event_rx: queue.SimpleQueue


@dataclass
class UiThreadChannels:
    """The UI thread side of the UI queues."""

    input_rx: queue.SimpleQueue
    frame_tx: queue.SimpleQueue
    event_tx: queue.SimpleQueue


def create_channels() -> tuple[UiChannels, UiThreadChannels]:
    """Create the input, frame and event queues and hand out both ends."""
    inputs: queue.SimpleQueue = queue.SimpleQueue()
    frames: queue.SimpleQueue = queue.SimpleQueue()
    events: queue.SimpleQueue = queue.SimpleQueue()
    return (
        UiChannels(input_tx=inputs, frame_rx=frames, event_rx=events),
        UiThreadChannels(input_rx=inputs, frame_tx=frames, event_tx=events),
    )