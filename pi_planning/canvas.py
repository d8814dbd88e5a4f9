"""
Canvas service boundary and the in-process board used by the CLI and MCP server.

The core never draws. It hands a Card and a position to ``create_card`` and
later reads frames back through metadata and text fragments only.
"""

from __future__ import annotations

import copy
import json
import os
import tempfile
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Protocol

from pi_planning._utils import log_event
from pi_planning.exceptions import CanvasError
from pi_planning.layout import ALL_FONTS, render_card
from pi_planning.models import Card, Fragment
from pi_planning.templates import get_template

BOARD_SCHEMA_VERSION = 1


@dataclass
class Frame:
    """One rendered card on the board."""

    id: str
    name: str
    x: float
    y: float
    width: float
    height: float
    shape: str = "square"
    color: tuple[float, float, float] = (0.5, 0.5, 0.5)
    fragments: list[Fragment] = field(default_factory=list)
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def position(self):
        return (self.y, self.x)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "shape": self.shape,
            "color": list(self.color),
            "fragments": [f.to_dict() for f in self.fragments],
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            x=float(data.get("x", 0)),
            y=float(data.get("y", 0)),
            width=float(data.get("width", 0)),
            height=float(data.get("height", 0)),
            shape=str(data.get("shape", "square")),
            color=tuple(data.get("color", (0.5, 0.5, 0.5))),  # type: ignore[arg-type]
            fragments=[Fragment.from_dict(f) for f in data.get("fragments", [])],
            metadata={str(k): str(v) for k, v in (data.get("metadata") or {}).items()},
        )


class CanvasService(Protocol):
    """Operations the core needs from a host canvas."""

    def load_fonts(self) -> None: ...

    def create_card(self, card: Card, position: tuple[float, float]) -> Frame: ...

    def enumerate_frames(self, predicate: Callable[[Frame], bool] | None = None) -> list[Frame]: ...

    def get_frame_metadata(self, frame: Frame, key: str) -> str: ...

    def set_frame_metadata(self, frame: Frame, key: str, value: str) -> None: ...

    def get_text_fragments(self, frame: Frame) -> list[Fragment]: ...

    def clear_title_link(self, frame: Frame) -> None: ...

    def notify_user(self, message: str) -> None: ...

    def scroll_to(self, frames: list[Frame]) -> None: ...

    def viewport_center(self) -> tuple[float, float]: ...


class MemoryCanvas:
    """Board kept in memory, optionally persisted to a JSON file."""

    def __init__(self, available_fonts=ALL_FONTS, viewport=(0.0, 0.0)):
        self.available_fonts = tuple(available_fonts)
        self.loaded_fonts: set[str] = set()
        self.font_loads = 0
        self.frames: dict[str, Frame] = {}
        self.notifications: list[str] = []
        self.scrolled_to: list[str] = []
        self.viewport = (float(viewport[0]), float(viewport[1]))
        self._next_id = 1

    # -- CanvasService --

    def load_fonts(self):
        self.font_loads += 1
        self.loaded_fonts.update(self.available_fonts)

    def create_card(self, card, position):
        template = get_template(card.kind)
        width, height, fragments = render_card(card, self.loaded_fonts)
        frame = Frame(
            id=self._new_id(),
            name=template.title,
            x=float(position[0]),
            y=float(position[1]),
            width=width,
            height=height,
            shape=template.shape,
            color=template.color,
            fragments=fragments,
        )
        self.frames[frame.id] = frame
        log_event("CANVAS", event="frame_created", frame_id=frame.id, kind=card.kind)
        return frame

    def enumerate_frames(self, predicate=None):
        frames = list(self.frames.values())
        if predicate is None:
            return frames
        return [f for f in frames if predicate(f)]

    def get_frame_metadata(self, frame, key):
        return self._live(frame).metadata.get(key, "")

    def set_frame_metadata(self, frame, key, value):
        target = self._live(frame)
        if value:
            target.metadata[key] = str(value)
        else:
            target.metadata.pop(key, None)

    def get_text_fragments(self, frame):
        return list(self._live(frame).fragments)

    def clear_title_link(self, frame):
        target = self._live(frame)
        if not target.fragments:
            return
        idx = min(range(len(target.fragments)), key=lambda i: target.fragments[i].y)
        target.fragments[idx] = replace(target.fragments[idx], link=None)

    def notify_user(self, message):
        self.notifications.append(message)

    def scroll_to(self, frames):
        self.scrolled_to = [f.id for f in frames]

    def viewport_center(self):
        return self.viewport

    # -- Host-side edits (what a user does on the board) --

    def get_frame(self, frame_id):
        try:
            return self.frames[frame_id]
        except KeyError:
            raise CanvasError(f"[ERROR] Frame '{frame_id}' not found.") from None

    def duplicate_frame(self, frame_id, dx=40.0, dy=40.0):
        """Copy a frame the way a host paste does, metadata included."""
        source = self.get_frame(frame_id)
        clone = copy.deepcopy(source)
        clone.id = self._new_id()
        clone.x += dx
        clone.y += dy
        self.frames[clone.id] = clone
        return clone

    def edit_text(self, frame_id, index, text):
        frame = self.get_frame(frame_id)
        if not 0 <= index < len(frame.fragments):
            raise CanvasError(f"[ERROR] Frame '{frame_id}' has no text fragment {index}.")
        frame.fragments[index] = replace(frame.fragments[index], text=text)

    def move_frame(self, frame_id, x, y):
        frame = self.get_frame(frame_id)
        frame.x, frame.y = float(x), float(y)

    def remove_frame(self, frame_id):
        self.get_frame(frame_id)
        del self.frames[frame_id]

    # -- Persistence --

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema_version": BOARD_SCHEMA_VERSION,
            "next_id": self._next_id,
            "viewport": list(self.viewport),
            "frames": [f.to_dict() for f in self.frames.values()],
        }

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise CanvasError("[ERROR] Invalid board file: expected a JSON object.")
        canvas = cls(viewport=tuple(data.get("viewport") or (0.0, 0.0)))
        try:
            for raw in data.get("frames", []):
                frame = Frame.from_dict(raw)
                canvas.frames[frame.id] = frame
        except (KeyError, TypeError, ValueError) as e:
            raise CanvasError(f"[ERROR] Invalid board file: bad frame entry ({e}).") from None
        canvas._next_id = max(int(data.get("next_id", 1)), len(canvas.frames) + 1)
        return canvas

    @classmethod
    def load(cls, path):
        """Load a board file. A missing file gives an empty board."""
        if not os.path.exists(path):
            return cls()
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise CanvasError(
                f"[ERROR] Board file '{path}' is not valid JSON: {e.msg} at position {e.pos}"
            ) from None
        except OSError as e:
            raise CanvasError(f"[ERROR] Cannot read board file '{path}': {e}") from None
        return cls.from_dict(data)

    def save(self, path):
        """Write the board to *path* (atomic write-then-rename)."""
        board_dir = os.path.dirname(os.path.abspath(path))
        try:
            fd, tmp_path = tempfile.mkstemp(dir=board_dir, prefix=".board_tmp_")
        except OSError as e:
            raise CanvasError(f"[ERROR] Cannot write board file '{path}': {e}") from None
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except Exception:
            try:
                os.remove(tmp_path)
            except OSError:
                pass
            raise

    # -- internals --

    def _new_id(self):
        while f"1:{self._next_id}" in self.frames:
            self._next_id += 1
        frame_id = f"1:{self._next_id}"
        self._next_id += 1
        return frame_id

    def _live(self, frame):
        return self.get_frame(frame.id if isinstance(frame, Frame) else frame)
