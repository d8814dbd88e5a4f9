"""
Shared test fixtures for pi-planning tests.
Patches the config module so tests never read a real .env or board file.
"""

import os
import sys

import pytest

# Add project root to path so imports work
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pi_planning import config  # noqa: E402
from pi_planning.canvas import MemoryCanvas  # noqa: E402
from pi_planning.client import PlanningClient  # noqa: E402

TRACKER_URL = "https://tracker.example.com"


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch, tmp_path):
    """Ensure every test starts with a clean config state."""
    monkeypatch.setattr(config, "env", {})
    monkeypatch.setattr(config, "TRACKER_BASE_URL", TRACKER_URL)
    monkeypatch.setattr(config, "BOARD_PATH", str(tmp_path / "board.json"))
    monkeypatch.setattr(config, "LOG_ENABLED", False)
    monkeypatch.setattr(config, "RUNTIME_QUIET", False)
    monkeypatch.setattr(config, "RUNTIME_VERBOSE", False)
    monkeypatch.setattr(config, "GRID_COLUMNS", 5)


@pytest.fixture
def canvas():
    return MemoryCanvas()


@pytest.fixture
def client(canvas):
    return PlanningClient(canvas=canvas)


def place(canvas, card, position=(0.0, 0.0)):
    """Create *card* on *canvas* with its issue key stored as metadata."""
    frame = canvas.create_card(card, position)
    if card.issue_key:
        canvas.set_frame_metadata(frame, config.META_ISSUE_KEY, card.issue_key)
    return frame
