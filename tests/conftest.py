"""Configure test path so celebrationpro packages are importable."""

import sys
from pathlib import Path

import pytest

# Add src/ to path so `from celebrationpro.hierarchy import ...` works
src_dir = Path(__file__).resolve().parent.parent / "src"
if str(src_dir) not in sys.path:
    sys.path.insert(0, str(src_dir))

from celebrationpro.hierarchy.engine import EventTaskHierarchy  # noqa: E402


@pytest.fixture
def hierarchy() -> EventTaskHierarchy:
    return EventTaskHierarchy()


@pytest.fixture
def wedding() -> EventTaskHierarchy:
    """The four-task wedding example with lighting as a shared prerequisite."""
    h = EventTaskHierarchy()
    h.create_task(
        {
            "id": "dec_001",
            "name": "Stage Decoration Setup",
            "module_id": "decoration_001",
            "assigned_to": "decorator_team_1",
            "due_date": "2024-01-15T08:00:00Z",
            "priority": "high",
            "estimated_hours": 6,
            "metadata": {"event_id": "wedding_001", "venue": "main_hall"},
        }
    )
    h.create_task(
        {
            "id": "dec_002",
            "name": "Floral Arrangements",
            "module_id": "decoration_001",
            "parent_task_id": "dec_001",
            "assigned_to": "florist_team",
            "due_date": "2024-01-15T10:00:00Z",
            "estimated_hours": 3,
            "metadata": {
                "event_id": "wedding_001",
                "flowers": ["roses", "marigolds", "jasmine"],
            },
        }
    )
    h.create_task(
        {
            "id": "light_001",
            "name": "Stage Lighting Setup",
            "module_id": "lighting_001",
            "assigned_to": "electrician_team",
            "due_date": "2024-01-15T06:00:00Z",
            "priority": "high",
            "estimated_hours": 4,
            "metadata": {"event_id": "wedding_001", "equipment": ["led_panels"]},
        }
    )
    h.create_task(
        {
            "id": "food_001",
            "name": "Menu Preparation",
            "module_id": "food_001",
            "assigned_to": "head_chef",
            "due_date": "2024-01-15T12:00:00Z",
            "estimated_hours": 8,
            "metadata": {"event_id": "wedding_001", "guestCount": 500},
        }
    )
    h.add_dependency("dec_002", "light_001")
    h.add_dependency("dec_001", "light_001")
    return h
