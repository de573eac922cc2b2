"""JsonPlanSource: read an event plan from a JSON file."""

import json
from pathlib import Path
from typing import Any

from celebrationpro.hierarchy.models import EVENT_ID_KEY, TaskPriority, TaskStatus

from .protocol import PlanEntry, PlanFormatError, PlanSource

DEFAULT_PLAN_FILE = "celebration-plan.json"

_REQUIRED_KEYS = ("id", "name")


class JsonPlanSource(PlanSource):
    """Parse tasks from a JSON event plan.

    Expected shape::

        {
          "event_id": "wedding_001",
          "tasks": [
            {"id": "light_001", "name": "Stage Lighting", "module_id": "lighting",
             "assigned_to": "electricians", "status": "completed"},
            {"id": "dec_001", "name": "Stage Decoration", "depends_on": ["light_001"]}
          ]
        }

    The top-level ``event_id`` is copied into each task's metadata unless
    the task sets its own. Event ids are stored as strings.
    """

    source_name = "json"

    @classmethod
    def can_handle(cls, root: Path) -> bool:
        return (root / DEFAULT_PLAN_FILE).exists()

    @classmethod
    def create(cls, root: Path) -> "JsonPlanSource":
        path = root / DEFAULT_PLAN_FILE
        if not path.exists():
            raise FileNotFoundError(f"No {DEFAULT_PLAN_FILE} found in {root}")
        return cls(path)

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def get_entries(self) -> list[PlanEntry]:
        data = self._read()
        event_id = data.get("event_id")
        return [
            self._parse_entry(raw, index, event_id)
            for index, raw in enumerate(data["tasks"])
        ]

    def update_status(self, task_id: str, status: TaskStatus) -> bool:
        data = self._read()
        changed = False
        for raw in data["tasks"]:
            if isinstance(raw, dict) and str(raw.get("id")) == task_id:
                raw["status"] = str(status)
                changed = True
        if changed:
            self._path.write_text(
                json.dumps(data, indent=2, ensure_ascii=False) + "\n",
                encoding="utf-8",
            )
        return changed

    def _read(self) -> dict[str, Any]:
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise PlanFormatError(f"{self._path}: invalid JSON: {exc}") from exc
        if not isinstance(data, dict) or not isinstance(data.get("tasks"), list):
            raise PlanFormatError(
                f"{self._path}: expected an object with a 'tasks' list"
            )
        return data

    def _parse_entry(self, raw: Any, index: int, event_id: Any) -> PlanEntry:
        if not isinstance(raw, dict):
            raise PlanFormatError(f"{self._path}: task #{index} is not an object")
        missing = [key for key in _REQUIRED_KEYS if not raw.get(key)]
        if missing:
            raise PlanFormatError(
                f"{self._path}: task #{index} is missing {', '.join(missing)}"
            )

        task_id = str(raw["id"])
        metadata = raw.get("metadata") or {}
        if not isinstance(metadata, dict):
            raise PlanFormatError(
                f"{self._path}: task '{task_id}' metadata must be an object"
            )
        metadata = dict(metadata)
        # Event ids are compared against CLI arguments, which are strings
        if metadata.get(EVENT_ID_KEY) is not None:
            metadata[EVENT_ID_KEY] = str(metadata[EVENT_ID_KEY])
        elif event_id is not None:
            metadata[EVENT_ID_KEY] = str(event_id)

        depends_on = raw.get("depends_on", [])
        if not isinstance(depends_on, list):
            raise PlanFormatError(
                f"{self._path}: task '{task_id}' depends_on must be a list"
            )

        record = {
            "id": task_id,
            "name": raw["name"],
            "module_id": raw.get("module_id", ""),
            "assigned_to": raw.get("assigned_to", ""),
            "parent_task_id": _optional_str(raw.get("parent_task_id")),
            "due_date": raw.get("due_date"),
            "priority": raw.get("priority"),
            "estimated_hours": raw.get("estimated_hours"),
            "metadata": metadata,
        }

        try:
            status = TaskStatus(raw.get("status", "pending"))
        except ValueError as exc:
            raise PlanFormatError(
                f"{self._path}: task '{record['id']}' has invalid status "
                f"{raw.get('status')!r}"
            ) from exc

        priority = raw.get("priority")
        if priority and priority not in set(TaskPriority):
            raise PlanFormatError(
                f"{self._path}: task '{record['id']}' has invalid priority {priority!r}"
            )

        return PlanEntry(
            record=record,
            depends_on=[str(d) for d in depends_on],
            status=status,
            actual_hours=raw.get("actual_hours", 0),
        )


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)
