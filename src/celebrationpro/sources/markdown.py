"""MarkdownSource: parse an event plan from a markdown checklist."""

import hashlib
import re
from pathlib import Path

from celebrationpro.hierarchy.models import EVENT_ID_KEY, TaskStatus

from .protocol import PlanEntry, PlanSource

# Matches lines like: "- [ ] Task", "- [x] [T001] Task (after: T000, T002)"
_TASK_PATTERN = re.compile(
    r"^(\s*)-\s+\[([ xX~!])\]\s+(?:\[([^\]]+)\]\s+)?(.+?)"
    r"(?:\s+\(after:\s*([^)]*)\))?\s*$"
)
_HEADING_PATTERN = re.compile(r"^(#{1,2})\s+(.+?)\s*$")

_MARKDOWN_CANDIDATES = ["tasks.md", "TODO.md"]

_STATUS_BY_MARK = {
    " ": TaskStatus.pending,
    "x": TaskStatus.completed,
    "X": TaskStatus.completed,
    "~": TaskStatus.in_progress,
    "!": TaskStatus.blocked,
}
_MARK_BY_STATUS = {
    TaskStatus.pending: " ",
    TaskStatus.completed: "x",
    TaskStatus.in_progress: "~",
    TaskStatus.blocked: "!",
}


class MarkdownSource(PlanSource):
    """Parse tasks from a markdown checklist file.

    Supports:
    - ``- [ ] Task name`` items; ``[x]`` completed, ``[~]`` in progress,
      ``[!]`` blocked
    - Optional explicit IDs: ``- [ ] [T001] Task name``
    - Dependencies: ``- [ ] Task name (after: T001, T002)``
    - Nested items become subtasks of the enclosing item
    - ``# Heading`` sets the event id, ``## Heading`` the module id
    - Status update rewrites the checkbox in the file
    """

    source_name = "markdown"

    @classmethod
    def can_handle(cls, root: Path) -> bool:
        return any((root / name).exists() for name in _MARKDOWN_CANDIDATES)

    @classmethod
    def create(cls, root: Path) -> "MarkdownSource":
        for name in _MARKDOWN_CANDIDATES:
            path = root / name
            if path.exists():
                return cls(path)
        raise FileNotFoundError("No markdown task file found")

    def __init__(self, path: Path, assigned_to: str = "") -> None:
        self._path = path
        self._assigned_to = assigned_to

    @property
    def path(self) -> Path:
        return self._path

    def get_entries(self) -> list[PlanEntry]:
        """Parse all checklist items from the markdown file."""
        return self._parse(self._path.read_text(encoding="utf-8"))

    def update_status(self, task_id: str, status: TaskStatus) -> bool:
        """Rewrite the checkbox of the matching item."""
        lines = self._path.read_text(encoding="utf-8").splitlines()
        new_lines: list[str] = []
        changed = False

        for line in lines:
            match = _TASK_PATTERN.match(line)
            if match:
                indent, _mark, explicit_id, text, after = match.groups()
                if (explicit_id or self._make_id(text)) == task_id:
                    id_part = f"[{explicit_id}] " if explicit_id else ""
                    after_part = f" (after: {after})" if after is not None else ""
                    line = (
                        f"{indent}- [{_MARK_BY_STATUS[status]}] "
                        f"{id_part}{text}{after_part}"
                    )
                    changed = True
            new_lines.append(line)

        if changed:
            self._path.write_text("\n".join(new_lines) + "\n", encoding="utf-8")
        return changed

    def _parse(self, content: str) -> list[PlanEntry]:
        entries: list[PlanEntry] = []
        event_id: str | None = None
        module_id = ""
        # Stack of (indent_level, task_id) to track nesting
        parent_stack: list[tuple[int, str]] = []

        for line in content.splitlines():
            heading = _HEADING_PATTERN.match(line)
            if heading:
                level, title = heading.groups()
                if len(level) == 1:
                    event_id = self._slugify(title)
                else:
                    module_id = self._slugify(title)
                parent_stack.clear()
                continue

            match = _TASK_PATTERN.match(line)
            if not match:
                continue

            indent, mark, explicit_id, text, after = match.groups()
            indent_level = len(indent)
            task_id = explicit_id or self._make_id(text)

            # Pop parents that are at the same or deeper indent level
            while parent_stack and parent_stack[-1][0] >= indent_level:
                parent_stack.pop()
            parent_id = parent_stack[-1][1] if parent_stack else None

            metadata = {EVENT_ID_KEY: event_id} if event_id else {}
            entries.append(
                PlanEntry(
                    record={
                        "id": task_id,
                        "name": text.strip(),
                        "module_id": module_id,
                        "assigned_to": self._assigned_to,
                        "parent_task_id": parent_id,
                        "metadata": metadata,
                    },
                    depends_on=self._split_after(after),
                    status=_STATUS_BY_MARK[mark],
                )
            )

            parent_stack.append((indent_level, task_id))

        return entries

    @staticmethod
    def _split_after(after: str | None) -> list[str]:
        if not after:
            return []
        return [part.strip() for part in after.split(",") if part.strip()]

    @staticmethod
    def _slugify(title: str) -> str:
        return re.sub(r"[^a-z0-9]+", "_", title.lower()).strip("_")

    @staticmethod
    def _make_id(text: str) -> str:
        """Generate a stable ID from task text."""
        digest = hashlib.sha256(text.strip().encode()).hexdigest()[:8]
        return f"md-{digest}"
