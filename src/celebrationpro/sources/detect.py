"""Auto-detection logic for choosing the appropriate PlanSource."""

from pathlib import Path

from .json_plan import JsonPlanSource
from .markdown import MarkdownSource
from .protocol import PlanSource

# Auto-detection priority order. Each source's can_handle() is checked
# in sequence; the first match wins.
_AUTO_DETECT_ORDER: list[type[PlanSource]] = [
    JsonPlanSource,
    MarkdownSource,
]

# Map source_name -> class for explicit --from flag
_SOURCE_BY_NAME: dict[str, type[PlanSource]] = {
    cls.source_name: cls for cls in _AUTO_DETECT_ORDER
}

SOURCE_NAMES = ["auto", *_SOURCE_BY_NAME]


def detect_source(
    root: Path,
    source_type: str = "auto",
    plan_path: Path | None = None,
) -> PlanSource | None:
    """Detect and return the appropriate PlanSource.

    Args:
        root: Directory to search for a plan file.
        source_type: "auto" or an explicit source name (json, markdown).
        plan_path: Explicit path to a plan file. With "auto", the format
            is picked from the file suffix.

    Returns:
        A PlanSource instance, or None if no source could be determined.
    """
    if plan_path is not None:
        if source_type == "auto":
            source_type = "markdown" if plan_path.suffix.lower() == ".md" else "json"
        source_cls = _SOURCE_BY_NAME.get(source_type)
        if source_cls is None:
            return None
        return source_cls(plan_path)  # type: ignore[call-arg]

    if source_type != "auto":
        source_cls = _SOURCE_BY_NAME.get(source_type)
        if source_cls is not None and source_cls.can_handle(root):
            return source_cls.create(root)
        return None

    for source_cls in _AUTO_DETECT_ORDER:
        if source_cls.can_handle(root):
            return source_cls.create(root)

    return None
