"""Plan sources: load an event's tasks into an EventTaskHierarchy."""

from celebrationpro.sources.detect import SOURCE_NAMES, detect_source
from celebrationpro.sources.json_plan import DEFAULT_PLAN_FILE, JsonPlanSource
from celebrationpro.sources.markdown import MarkdownSource
from celebrationpro.sources.protocol import PlanEntry, PlanFormatError, PlanSource

__all__ = [
    "DEFAULT_PLAN_FILE",
    "JsonPlanSource",
    "MarkdownSource",
    "PlanEntry",
    "PlanFormatError",
    "PlanSource",
    "SOURCE_NAMES",
    "detect_source",
]
