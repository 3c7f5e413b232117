"""
Task Grouping Engine

Partitions a worker's tasks by batch and, for unbatched views, by the
headphone model parsed out of the product title.
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from ..entities.task import Task
from ..value_objects.enums import PriorityLevel, TaskStatus

INDIVIDUAL_GROUP = "individual"
ALL_MODELS = "all"

_BRAND_MODEL_PATTERN = re.compile(r"ZMF\s+(\w+)", re.IGNORECASE)


def extract_model_name(product_name: str | None) -> str:
    """
    Infer the model name from a free-text product title.

    "ZMF Caldera Closed" gives "Caldera". Titles without the brand prefix
    fall back to their first word, which may not be a real catalog model.
    """
    if not product_name or not product_name.strip():
        return ""

    match = _BRAND_MODEL_PATTERN.search(product_name)
    if match:
        return match.group(1)
    return product_name.split()[0]


@dataclass
class ModelGroup:
    """Tasks sharing an inferred model name."""

    model_name: str
    tasks: list[Task] = field(default_factory=list)
    in_progress_count: int = 0
    has_urgent: bool = False

    @property
    def count(self) -> int:
        return len(self.tasks)

    def add(self, task: Task) -> None:
        self.tasks.append(task)
        if task.status == TaskStatus.IN_PROGRESS:
            self.in_progress_count += 1
        if task.priority == PriorityLevel.URGENT:
            self.has_urgent = True


def group_tasks(tasks: Iterable[Task]) -> dict[str, list[Task]]:
    """Group tasks by batch id, keeping input order; unbatched tasks go to "individual"."""
    groups: dict[str, list[Task]] = {}
    for task in tasks:
        key = str(task.batch_id) if task.batch_id else INDIVIDUAL_GROUP
        groups.setdefault(key, []).append(task)
    return groups


def group_by_model(tasks: Iterable[Task]) -> dict[str, ModelGroup]:
    """Group tasks by inferred model name with per-group counts."""
    groups: dict[str, ModelGroup] = {}
    for task in tasks:
        model_name = extract_model_name(task.product_name)
        if model_name not in groups:
            groups[model_name] = ModelGroup(model_name=model_name)
        groups[model_name].add(task)
    return groups


def model_names(product_names: Iterable[str]) -> list[str]:
    """Sorted distinct model names, for filter option lists."""
    return sorted(
        {name for name in (extract_model_name(p) for p in product_names) if name}
    )


def filter_by_model(tasks: Iterable[Task], model: str) -> list[Task]:
    """Keep tasks whose inferred model matches ``model`` (case-insensitive)."""
    if model.lower() == ALL_MODELS:
        return list(tasks)
    wanted = model.lower()
    return [t for t in tasks if extract_model_name(t.product_name).lower() == wanted]
