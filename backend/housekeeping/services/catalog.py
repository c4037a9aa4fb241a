"""
Task catalog

Category -> ordered task definitions, optionally restricted to room types.
The manager-edited feed is normalized once at ingestion and merged after the
built-in defaults; the engine only ever sees CatalogEntry objects.
"""
import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

import yaml

from housekeeping.errors import ValidationFailed
from housekeeping.models.domain import TaskDefinition

logger = logging.getLogger(__name__)


DEFAULT_TASKS: List[TaskDefinition] = [
    # Washroom
    TaskDefinition("clean-mirror", "Clean Mirror", "washroom", "square"),
    TaskDefinition("scrub-toilet", "Scrub Toilet", "washroom", "bath"),
    TaskDefinition("clean-sink", "Clean Sink", "washroom", "droplets"),
    TaskDefinition("clean-shower", "Clean Shower/Bathtub", "washroom", "bath"),
    TaskDefinition("replace-towels", "Replace Towels", "washroom", "droplets"),
    TaskDefinition("sanitize", "Sanitize Surfaces", "washroom", "shield-check"),
    # Kitchen
    TaskDefinition("clean-fridge", "Clean Fridge", "kitchen", "sparkles"),
    TaskDefinition("clean-dishes", "Clean Dishes", "kitchen", "droplets"),
    TaskDefinition("wipe-counter", "Wipe Counter", "kitchen", "hand"),
    TaskDefinition("check-oven", "Check Oven", "kitchen", "plug-zap"),
    # Bedroom
    TaskDefinition("change-beds", "Change Bed Sheets", "bedroom", "bed-double"),
    TaskDefinition("vacuum-floor", "Vacuum Floor", "bedroom", "sparkles"),
    TaskDefinition("pick-trash", "Pick Up Trash", "bedroom", "trash"),
    TaskDefinition("restock-amenities", "Restock Amenities", "bedroom", "hand"),
    TaskDefinition("check-minibar", "Check Mini-Bar", "bedroom", "wine"),
    TaskDefinition("check-electricals", "Check Electricals", "bedroom", "plug-zap"),
    TaskDefinition("replace-water", "Replace Water Bottles", "bedroom", "droplet"),
    TaskDefinition("final-inspection", "Final Inspection", "bedroom", "clipboard-check"),
]

CATEGORY_ICONS = {
    "washroom": "bath",
    "bathroom": "bath",
    "bedroom": "bed-double",
    "kitchen": "sparkles",
}

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(label: str) -> str:
    """Lowercase, runs of non-alphanumerics become '-', leading/trailing '-' trimmed."""
    return _NON_ALNUM.sub("-", label.lower()).strip("-")


def unique_slug(label: str, taken: Set[str]) -> str:
    """Slug for label, suffixed -1, -2, ... until it is not in taken. Adds the result to taken."""
    base = slugify(label) or "task"
    candidate = base
    suffix = 1
    while candidate in taken:
        candidate = f"{base}-{suffix}"
        suffix += 1
    taken.add(candidate)
    return candidate


@dataclass(frozen=True)
class CatalogEntry:
    """One category: room-type restriction plus ordered tasks. Empty room_types means unrestricted."""
    room_types: Tuple[str, ...]
    tasks: Tuple[TaskDefinition, ...]

    def applies_to(self, room_type: str) -> bool:
        if not self.room_types:
            return True
        lowered = room_type.lower()
        return any(t.lower() in lowered for t in self.room_types)


def _string_list(value: Any, category: str, field_name: str, errors: Dict[str, str]) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        errors[category] = f"{field_name} must be a list of strings"
        return []
    return [v.strip() for v in value if v.strip()]


def normalize_feed(feed: Mapping[str, Any]) -> Dict[str, Dict[str, List[str]]]:
    """
    Normalize a manager feed to {category: {"tasks": [...], "roomTypes": [...]}}.

    Accepts the legacy shape where the value is a bare list of labels
    (treated as unrestricted).

    Raises:
        ValidationFailed: keyed by category for malformed entries
    """
    if not isinstance(feed, Mapping):
        raise ValidationFailed({"catalog": "catalog feed must be a mapping of category to tasks"})

    errors: Dict[str, str] = {}
    normalized: Dict[str, Dict[str, List[str]]] = {}
    for raw_category, value in feed.items():
        category = str(raw_category).strip()
        if not category:
            errors[str(raw_category)] = "category name is required"
            continue
        if isinstance(value, (list, tuple)):
            tasks = _string_list(value, category, "tasks", errors)
            room_types: List[str] = []
        elif isinstance(value, Mapping):
            tasks = _string_list(value.get("tasks"), category, "tasks", errors)
            room_types = _string_list(
                value.get("roomTypes", value.get("room_types")), category, "roomTypes", errors
            )
        else:
            errors[category] = "entry must be a list of labels or an object with tasks/roomTypes"
            continue
        normalized[category] = {"tasks": tasks, "roomTypes": room_types}

    if errors:
        raise ValidationFailed(errors, "Invalid task catalog feed")
    return normalized


def load_feed_file(path: str) -> Dict[str, Any]:
    """Read a catalog feed from a YAML or JSON file."""
    content = Path(path).read_text(encoding="utf-8")
    if path.endswith(".json"):
        data = json.loads(content)
    else:
        data = yaml.safe_load(content)
    return data or {}


class TaskCatalog:
    """
    Versioned read-only catalog: built-in defaults merged with the latest feed.

    Example:
        >>> catalog = TaskCatalog()
        >>> catalog.ingest({"balcony": {"tasks": ["Sweep"], "roomTypes": ["Suite"]}})
        1
        >>> catalog.is_applicable("balcony", "Garden Suite")
        True
    """

    def __init__(self, defaults: Iterable[TaskDefinition] = DEFAULT_TASKS):
        self._defaults: List[TaskDefinition] = list(defaults)
        self._feed: Dict[str, Dict[str, List[str]]] = {}
        self._entries: Dict[str, CatalogEntry] = {}
        self._by_id: Dict[str, TaskDefinition] = {}
        self.version = 0
        self._rebuild()

    def _rebuild(self) -> None:
        grouped: Dict[str, List[TaskDefinition]] = {}
        taken: Set[str] = set()
        for definition in self._defaults:
            grouped.setdefault(definition.category, []).append(definition)
            taken.add(definition.task_id)

        for category, data in self._feed.items():
            bucket = grouped.setdefault(category, [])
            icon = CATEGORY_ICONS.get(category, "clipboard-check")
            for label in data["tasks"]:
                bucket.append(TaskDefinition(unique_slug(label, taken), label, category, icon))

        self._entries = {
            category: CatalogEntry(
                room_types=tuple(self._feed.get(category, {}).get("roomTypes", [])),
                tasks=tuple(tasks),
            )
            for category, tasks in grouped.items()
        }
        self._by_id = {d.task_id: d for entry in self._entries.values() for d in entry.tasks}

    def ingest(self, feed: Mapping[str, Any]) -> int:
        """Replace the manager feed; returns the new catalog version."""
        self._feed = normalize_feed(feed)
        self._rebuild()
        self.version += 1
        logger.info(f"Task catalog v{self.version} ingested ({len(self._feed)} feed categories)")
        return self.version

    def restore(self, feed: Mapping[str, Any], version: int) -> None:
        self._feed = normalize_feed(feed)
        self._rebuild()
        self.version = version

    @property
    def feed(self) -> Dict[str, Dict[str, List[str]]]:
        return {c: {"tasks": list(d["tasks"]), "roomTypes": list(d["roomTypes"])} for c, d in self._feed.items()}

    def categories(self) -> List[str]:
        return list(self._entries.keys())

    def entry(self, category: str) -> Optional[CatalogEntry]:
        return self._entries.get(category)

    def definitions(self, category: str) -> List[TaskDefinition]:
        entry = self._entries.get(category)
        return list(entry.tasks) if entry else []

    def find(self, task_id: str) -> Optional[TaskDefinition]:
        return self._by_id.get(task_id)

    def room_types(self, category: str) -> List[str]:
        entry = self._entries.get(category)
        return list(entry.room_types) if entry else []

    def is_applicable(self, category: str, room_type: str) -> bool:
        """Categories unknown to the catalog are unrestricted."""
        entry = self._entries.get(category)
        return entry.applies_to(room_type) if entry else True

    def definitions_for_room_type(self, room_type: str) -> List[TaskDefinition]:
        return [
            d
            for category, entry in self._entries.items()
            if entry.applies_to(room_type)
            for d in entry.tasks
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "categories": {
                category: {
                    "roomTypes": list(entry.room_types),
                    "tasks": [
                        {"task_id": d.task_id, "label": d.label, "icon": d.icon}
                        for d in entry.tasks
                    ],
                }
                for category, entry in self._entries.items()
            },
        }
