"""
Room registry

Owns rooms and their checklists. The visible task list of a room is always
computed from the current catalog plus whatever ad-hoc items the room carries,
so a catalog update takes effect on the next read.
"""
import logging
from typing import Dict, List, Optional, Tuple

from housekeeping.errors import NotFound, PreconditionFailed, ValidationFailed
from housekeeping.models.domain import ChecklistItem, Room, RoomStatus
from housekeeping.services.catalog import TaskCatalog, unique_slug

logger = logging.getLogger(__name__)

# slugify never emits "_", so ad-hoc ids cannot collide with catalog ids
ADHOC_PREFIX = "adhoc_"


class RoomRegistry:
    """Rooms keyed by id, kept in insertion order."""

    def __init__(self, catalog: TaskCatalog):
        self._catalog = catalog
        self._rooms: Dict[str, Room] = {}

    # ---------- rooms ----------

    def add_room(
        self,
        room_id: str,
        number: str,
        room_type: str,
        floor: int,
        status: RoomStatus = RoomStatus.CHECKOUT,
    ) -> Room:
        """Register a room with a fresh checklist for every applicable catalog task."""
        errors: Dict[str, str] = {}
        if not room_id or not room_id.strip():
            errors["id"] = "room id is required"
        if not number or not number.strip():
            errors["number"] = "room number is required"
        if not room_type or not room_type.strip():
            errors["room_type"] = "room type is required"
        if errors:
            raise ValidationFailed(errors)
        if room_id in self._rooms:
            raise PreconditionFailed(f"Room id {room_id} already exists")
        if self.find_by_number(number) is not None:
            raise PreconditionFailed(f"Room number {number} already exists")

        room = Room(
            id=room_id,
            number=number,
            room_type=room_type,
            floor=floor,
            status=status,
            checklist=self._fresh_checklist(room_type),
        )
        self._rooms[room_id] = room
        logger.info(f"Room {number} ({room_type}) registered as {status.value}")
        return room

    def put(self, room: Room) -> None:
        """Insert a fully built room (restore path)."""
        self._rooms[room.id] = room

    def clear(self) -> None:
        self._rooms.clear()

    def get(self, room_id: str) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            raise NotFound("Room", room_id)
        return room

    def find_by_number(self, number: str) -> Optional[Room]:
        for room in self._rooms.values():
            if room.number == number:
                return room
        return None

    def all(self) -> List[Room]:
        return list(self._rooms.values())

    def search(self, fragment: str = "", status: Optional[RoomStatus] = None) -> List[Room]:
        """Rooms whose number contains fragment (case-insensitive), optionally filtered by status."""
        needle = (fragment or "").strip().lower()
        return [
            room
            for room in self._rooms.values()
            if needle in room.number.lower() and (status is None or room.status == status)
        ]

    def status_counts(self) -> Dict[str, int]:
        counts = {status.value: 0 for status in RoomStatus}
        for room in self._rooms.values():
            counts[room.status.value] += 1
        return counts

    # ---------- checklist ----------

    def _fresh_checklist(self, room_type: str) -> List[ChecklistItem]:
        return [
            ChecklistItem(task_id=d.task_id, label=d.label, category=d.category)
            for d in self._catalog.definitions_for_room_type(room_type)
        ]

    def reset_checklist(self, room: Room) -> None:
        room.checklist = self._fresh_checklist(room.room_type)

    def applicable_categories(self, room: Room) -> List[str]:
        """Catalog categories first, then categories only known from the room's own items."""
        ordered = list(self._catalog.categories())
        for item in room.checklist:
            if item.category not in ordered:
                ordered.append(item.category)
        return [c for c in ordered if self._catalog.is_applicable(c, room.room_type)]

    def category_tasks(self, room: Room, category: str) -> List[ChecklistItem]:
        """Catalog definitions of the category in order, then ad-hoc items of the category."""
        tasks: List[ChecklistItem] = []
        seen = set()
        for definition in self._catalog.definitions(category):
            existing = room.find_item(definition.task_id)
            tasks.append(ChecklistItem(
                task_id=definition.task_id,
                label=definition.label,
                category=category,
                completed=existing.completed if existing else False,
            ))
            seen.add(definition.task_id)
        for item in room.checklist:
            owner = self._catalog.find(item.task_id)
            if owner is not None and owner.category != category:
                continue
            if item.category == category and item.task_id not in seen:
                tasks.append(ChecklistItem(item.task_id, item.label, item.category, item.completed))
                seen.add(item.task_id)
        return tasks

    def visible_tasks(self, room: Room) -> List[ChecklistItem]:
        visible: List[ChecklistItem] = []
        for category in self.applicable_categories(room):
            visible.extend(self.category_tasks(room, category))
        return visible

    def progress(self, room: Room) -> Tuple[int, int]:
        """(completed, total) over the visible tasks."""
        visible = self.visible_tasks(room)
        return sum(1 for t in visible if t.completed), len(visible)

    def is_fully_clean(self, room: Room) -> bool:
        """True iff there is at least one visible task and all of them are complete."""
        completed, total = self.progress(room)
        return total > 0 and completed == total

    def toggle_task(self, room: Room, task_id: str) -> ChecklistItem:
        """
        Flip completion of one task.

        Completing requires every earlier task of the same category to be
        complete. Un-completing is always allowed. A catalog task that the
        room's checklist does not carry yet is added as completed.

        Raises:
            NotFound: task unknown to both the catalog and the room
            PreconditionFailed: category not applicable, or earlier task open
        """
        definition = self._catalog.find(task_id)
        item = room.find_item(task_id)
        if definition is not None:
            category = definition.category
        elif item is not None:
            category = item.category
        else:
            raise NotFound("Task", task_id)

        if category not in self.applicable_categories(room):
            raise PreconditionFailed(f"Task {task_id} does not apply to a {room.room_type}")

        ordered = self.category_tasks(room, category)
        index = next(i for i, t in enumerate(ordered) if t.task_id == task_id)
        current = ordered[index]

        if not current.completed:
            blocking = [t.label for t in ordered[:index] if not t.completed]
            if blocking:
                raise PreconditionFailed(
                    f"Complete earlier {category} tasks first: {', '.join(blocking)}"
                )

        if item is None:
            item = ChecklistItem(task_id, definition.label, category, completed=True)
            room.checklist.append(item)
        else:
            item.completed = not item.completed
        return ChecklistItem(item.task_id, item.label, item.category, item.completed)

    def add_adhoc_task(self, room: Room, label: str, category: str) -> ChecklistItem:
        """Append a room-specific task to the end of a category."""
        label = (label or "").strip()
        category = (category or "").strip()
        errors: Dict[str, str] = {}
        if not label:
            errors["label"] = "task label is required"
        if not category:
            errors["category"] = "category is required"
        if errors:
            raise ValidationFailed(errors)

        taken = {
            item.task_id[len(ADHOC_PREFIX):] for item in room.checklist
            if item.task_id.startswith(ADHOC_PREFIX)
        }
        item = ChecklistItem(ADHOC_PREFIX + unique_slug(label, taken), label, category)
        room.checklist.append(item)
        return ChecklistItem(item.task_id, item.label, item.category, item.completed)
