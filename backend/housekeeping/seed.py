"""
Demo bootstrap data
Twenty rooms across five floors and three housekeepers, one of them inactive.
"""
import logging

from housekeeping.models.domain import AssignedBy, Cleaner, RoomStatus

logger = logging.getLogger(__name__)

DEMO_CLEANERS = [
    Cleaner("hk-1", "Maria Garcia", "12025550147", "maria@hotel.com", "123456789V",
            "123 Main Street, Colombo 05", True),
    Cleaner("hk-2", "Ahmed Hassan", "12025550120", "ahmed@hotel.com", "200145601234",
            "456 Park Avenue, Kandy", True),
    Cleaner("hk-3", "Sofia Rodriguez", "12025550170", "sofia@hotel.com", "987654321X",
            "789 Beach Road, Galle", False),
]

# (id, number, room_type, floor, status, assigned cleaner)
DEMO_ROOMS = [
    ("r-101", "101", "Deluxe King", 10, RoomStatus.CHECKOUT, None),
    ("r-102", "102", "Garden Suite", 10, RoomStatus.CHECKOUT, None),
    ("r-103", "103", "Standard Twin", 10, RoomStatus.CHECKOUT, None),
    ("r-104", "104", "Deluxe Queen", 10, RoomStatus.ASSIGNED, "hk-3"),
    ("r-105", "105", "Ocean View", 10, RoomStatus.CHECKOUT, None),
    ("r-201", "201", "Executive Suite", 20, RoomStatus.CHECKOUT, None),
    ("r-202", "202", "Family Room", 20, RoomStatus.CHECKOUT, None),
    ("r-203", "203", "Executive Twin", 20, RoomStatus.IN_CLEANING, "hk-1"),
    ("r-204", "204", "Deluxe King", 20, RoomStatus.AVAILABLE, None),
    ("r-215", "215", "Spa Suite", 21, RoomStatus.CHECKOUT, None),
    ("r-301", "301", "Presidential Suite", 30, RoomStatus.CHECKOUT, None),
    ("r-302", "302", "Premium King", 30, RoomStatus.ASSIGNED, "hk-2"),
    ("r-308", "308", "Panorama Suite", 30, RoomStatus.IN_CLEANING, "hk-2"),
    ("r-310", "310", "Deluxe Twin", 30, RoomStatus.CHECKOUT, None),
    ("r-401", "401", "Penthouse Suite", 40, RoomStatus.CHECKOUT, None),
    ("r-405", "405", "Business Suite", 40, RoomStatus.CHECKOUT, None),
    ("r-407", "407", "Premium King", 40, RoomStatus.AVAILABLE, None),
    ("r-408", "408", "Deluxe Queen", 40, RoomStatus.CHECKOUT, None),
    ("r-501", "501", "Luxury Suite", 50, RoomStatus.CHECKOUT, None),
    ("r-502", "502", "Executive King", 50, RoomStatus.ASSIGNED, "hk-1"),
]


def seed_demo_data(store) -> None:
    """Populate an empty store. Rooms in cleaning get a running session for their cleaner."""
    with store._lock:
        now = store.now()
        for cleaner in DEMO_CLEANERS:
            store.directory.put(Cleaner(**cleaner.to_dict()))

        for room_id, number, room_type, floor, status, cleaner_id in DEMO_ROOMS:
            room = store.registry.add_room(room_id, number, room_type, floor, status)
            room.assigned_cleaner_id = cleaner_id
            if cleaner_id:
                store.ledger.record_history(cleaner_id, number, AssignedBy.MANAGER, now)
            if status == RoomStatus.IN_CLEANING:
                room.session_start_time = now
                store.sessions.select(cleaner_id, room_id)
                store.sessions.start(cleaner_id, now)
            elif status == RoomStatus.AVAILABLE:
                for item in room.checklist:
                    item.completed = True

    logger.info(f"Seeded {len(DEMO_ROOMS)} rooms and {len(DEMO_CLEANERS)} housekeepers")
