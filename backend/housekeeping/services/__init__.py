# Workflow Services
from housekeeping.services.catalog import TaskCatalog
from housekeeping.services.registry import RoomRegistry
from housekeeping.services.directory import CleanerDirectory
from housekeeping.services.ledger import HistoryLedger
from housekeeping.services.messages import MessageChannel
from housekeeping.services.sessions import SessionTracker
from housekeeping.services.assignment import AssignmentEngine
from housekeeping.services.store import HousekeepingStore

__all__ = [
    'TaskCatalog', 'RoomRegistry', 'CleanerDirectory', 'HistoryLedger',
    'MessageChannel', 'SessionTracker', 'AssignmentEngine', 'HousekeepingStore'
]
