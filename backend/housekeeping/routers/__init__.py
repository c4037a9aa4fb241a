# API Routers
from housekeeping.routers import rooms, assignments, sessions, cleaners, messages, history, catalog

__all__ = ['rooms', 'assignments', 'sessions', 'cleaners', 'messages', 'history', 'catalog']
