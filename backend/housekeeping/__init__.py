"""
housekeeping - room-cleaning workflow service

Tracks rooms from guest checkout through assignment, active cleaning and
completion, coordinating one manager view with many housekeeper views.
"""
__version__ = "1.0.0"
