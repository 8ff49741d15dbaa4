"""
Domain events exchanged between the services
"""

from .schedule_event import ScheduleEvent

__all__ = ["ScheduleEvent"]
