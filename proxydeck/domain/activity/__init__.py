"""
Activity domain module
"""
from .models import TimelineEvent, LogEntry
from .service import ActivityService, filter_logs

__all__ = ["TimelineEvent", "LogEntry", "ActivityService", "filter_logs"]
