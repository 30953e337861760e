"""Custom exceptions for the Scheduler."""


class ScheduleError(Exception):
    """Cron expression is invalid."""
