"""Scheduler - Runs the digest job on a cron schedule."""

from prdigest.scheduler.exceptions import ScheduleError
from prdigest.scheduler.job import DigestJob
from prdigest.scheduler.models import RunReport, RunStatus
from prdigest.scheduler.scheduler import CronScheduler

__all__ = [
    "CronScheduler",
    "DigestJob",
    "RunReport",
    "RunStatus",
    "ScheduleError",
]
