"""Wiring of the digest components from a Config."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from prdigest.aggregator import PullRequestAggregator
from prdigest.bitbucket import BitbucketClient
from prdigest.notifier import DingTalkNotifier
from prdigest.scheduler import CronScheduler, DigestJob

if TYPE_CHECKING:
    from prdigest.config import Config

logger = logging.getLogger(__name__)


@dataclass
class Service:
    """The components of one prdigest process."""

    client: BitbucketClient
    aggregator: PullRequestAggregator
    notifier: DingTalkNotifier
    job: DigestJob
    scheduler: CronScheduler

    def close(self) -> None:
        """Stop the scheduler and close HTTP clients."""
        self.scheduler.stop()
        self.client.close()
        self.notifier.close()


def build_service(config: Config) -> Service:
    """Build every component from configuration.

    Raises:
        ScheduleError: If the configured schedule is invalid.
    """
    client = BitbucketClient(
        workspace=config.workspace,
        credentials=config.credentials,
        base_url=config.bitbucket_api_url,
        timeout=config.http_timeout,
    )
    aggregator = PullRequestAggregator(client)
    notifier = DingTalkNotifier(
        access_token=config.dingtalk_access_token,
        base_url=config.dingtalk_webhook_url,
        timeout=config.http_timeout,
    )
    job = DigestJob(aggregator, notifier, config.repositories)
    scheduler = CronScheduler(config.schedule, job, timezone=config.timezone)

    if not config.repositories:
        logger.warning("BITBUCKET_REPOSITORIES is empty; every digest will be empty")

    return Service(
        client=client,
        aggregator=aggregator,
        notifier=notifier,
        job=job,
        scheduler=scheduler,
    )
