"""Configuration loading for prdigest.

All settings come from environment-style key/value pairs, read once at
startup into a :class:`Config` that is passed to every component.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import tzinfo
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from croniter import croniter
from dotenv import load_dotenv

from prdigest.clock import local_timezone

DEFAULT_BITBUCKET_API_URL = "https://api.bitbucket.org/2.0"
DEFAULT_DINGTALK_WEBHOOK_URL = "https://oapi.dingtalk.com/robot/send"
DEFAULT_SCHEDULE = "0 10 * * 1-5"
DEFAULT_HOST = "0.0.0.0"  # noqa: S104
DEFAULT_PORT = 3000
DEFAULT_HTTP_TIMEOUT = 30.0

_TRUE_VALUES = {"1", "true", "yes", "on"}


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


@dataclass(frozen=True)
class BitbucketCredentials:
    """Either a bearer token or a username/app-password pair."""

    token: str | None = None
    username: str | None = None
    password: str | None = None

    @property
    def uses_token(self) -> bool:
        return bool(self.token)

    def headers(self) -> dict[str, str]:
        """Authorization headers for token auth (empty for basic auth)."""
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def basic_auth(self) -> tuple[str, str] | None:
        """Basic auth tuple for httpx, or None when a token is configured."""
        if self.token or not self.username or self.password is None:
            return None
        return (self.username, self.password)


@dataclass
class Config:
    """prdigest runtime configuration."""

    workspace: str
    credentials: BitbucketCredentials
    dingtalk_access_token: str
    repositories: list[str] = field(default_factory=list)
    bitbucket_api_url: str = DEFAULT_BITBUCKET_API_URL
    dingtalk_webhook_url: str = DEFAULT_DINGTALK_WEBHOOK_URL
    schedule: str = DEFAULT_SCHEDULE
    timezone: tzinfo = field(default_factory=local_timezone)
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    run_on_startup: bool = False
    log_level: str = "INFO"
    log_dir: str = "logs"

    @classmethod
    def from_env(cls, env: Mapping[str, str]) -> Config:
        """Create config from an environment mapping.

        Args:
            env: Key/value pairs, usually ``os.environ``.

        Returns:
            Parsed configuration object.

        Raises:
            ConfigError: If required keys are missing or a value is invalid.
        """

        def get(key: str) -> str | None:
            value = env.get(key)
            if value is None:
                return None
            value = value.strip()
            return value or None

        missing = []
        workspace = get("BITBUCKET_WORKSPACE")
        if not workspace:
            missing.append("BITBUCKET_WORKSPACE")

        token = get("BITBUCKET_ACCESS_TOKEN")
        username = get("BITBUCKET_USERNAME")
        password = get("BITBUCKET_APP_PASSWORD")
        if not token and not (username and password):
            missing.append("BITBUCKET_ACCESS_TOKEN (or BITBUCKET_USERNAME + BITBUCKET_APP_PASSWORD)")

        ding_token = get("DING_ROBOT_ACCESS_TOKEN")
        if not ding_token:
            missing.append("DING_ROBOT_ACCESS_TOKEN")

        if missing:
            raise ConfigError(f"Missing required settings: {', '.join(missing)}")

        schedule = get("CRON_SCHEDULER") or DEFAULT_SCHEDULE
        if not croniter.is_valid(schedule):
            raise ConfigError(f"CRON_SCHEDULER is not a valid cron expression: {schedule!r}")

        return cls(
            workspace=workspace or "",
            credentials=BitbucketCredentials(token=token, username=username, password=password),
            dingtalk_access_token=ding_token or "",
            repositories=parse_repositories(env.get("BITBUCKET_REPOSITORIES", "")),
            bitbucket_api_url=(get("BITBUCKET_API_URL") or DEFAULT_BITBUCKET_API_URL).rstrip("/"),
            dingtalk_webhook_url=get("DING_WEBHOOK_URL") or DEFAULT_DINGTALK_WEBHOOK_URL,
            schedule=schedule,
            timezone=_parse_timezone(get("CRON_TIMEZONE")),
            host=get("HOST") or DEFAULT_HOST,
            port=_parse_int(env, "PORT", DEFAULT_PORT),
            http_timeout=_parse_float(env, "HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
            run_on_startup=(get("RUN_ON_STARTUP") or "").lower() in _TRUE_VALUES,
            log_level=(get("PRDIGEST_LOG_LEVEL") or "INFO").upper(),
            log_dir=get("PRDIGEST_LOG_DIR") or "logs",
        )

    def redacted(self) -> dict[str, Any]:
        """Return settings for startup logging with secrets masked."""
        return {
            "workspace": self.workspace,
            "repositories": list(self.repositories),
            "auth": "token" if self.credentials.uses_token else "basic",
            "bitbucket_api_url": self.bitbucket_api_url,
            "dingtalk_webhook_url": self.dingtalk_webhook_url,
            "dingtalk_access_token": "***",
            "schedule": self.schedule,
            "timezone": str(self.timezone),
            "host": self.host,
            "port": self.port,
            "http_timeout": self.http_timeout,
            "run_on_startup": self.run_on_startup,
        }


def parse_repositories(raw: str | None) -> list[str]:
    """Split a comma separated repository list, dropping blanks."""
    if not raw:
        return []
    return [name.strip() for name in raw.split(",") if name.strip()]


def _parse_timezone(name: str | None) -> tzinfo:
    """Resolve an IANA zone name, defaulting to the server's local zone."""
    if not name:
        return local_timezone()
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigError(f"CRON_TIMEZONE is not a known timezone: {name!r}") from e


def _parse_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from e


def _parse_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from e


def load_config(env_file: str | Path | None = None) -> Config:
    """Load ``.env`` (or ``env_file``) into the environment and parse it.

    Values already present in the process environment win over the file.

    Raises:
        ConfigError: If the env file was given but does not exist, or the
            resulting settings are invalid.
    """
    if env_file is not None:
        path = Path(env_file)
        if not path.exists():
            raise ConfigError(f"Env file not found: {path}")
        load_dotenv(path)
    else:
        load_dotenv()
    return Config.from_env(os.environ)
