"""REST API - Health endpoint and manual digest trigger."""

from prdigest.api.app import create_app

__all__ = ["create_app"]
