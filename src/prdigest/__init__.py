"""prdigest - Scheduled digest of open Bitbucket pull requests for DingTalk."""

__version__ = "0.1.0"
