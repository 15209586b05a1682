"""npm CLI client package."""

from .client import PUBLISH_FLAGS, NpmClient, publish_failure
from .tee import OutputTee
from .types import TEN_MEGABYTES, NpmClientConfig

__all__ = [
    "NpmClient",
    "NpmClientConfig",
    "OutputTee",
    "PUBLISH_FLAGS",
    "TEN_MEGABYTES",
    "publish_failure",
]
