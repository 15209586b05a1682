"""Republish an already published npm package under a new version."""

from .config import RepublishSettings, load_settings
from .errors import (
    CommandTimeoutError,
    NpmCommandError,
    NpmNotFoundError,
    OutputLimitExceededError,
    PackCommandError,
    PublishCommandError,
    RegistryLookupError,
    RepublishError,
    ShowCommandError,
    UnsafeArchiveError,
)
from .lookup import HttpRegistryLookup, NpmShowLookup, RegistryLookup
from .markers import SequenceMarkerGenerator, UniqueMarkerGenerator
from .matchers import DEFAULT_MATCHERS, pattern_matcher, phrase_matcher
from .npm import NpmClient, NpmClientConfig
from .republish import republish_package
from .types import MARKER_FIELD, RegistryConfig, RepublishRequest, RepublishResult

__all__ = [
    "republish_package",
    "RegistryConfig",
    "RepublishRequest",
    "RepublishResult",
    "RepublishSettings",
    "load_settings",
    "MARKER_FIELD",
    "NpmClient",
    "NpmClientConfig",
    "RegistryLookup",
    "NpmShowLookup",
    "HttpRegistryLookup",
    "UniqueMarkerGenerator",
    "SequenceMarkerGenerator",
    "DEFAULT_MATCHERS",
    "phrase_matcher",
    "pattern_matcher",
    "RepublishError",
    "NpmCommandError",
    "NpmNotFoundError",
    "PackCommandError",
    "PublishCommandError",
    "ShowCommandError",
    "CommandTimeoutError",
    "OutputLimitExceededError",
    "RegistryLookupError",
    "UnsafeArchiveError",
]
