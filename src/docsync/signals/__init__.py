"""Source inspection package."""

from .discovery import DiscoveryResult, discover_paths, should_exclude
from .evidence import (
    SOURCE_DIRECT,
    SOURCE_INDEX,
    PackageManifest,
    SourceSignals,
    TopicEvidence,
    collect_signals,
    detect_evidence,
    detect_package_manager,
    detect_stack,
    load_manifest,
)

__all__ = [
    "DiscoveryResult",
    "PackageManifest",
    "SOURCE_DIRECT",
    "SOURCE_INDEX",
    "SourceSignals",
    "TopicEvidence",
    "collect_signals",
    "detect_evidence",
    "detect_package_manager",
    "detect_stack",
    "discover_paths",
    "load_manifest",
    "should_exclude",
]
