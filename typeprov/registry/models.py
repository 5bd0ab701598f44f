"""
Data models for resource type registration.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

REGISTRY_TYPE_RESOURCE = "RESOURCE"
DEPRECATED_STATUS_DEPRECATED = "DEPRECATED"

# Error codes the registry returns when a type is not (or no longer) registered
ABSENT_ERROR_CODES = frozenset({"TypeNotFoundException", "InvalidOperationException"})


@dataclass
class ResourceProps:
    """A configured resource type, derived per notification."""
    type_name: str          # "MongoDB::Atlas::Cluster"
    type_to_activate: str   # "Cluster"


@dataclass
class TypeVersion:
    """One registered version of a resource type."""
    arn: str
    version_id: Optional[str] = None
    is_default_version: bool = False

    @classmethod
    def from_summary(cls, summary: Dict[str, Any]) -> "TypeVersion":
        return cls(
            arn=summary.get("Arn", ""),
            version_id=summary.get("VersionId"),
            is_default_version=bool(summary.get("IsDefaultVersion", False)),
        )


@dataclass
class ReleaseOutcome:
    """What a release run did for a single type."""
    type_name: str
    already_absent: bool = False
    already_deprecated: bool = False
    deregistered_versions: List[str] = field(default_factory=list)
    failed_versions: List[str] = field(default_factory=list)
    skipped_default_version: Optional[str] = None
    type_deregistered: bool = False
    confirmed: bool = False
