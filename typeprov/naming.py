"""
Naming helpers for resource types and their handler packages.
"""

import re

_CASE_BOUNDARY = re.compile(r"([a-z])([A-Z])")


def to_storage_key(identifier: str) -> str:
    """
    Convert a mixed-case type identifier to its kebab-case storage key.

    A hyphen is inserted at every lowercase to uppercase transition, then the
    whole string is lowercased ("ClusterAutoscale" -> "cluster-autoscale").

    Args:
        identifier: Short type identifier, e.g. "DatabaseUser"

    Returns:
        Storage key
    """
    return _CASE_BOUNDARY.sub(r"\1-\2", identifier).lower()


def package_location(bucket_name: str, identifier: str) -> str:
    """Build the S3 location of the packaged schema handler for a type."""
    return f"s3://{bucket_name}/{to_storage_key(identifier)}.zip"


def type_name(prefix: str, identifier: str) -> str:
    """Build the fully qualified registry type name, e.g. MongoDB::Atlas::Cluster."""
    return f"{prefix.rstrip(':')}::{identifier}"
