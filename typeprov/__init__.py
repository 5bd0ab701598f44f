"""
Typeprov - lifecycle handler for CloudFormation resource types offered as a service.

Reacts to service provider notifications (enabled, created, release, deleted,
disabled) and keeps the registration of the configured resource types in the
consumer account in sync, confirming releases back to the platform.
"""

__version__ = "0.1.0"
__author__ = "Typeprov maintainers"
