"""
Resource type registration and deregistration against the CloudFormation registry.
"""

from .deregister import DeregistrationManager
from .models import ReleaseOutcome, ResourceProps, TypeVersion
from .register import RegistrationManager

__all__ = [
    "DeregistrationManager",
    "RegistrationManager",
    "ReleaseOutcome",
    "ResourceProps",
    "TypeVersion",
]
