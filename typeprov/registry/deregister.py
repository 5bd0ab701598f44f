"""
Full deregistration of resource types, followed by the release confirmation.

The registry refuses to deregister a type while non-default versions are
still registered, so those are removed first. The default version goes away
together with the type.
"""

import logging
from typing import Any, List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from ..confirm import ConfirmationClient
from ..errors import ConfirmationError, DeregistrationError
from ..notifications import Confirmation
from .models import (
    ABSENT_ERROR_CODES,
    DEPRECATED_STATUS_DEPRECATED,
    REGISTRY_TYPE_RESOURCE,
    ReleaseOutcome,
    TypeVersion,
)

logger = logging.getLogger(__name__)


class DeregistrationManager:
    """Removes a resource type and all its versions, then confirms the release."""

    def __init__(self, registry_client: Any, confirmation_client: ConfirmationClient):
        self.registry = registry_client
        self.confirmation_client = confirmation_client

    def release(self, type_name: str, confirmation: Optional[Confirmation]) -> ReleaseOutcome:
        """
        Deregister a type and confirm the release.

        Args:
            type_name: Fully qualified type name
            confirmation: Callback contract from the release notification

        Returns:
            ReleaseOutcome describing what was done

        Raises:
            DeregistrationError: If describing or deregistering the type fails
            ConfirmationError: If the confirmation callback fails
        """
        logger.info(f"[{type_name}] start releasing resource type")
        outcome = ReleaseOutcome(type_name=type_name)

        description = self._describe(type_name)
        if description is None:
            outcome.already_absent = True
        elif description.get("DeprecatedStatus") == DEPRECATED_STATUS_DEPRECATED:
            logger.info(f"[{type_name}] type is already deprecated and fully deregistered")
            outcome.already_deprecated = True

        deregister_failure: Optional[Exception] = None
        if not outcome.already_absent and not outcome.already_deprecated:
            self._deregister_versions(type_name, outcome)
            try:
                self.registry.deregister_type(Type=REGISTRY_TYPE_RESOURCE, TypeName=type_name)
                outcome.type_deregistered = True
                logger.info(f"[{type_name}] deregistered successfully")
            except (ClientError, BotoCoreError) as e:
                logger.error(f"[{type_name}] failed to deregister type: {e}")
                deregister_failure = e

        try:
            self.confirmation_client.confirm(confirmation)
            outcome.confirmed = True
        except ConfirmationError as e:
            if deregister_failure is None:
                raise
            logger.error(f"[{type_name}] confirmation failed after deregistration failure: {e}")

        if deregister_failure is not None:
            raise DeregistrationError(type_name, str(deregister_failure)) from deregister_failure
        return outcome

    def _describe(self, type_name: str) -> Optional[dict]:
        """Describe the type, returning None when the registry reports it absent."""
        try:
            return self.registry.describe_type(Type=REGISTRY_TYPE_RESOURCE, TypeName=type_name)
        except ClientError as e:
            error = e.response.get("Error", {})
            if error.get("Code", "") in ABSENT_ERROR_CODES:
                logger.info(
                    f"[{type_name}] type is already deregistered or does not exist: {error.get('Message', '')}"
                )
                return None
            logger.error(f"[{type_name}] failed to describe type: {e}")
            raise DeregistrationError(type_name, f"describe failed: {e}") from e
        except BotoCoreError as e:
            logger.error(f"[{type_name}] failed to describe type: {e}")
            raise DeregistrationError(type_name, f"describe failed: {e}") from e

    def _list_versions(self, type_name: str) -> List[TypeVersion]:
        versions: List[TypeVersion] = []
        kwargs = {"Type": REGISTRY_TYPE_RESOURCE, "TypeName": type_name}
        while True:
            response = self.registry.list_type_versions(**kwargs)
            versions.extend(TypeVersion.from_summary(s) for s in response.get("TypeVersionSummaries", []))
            next_token = response.get("NextToken")
            if not next_token:
                return versions
            kwargs["NextToken"] = next_token

    def _deregister_versions(self, type_name: str, outcome: ReleaseOutcome) -> None:
        """Deregister every non-default version. Failures are logged, not raised."""
        try:
            versions = self._list_versions(type_name)
        except (ClientError, BotoCoreError) as e:
            # Type-level deregistration reports leftovers loudly
            logger.error(f"[{type_name}] failed to list type versions: {e}")
            return

        for version in versions:
            if version.is_default_version:
                logger.info(f"[{type_name}] skipping deregistration of default version: {version.arn}")
                outcome.skipped_default_version = version.arn
                continue

            try:
                self.registry.deregister_type(Arn=version.arn)
                outcome.deregistered_versions.append(version.arn)
                logger.info(f"[{type_name}] deregistered version {version.arn}")
            except (ClientError, BotoCoreError) as e:
                outcome.failed_versions.append(version.arn)
                logger.warning(f"[{type_name}] failed to deregister version {version.arn}: {e}")
