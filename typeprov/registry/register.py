"""
Idempotent registration of resource types in the CloudFormation registry.
"""

import logging
from typing import Any, Optional

from botocore.exceptions import BotoCoreError, ClientError

from ..errors import RegistrationError
from .models import ABSENT_ERROR_CODES, REGISTRY_TYPE_RESOURCE

logger = logging.getLogger(__name__)


class RegistrationManager:
    """Ensures a resource type exists in the registry of the target account."""

    def __init__(self, registry_client: Any):
        """
        Args:
            registry_client: boto3 CloudFormation client scoped to the target account
        """
        self.registry = registry_client

    def register(self, type_name: str, package_location: str, execution_role_arn: str) -> Optional[str]:
        """
        Register a resource type unless it is already registered.

        Args:
            type_name: Fully qualified type name
            package_location: S3 URL of the schema handler package
            execution_role_arn: Role the type handlers run with

        Returns:
            Registration token of the new registration, or None if the type
            already existed

        Raises:
            RegistrationError: If the register call fails
        """
        logger.info(f"[{type_name}] start registering resource type")

        if self._exists(type_name):
            return None

        logger.info(f"[{type_name}] try register: {type_name}, {package_location}")
        try:
            response = self.registry.register_type(
                Type=REGISTRY_TYPE_RESOURCE,
                TypeName=type_name,
                SchemaHandlerPackage=package_location,
                ExecutionRoleArn=execution_role_arn,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"[{type_name}] register failed: {e}")
            raise RegistrationError(type_name, str(e)) from e

        token = (response or {}).get("RegistrationToken")
        logger.info(f"[{type_name}] registered successfully (registration token: {token})")
        return token

    def _exists(self, type_name: str) -> bool:
        """Describe the type; any describe failure counts as not registered."""
        try:
            response = self.registry.describe_type(Type=REGISTRY_TYPE_RESOURCE, TypeName=type_name)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in ABSENT_ERROR_CODES:
                logger.debug(f"[{type_name}] not registered yet ({code})")
            else:
                logger.warning(f"[{type_name}] describe failed, attempting registration anyway: {e}")
            return False
        except BotoCoreError as e:
            logger.warning(f"[{type_name}] describe failed, attempting registration anyway: {e}")
            return False

        if response and response.get("TypeName"):
            logger.info(f"[{type_name}] resource type already exists: {response['TypeName']}")
            return True
        return False
