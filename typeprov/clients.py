"""
AWS client factories scoped to a consumer account.

The dispatcher asks a factory for fresh clients on every notification; clients
are never reused across invocations.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

import boto3
from botocore.config import Config

from .config import ACCOUNT_ID_PLACEHOLDER, DEFAULT_REGION, ProviderConfig

logger = logging.getLogger(__name__)

ROLE_SESSION_PREFIX = "typeprov"


def client_config(timeout: float) -> Config:
    """Bounded timeouts and a single attempt per call."""
    return Config(
        connect_timeout=timeout,
        read_timeout=timeout,
        retries={"mode": "standard", "total_max_attempts": 1},
    )


@dataclass
class ScopedClients:
    """Clients operating in one target account."""
    registry: Any   # cloudformation
    compute: Any    # ec2


class DefaultClientFactory:
    """Clients built from the ambient credentials of the process."""

    def __init__(self, region: str = DEFAULT_REGION, timeout: float = 30.0, session: Optional[boto3.Session] = None):
        self.region = region
        self.timeout = timeout
        self.session = session

    def __call__(self, account_id: str, timeout: Optional[float] = None) -> ScopedClients:
        session = self.session or boto3.Session(region_name=self.region)
        config = client_config(timeout or self.timeout)
        logger.debug(f"using ambient credentials for account {account_id}")
        return ScopedClients(
            registry=session.client("cloudformation", region_name=self.region, config=config),
            compute=session.client("ec2", region_name=self.region, config=config),
        )


class AssumeRoleClientFactory:
    """Clients built from credentials of a role assumed in the target account."""

    def __init__(
        self,
        role_arn_template: str,
        region: str = DEFAULT_REGION,
        timeout: float = 30.0,
        session: Optional[boto3.Session] = None
    ):
        self.role_arn_template = role_arn_template
        self.region = region
        self.timeout = timeout
        self.session = session

    def role_arn_for(self, account_id: str) -> str:
        return self.role_arn_template.replace(ACCOUNT_ID_PLACEHOLDER, account_id, 1)

    def __call__(self, account_id: str, timeout: Optional[float] = None) -> ScopedClients:
        """
        Assume the service role in the target account.

        Args:
            account_id: Target AWS account id
            timeout: Per-call timeout in seconds, defaults to the factory timeout

        Returns:
            ScopedClients using the temporary credentials
        """
        base = self.session or boto3.Session(region_name=self.region)
        config = client_config(timeout or self.timeout)
        role_arn = self.role_arn_for(account_id)

        logger.info(f"assuming role {role_arn}")
        sts = base.client("sts", region_name=self.region, config=config)
        response = sts.assume_role(
            RoleArn=role_arn,
            RoleSessionName=f"{ROLE_SESSION_PREFIX}-{account_id}"[:64],
        )
        credentials = response["Credentials"]

        scoped = boto3.Session(
            aws_access_key_id=credentials["AccessKeyId"],
            aws_secret_access_key=credentials["SecretAccessKey"],
            aws_session_token=credentials["SessionToken"],
            region_name=self.region,
        )
        return ScopedClients(
            registry=scoped.client("cloudformation", config=config),
            compute=scoped.client("ec2", config=config),
        )


def client_factory_from_config(config: ProviderConfig):
    """Pick the credential strategy configured for this deployment."""
    if config.assume_role:
        return AssumeRoleClientFactory(
            config.execution_role_arn_template,
            region=config.region,
            timeout=config.http_timeout,
        )
    return DefaultClientFactory(region=config.region, timeout=config.http_timeout)
