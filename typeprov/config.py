"""
Process configuration for the provider handler.

Configuration is read from the environment once at process start and passed
explicitly to every component.
"""

import os
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional
from urllib.parse import urlsplit, urlunsplit

from .errors import MissingConfiguration

ACCOUNT_ID_PLACEHOLDER = "{ACCOUNT_ID}"
DEFAULT_TYPE_NAME_PREFIX = "MongoDB::Atlas"
DEFAULT_PROXY_HOST_SUFFIX = "admin.vwapps.cloud"
DEFAULT_REGION = "eu-west-1"
DEFAULT_CONFIRM_TIMEOUT = 30.0


@dataclass
class ProviderConfig:
    """Settings shared by the dispatcher, managers and confirmation client."""
    types_to_activate: List[str]
    bucket_name: str
    services_proxy: str
    execution_role_arn: Optional[str] = None
    execution_role_arn_template: Optional[str] = None
    proxy_host_suffix: str = DEFAULT_PROXY_HOST_SUFFIX
    type_name_prefix: str = DEFAULT_TYPE_NAME_PREFIX
    region: str = DEFAULT_REGION
    http_timeout: float = DEFAULT_CONFIRM_TIMEOUT
    assume_role: bool = False

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ProviderConfig":
        """
        Build configuration from environment variables.

        Args:
            environ: Mapping to read from, defaults to os.environ

        Returns:
            ProviderConfig

        Raises:
            MissingConfiguration: If a required variable is unset or empty
        """
        env = os.environ if environ is None else environ

        types = [t.strip() for t in env.get("TYPES_TO_ACTIVATE", "").split(",") if t.strip()]
        if not types:
            raise MissingConfiguration("TYPES_TO_ACTIVATE")

        bucket_name = _require(env, "BUCKET_NAME")
        services_proxy = _require(env, "SERVICES_PROXY")

        role_arn = env.get("EXECUTION_ROLE_ARN") or None
        role_template = env.get("EXECUTION_ROLE_ARN_TEMPLATE") or None
        if not role_arn and not role_template:
            raise MissingConfiguration("EXECUTION_ROLE_ARN_TEMPLATE")

        assume_role_raw = env.get("ASSUME_ROLE")
        if assume_role_raw is None or assume_role_raw == "":
            assume_role = role_template is not None
        else:
            assume_role = assume_role_raw.strip().lower() in ("1", "true", "yes", "on")
        if assume_role and not role_template:
            raise MissingConfiguration("EXECUTION_ROLE_ARN_TEMPLATE")

        timeout_raw = env.get("CONFIRM_TIMEOUT_SECONDS")
        try:
            http_timeout = float(timeout_raw) if timeout_raw else DEFAULT_CONFIRM_TIMEOUT
        except ValueError:
            raise ValueError(f"Invalid CONFIRM_TIMEOUT_SECONDS: {timeout_raw}")

        return cls(
            types_to_activate=types,
            bucket_name=bucket_name,
            services_proxy=services_proxy,
            execution_role_arn=role_arn,
            execution_role_arn_template=role_template,
            proxy_host_suffix=env.get("SERVICES_PROXY_SUFFIX") or DEFAULT_PROXY_HOST_SUFFIX,
            type_name_prefix=env.get("TYPE_NAME_PREFIX") or DEFAULT_TYPE_NAME_PREFIX,
            region=env.get("AWS_REGION") or env.get("AWS_DEFAULT_REGION") or DEFAULT_REGION,
            http_timeout=http_timeout,
            assume_role=assume_role,
        )

    def execution_role_for(self, account_id: str) -> str:
        """
        Resolve the execution role ARN used when registering types in an account.

        A fixed EXECUTION_ROLE_ARN wins over the template.

        Args:
            account_id: Target AWS account id

        Returns:
            Role ARN
        """
        if self.execution_role_arn:
            return self.execution_role_arn
        if not self.execution_role_arn_template:
            raise MissingConfiguration("EXECUTION_ROLE_ARN_TEMPLATE")
        return self.execution_role_arn_template.replace(ACCOUNT_ID_PLACEHOLDER, account_id, 1)

    def redacted(self) -> Dict[str, object]:
        """Return the configuration as a dict with proxy credentials masked."""
        return {
            "types_to_activate": list(self.types_to_activate),
            "bucket_name": self.bucket_name,
            "services_proxy": redact_url_credentials(self.services_proxy),
            "execution_role_arn": self.execution_role_arn,
            "execution_role_arn_template": self.execution_role_arn_template,
            "proxy_host_suffix": self.proxy_host_suffix,
            "type_name_prefix": self.type_name_prefix,
            "region": self.region,
            "http_timeout": self.http_timeout,
            "assume_role": self.assume_role,
        }


def _require(env: Mapping[str, str], key: str) -> str:
    value = env.get(key, "")
    if not value:
        raise MissingConfiguration(key)
    return value


def redact_url_credentials(url: str) -> str:
    """Replace the user:password part of a URL with ***."""
    parts = urlsplit(url)
    if not parts.username and not parts.password:
        return url
    host = parts.hostname or ""
    if parts.port:
        host = f"{host}:{parts.port}"
    return urlunsplit((parts.scheme, f"***@{host}", parts.path, parts.query, parts.fragment))


# Time kept back for logging and returning the batch response after the last call
DEADLINE_RESERVE = 0.5
MIN_CALL_TIMEOUT = 0.1


def bounded_timeout(configured: float, time_remaining: Optional[float]) -> float:
    """
    Cap a per-call timeout at the time left for the invocation.

    Args:
        configured: Configured timeout in seconds
        time_remaining: Seconds left before the caller's deadline, None if unbounded

    Returns:
        Timeout in seconds
    """
    if time_remaining is None:
        return configured
    return max(min(configured, time_remaining - DEADLINE_RESERVE), MIN_CALL_TIMEOUT)
