"""
Release confirmation callback to the service platform.
"""

import logging
from typing import Dict, Optional
from urllib.parse import urlsplit

import requests

from .config import DEFAULT_CONFIRM_TIMEOUT, DEFAULT_PROXY_HOST_SUFFIX, ProviderConfig, bounded_timeout
from .errors import ConfirmationError
from .notifications import Confirmation

logger = logging.getLogger(__name__)

ACCEPTED = 202


class ConfirmationClient:
    """Sends the release confirmation, routing admin hosts through the services proxy."""

    def __init__(
        self,
        proxy_url: Optional[str],
        proxy_host_suffix: str = DEFAULT_PROXY_HOST_SUFFIX,
        timeout: float = DEFAULT_CONFIRM_TIMEOUT,
        session: Optional[requests.Session] = None
    ):
        self.proxy_url = proxy_url
        self.proxy_host_suffix = proxy_host_suffix
        self.timeout = timeout
        if session is None:
            session = requests.Session()
            # Routing is decided per host below, never by HTTP(S)_PROXY variables
            session.trust_env = False
        self.session = session

    @classmethod
    def from_config(cls, config: ProviderConfig, session: Optional[requests.Session] = None) -> "ConfirmationClient":
        return cls(
            proxy_url=config.services_proxy,
            proxy_host_suffix=config.proxy_host_suffix,
            timeout=config.http_timeout,
            session=session,
        )

    def bounded(self, time_remaining: Optional[float]) -> "ConfirmationClient":
        """Copy of this client whose timeout fits into the time left for the invocation."""
        return ConfirmationClient(
            proxy_url=self.proxy_url,
            proxy_host_suffix=self.proxy_host_suffix,
            timeout=bounded_timeout(self.timeout, time_remaining),
            session=self.session,
        )

    def proxies_for(self, url: str) -> Optional[Dict[str, str]]:
        """
        Select the proxy for a request target.

        Args:
            url: Request URL

        Returns:
            requests proxies mapping, or None to connect directly
        """
        host = urlsplit(url).hostname or ""
        if self.proxy_url and host.endswith(self.proxy_host_suffix):
            return {"http": self.proxy_url, "https": self.proxy_url}
        return None

    def confirm(self, confirmation: Optional[Confirmation]) -> None:
        """
        Confirm a release so the platform can continue deprovisioning.

        Exactly one attempt is made.

        Args:
            confirmation: Callback contract from the release notification

        Raises:
            ConfirmationError: If the request fails or the response is not 202 Accepted
        """
        if confirmation is None or not confirmation.url:
            raise ConfirmationError("notification carries no confirmation url")

        logger.info("confirming release")
        method = (confirmation.method or "GET").upper()
        proxies = self.proxies_for(confirmation.url)

        try:
            response = self.session.request(
                method,
                confirmation.url,
                headers=dict(confirmation.header),
                proxies=proxies,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(
                f"error confirming release at platform. Deadline for automatic confirm is set to: "
                f"{confirmation.deadline}"
            )
            raise ConfirmationError(
                f"{e} (automatic confirmation deadline: {confirmation.deadline})",
                deadline=confirmation.deadline,
            ) from e

        if response.status_code != ACCEPTED:
            body = response.text
            raise ConfirmationError(
                f"expected accepted status, got: {response.status_code}, body: {body}",
                status_code=response.status_code,
                body=body,
                deadline=confirmation.deadline,
            )

        logger.info(f"release confirmed ({response.status_code})")
