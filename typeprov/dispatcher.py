"""
Lifecycle dispatcher: routes a notification to the handler for its action,
once per configured resource type.
"""

import logging
from typing import Callable, Optional, Sequence

from .clients import ScopedClients
from .config import ProviderConfig, bounded_timeout
from .confirm import ConfirmationClient
from .naming import package_location, type_name
from .notifications import Action, Notification
from .registry import DeregistrationManager, RegistrationManager, ResourceProps

logger = logging.getLogger(__name__)

ClientFactory = Callable[..., ScopedClients]

# Actions that need clients in the consumer account
_REGISTRY_ACTIONS = (Action.CREATED, Action.RELEASE)


class LifecycleDispatcher:
    """Keeps the configured resource types in sync with the service lifecycle."""

    def __init__(
        self,
        config: ProviderConfig,
        client_factory: ClientFactory,
        confirmation_client: Optional[ConfirmationClient] = None
    ):
        """
        Args:
            config: Provider configuration
            client_factory: Returns clients scoped to an AWS account id
            confirmation_client: Client used to confirm releases
        """
        self.config = config
        self.client_factory = client_factory
        self.confirmation_client = confirmation_client or ConfirmationClient.from_config(config)

    def dispatch(
        self,
        notification: Notification,
        type_identifiers: Optional[Sequence[str]] = None,
        time_remaining: Optional[float] = None
    ) -> None:
        """
        Handle a notification for every configured resource type.

        Processing stops at the first handler error, which is propagated.
        Unrecognized actions are logged and end the dispatch without error.

        Args:
            notification: Parsed notification
            type_identifiers: Short type names, defaults to the configured types
            time_remaining: Seconds left before the caller's deadline; every
                registry call and the confirmation callback time out within it
        """
        identifiers = list(type_identifiers) if type_identifiers is not None else list(self.config.types_to_activate)
        action = notification.known_action

        if action is None:
            logger.warning(f"unknown action: {notification.action}")
            return

        logger.info(
            f"handling {action.value} for account {notification.aws_account_id} "
            f"(project {notification.project_id}, types: {', '.join(identifiers)})"
        )

        timeout = bounded_timeout(self.config.http_timeout, time_remaining)
        confirmation_client = self.confirmation_client.bounded(time_remaining)

        clients = None
        if action in _REGISTRY_ACTIONS and identifiers:
            clients = self.client_factory(notification.aws_account_id, timeout=timeout)

        for identifier in identifiers:
            props = ResourceProps(
                type_name=type_name(self.config.type_name_prefix, identifier),
                type_to_activate=identifier,
            )

            if action is Action.ENABLED:
                self.on_enabled(notification)
            elif action is Action.DISABLED:
                self.on_disabled(notification)
            elif action is Action.CREATED:
                self.on_created(clients, props, notification)
            elif action is Action.RELEASE:
                self.on_release(clients, props, notification, confirmation_client)
            elif action is Action.DELETED:
                self.on_deleted(notification)

    def on_enabled(self, notification: Notification) -> None:
        """Service enabled on a project, before it is created in any account."""
        logger.debug(f"service enabled on project {notification.project_id}")

    def on_disabled(self, notification: Notification) -> None:
        """Service disabled for a project."""
        logger.debug(f"service disabled on project {notification.project_id}")

    def on_created(self, clients: ScopedClients, props: ResourceProps, notification: Notification) -> None:
        """Service created in an account: register the resource type there."""
        manager = RegistrationManager(clients.registry)
        manager.register(
            props.type_name,
            package_location(self.config.bucket_name, props.type_to_activate),
            self.config.execution_role_for(notification.aws_account_id),
        )

    def on_release(
        self,
        clients: ScopedClients,
        props: ResourceProps,
        notification: Notification,
        confirmation_client: Optional[ConfirmationClient] = None
    ) -> None:
        """
        Service removal requested: deregister the type, then confirm the release
        so the platform can continue deprovisioning.
        """
        manager = DeregistrationManager(clients.registry, confirmation_client or self.confirmation_client)
        outcome = manager.release(props.type_name, notification.confirmation)
        logger.info(
            f"[{props.type_name}] released: {len(outcome.deregistered_versions)} versions removed, "
            f"{len(outcome.failed_versions)} failed, confirmed={outcome.confirmed}"
        )

    def on_deleted(self, notification: Notification) -> None:
        """
        Informational only, sent after the service was fully deprovisioned.

        Roles in the consumer account are already gone at this point.
        """
        logger.debug(f"service deleted from account {notification.aws_account_id}")
