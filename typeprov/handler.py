"""
AWS Lambda entrypoint for the SQS queue carrying service provider notifications.
"""

import logging
import os
from typing import Any, Dict, List, Optional

from .clients import client_factory_from_config
from .config import ProviderConfig
from .dispatcher import LifecycleDispatcher
from .notifications import parse_notification

logger = logging.getLogger(__name__)


def _log_level(name: str) -> int:
    """Numeric level for a level name, INFO if the name is unknown."""
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


logging.getLogger("typeprov").setLevel(_log_level(os.environ.get("LOG_LEVEL", "INFO")))

_dispatcher: Optional[LifecycleDispatcher] = None


def get_dispatcher() -> LifecycleDispatcher:
    """Build the dispatcher on first use; configuration is read once per process."""
    global _dispatcher
    if _dispatcher is None:
        config = ProviderConfig.from_env()
        logger.info(f"types to activate: {', '.join(config.types_to_activate)}")
        _dispatcher = LifecycleDispatcher(config, client_factory_from_config(config))
    return _dispatcher


def time_remaining(context: Any) -> Optional[float]:
    """Seconds left in the Lambda invocation, None outside Lambda."""
    get_remaining = getattr(context, "get_remaining_time_in_millis", None)
    if get_remaining is None:
        return None
    return get_remaining() / 1000.0


def process_record(
    dispatcher: LifecycleDispatcher,
    record: Dict[str, Any],
    remaining: Optional[float] = None
) -> None:
    """Parse one SQS record and dispatch it."""
    notification = parse_notification(record.get("body", ""))
    dispatcher.dispatch(notification, time_remaining=remaining)


def handler(event: Dict[str, Any], context: Any = None, dispatcher: Optional[LifecycleDispatcher] = None) -> Dict[str, Any]:
    """
    Handle a batch of SQS messages.

    Every record is processed in order. Failed records are returned as
    batch item failures so only those messages are redelivered. Outbound
    calls never outlive the invocation deadline taken from the context.

    Args:
        event: SQS event
        context: Lambda context
        dispatcher: Dispatcher to use, built from the environment if omitted

    Returns:
        Partial batch response
    """
    dispatcher = dispatcher or get_dispatcher()
    records = event.get("Records", [])
    failures: List[Dict[str, str]] = []

    for record in records:
        message_id = record.get("messageId", "")
        try:
            process_record(dispatcher, record, time_remaining(context))
        except Exception as e:
            logger.exception(f"error handling message {message_id}: {e}")
            failures.append({"itemIdentifier": message_id})

    if failures:
        logger.warning(f"{len(failures)} of {len(records)} messages failed")
    return {"batchItemFailures": failures}
