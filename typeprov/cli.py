"""Command line interface for Typeprov."""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict

import click
from botocore.exceptions import BotoCoreError, ClientError

from .clients import client_factory_from_config
from .config import ProviderConfig
from .dispatcher import LifecycleDispatcher
from .errors import MissingConfiguration, ProviderError
from .naming import package_location, to_storage_key
from .notifications import parse_notification


@click.group()
@click.option('--json', 'output_json', is_flag=True, help='Output machine-readable JSON')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def main(ctx, output_json, verbose):
    """Typeprov - keep CloudFormation resource types in sync with the service lifecycle."""
    ctx.ensure_object(dict)
    ctx.obj['json'] = output_json
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
        stream=sys.stderr,
    )


def _json_output(data: Dict[str, Any]) -> None:
    """Output data as JSON."""
    click.echo(json.dumps(data, indent=None, default=str))


def _human_output(message: str) -> None:
    """Output human-readable message."""
    if not click.get_current_context().obj.get('json', False):
        click.echo(message)


def _fail(error: ProviderError, exit_code: int = 1) -> None:
    if click.get_current_context().obj.get('json', False):
        _json_output({'error': error.to_dict()})
    else:
        click.echo(f"❌ {error.message}", err=True)
    sys.exit(exit_code)


@main.command('dispatch')
@click.argument('event_file', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--type', 'types', multiple=True, help='Type identifier to handle (default: TYPES_TO_ACTIVATE)')
@click.pass_context
def dispatch_cmd(ctx, event_file, types):
    """Dispatch a notification stored in EVENT_FILE."""
    try:
        config = ProviderConfig.from_env()
    except MissingConfiguration as e:
        _fail(e, exit_code=2)

    try:
        notification = parse_notification(event_file.read_bytes())
        dispatcher = LifecycleDispatcher(config, client_factory_from_config(config))
        dispatcher.dispatch(notification, list(types) or None)
    except ProviderError as e:
        _fail(e)
    except (ClientError, BotoCoreError) as e:
        _fail(ProviderError(f"AWS call failed: {e}", error_code="AWS_ERROR"))

    if ctx.obj['json']:
        _json_output({'action': notification.action, 'account': notification.aws_account_id, 'ok': True})
    else:
        _human_output(f"✅ {notification.action} handled for account {notification.aws_account_id}")


@main.command('storage-key')
@click.argument('identifiers', nargs=-1, required=True)
@click.option('--bucket', envvar='BUCKET_NAME', default=None, help='Bucket holding the handler packages')
@click.pass_context
def storage_key_cmd(ctx, identifiers, bucket):
    """Print the storage key and package location of type IDENTIFIERS."""
    rows = []
    for identifier in identifiers:
        row = {'identifier': identifier, 'storage_key': to_storage_key(identifier)}
        if bucket:
            row['package_location'] = package_location(bucket, identifier)
        rows.append(row)

    if ctx.obj['json']:
        _json_output({'types': rows})
        return
    for row in rows:
        _human_output(f"{row['identifier']}: {row.get('package_location', row['storage_key'])}")


@main.command('check-config')
@click.pass_context
def check_config_cmd(ctx):
    """Load configuration from the environment and print it."""
    try:
        config = ProviderConfig.from_env()
    except MissingConfiguration as e:
        _fail(e, exit_code=2)

    data = config.redacted()
    if ctx.obj['json']:
        _json_output(data)
        return
    for key, value in data.items():
        _human_output(f"{key}: {value}")


if __name__ == '__main__':
    main()
