"""
Commands that read and write keys of the configured namespace.
"""

import json

import click
from rich.table import Table

from .util import _ValidatedCommand, check, console, format_expiration, run_with_kv


@click.command(cls=_ValidatedCommand)
@click.option("--key", "-k", help="Key to get", type=str, required=True)
@click.option(
    "--type",
    "value_type",
    help="How to decode the value",
    type=click.Choice(["text", "json", "bytes"]),
    default="text",
    show_default=True,
)
@click.option(
    "--metadata", is_flag=True, default=False, help="Also print the key's metadata."
)
@click.pass_context
def get(ctx, key, value_type, metadata):
    """
    Prints the value of the given key.
    """
    if metadata:
        result = run_with_kv(ctx, lambda kv: kv.get_with_metadata(key, value_type))
        value, meta = result.value, result.metadata
    else:
        value = run_with_kv(ctx, lambda kv: kv.get(key, value_type))
        meta = None
    check(value is not None, f"Key [red]{key}[/] not found.")
    if value_type == "json":
        console.print_json(data=value)
    elif value_type == "bytes":
        click.echo(value, nl=False)
    else:
        console.print(value, markup=False)
    if metadata:
        console.print("[bold]metadata[/]:")
        console.print_json(data=meta)


@click.command(cls=_ValidatedCommand)
@click.option("--key", "-k", help="Key to put", type=str, required=True)
@click.option("--value", "-v", help="Value to put", type=str, required=True)
@click.option(
    "--ttl", help="Expire the key after this many seconds (at least 60).", type=int
)
@click.option(
    "--expiration",
    help="Expire the key at this unix timestamp, in seconds.",
    type=int,
)
@click.option("--metadata", help="JSON metadata to attach to the key.", type=str)
@click.pass_context
def put(ctx, key, value, ttl, expiration, metadata):
    """
    Puts a key-value pair into the namespace.
    """
    check(
        ttl is None or expiration is None,
        "[red]Error[/]: --ttl and --expiration are mutually exclusive.",
    )
    options = {"expiration_ttl": ttl, "expiration": expiration}
    if metadata is not None:
        try:
            options["metadata"] = json.loads(metadata)
        except json.JSONDecodeError as e:
            raise click.BadParameter(f"not valid JSON: {e}", param_hint="--metadata")
    run_with_kv(ctx, lambda kv: kv.put(key, value, options))
    console.print(f"Successfully put key [green]{key}[/].")


@click.command(cls=_ValidatedCommand)
@click.option("--key", "-k", help="Key to delete", type=str, required=True)
@click.pass_context
def delete(ctx, key):
    """
    Deletes the given key. Deleting a key that does not exist is not an error.
    """
    run_with_kv(ctx, lambda kv: kv.delete(key))
    console.print(f"Successfully deleted key [green]{key}[/].")


@click.command(name="list", cls=_ValidatedCommand)
@click.option("--prefix", "-p", help="Only list keys with this prefix", default="")
@click.option(
    "--limit", "-l", help="Keys per page (1 to 1000)", type=int, default=1000
)
@click.option("--cursor", "-c", help="Cursor returned by a previous page")
@click.option(
    "--all",
    "list_all",
    is_flag=True,
    default=False,
    help="Follow cursors until all matching keys are listed.",
)
@click.pass_context
def list_command(ctx, prefix, limit, cursor, list_all):
    """
    Lists keys in the namespace, one page at a time unless --all is given.
    """
    if list_all:

        async def _collect(kv):
            return [key async for key in kv.iter_keys(prefix=prefix, limit=limit)]

        keys = run_with_kv(ctx, _collect)
        next_cursor = ""
    else:
        page = run_with_kv(
            ctx,
            lambda kv: kv.list({"prefix": prefix, "limit": limit, "cursor": cursor}),
        )
        keys = page.keys
        next_cursor = "" if page.list_complete else page.cursor

    table = Table(title="Keys", show_lines=True)
    table.add_column("name")
    table.add_column("expiration")
    table.add_column("metadata")
    for key in keys:
        table.add_row(
            key.name,
            format_expiration(key.expiration),
            "-" if key.metadata is None else json.dumps(key.metadata),
        )
    console.print(table)
    if next_cursor:
        console.print(f"More keys may follow. Next cursor: [green]{next_cursor}[/]")


def add_command(cli_group):
    for command in (get, put, delete, list_command):
        cli_group.add_command(command)
