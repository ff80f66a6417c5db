"""
Common utilities for the CLI.
"""

import asyncio
from datetime import datetime, timezone
import sys
import traceback
from typing import Any, Awaitable, Callable, Optional, TypeVar

import click
import httpx
from loguru import logger
from rich.console import Console

from remotekv.api.utils import KVError, RemoteFailure
from remotekv.kv import KV

console = Console(highlight=False)


class _ValidatedCommand(click.Command):
    """Global guard: forbid empty or whitespace-only string values from CLI.

    This validates only values provided from COMMANDLINE source. It does not
    change default values or environment-derived values.
    """

    def invoke(self, ctx):
        for param_name, param_value in ctx.params.items():
            try:
                src = ctx.get_parameter_source(param_name)
            except Exception:
                src = None
            if src != click.core.ParameterSource.COMMANDLINE:
                continue
            if isinstance(param_value, str) and param_value.strip() == "":
                param_obj = next(
                    (p for p in self.params if getattr(p, "name", None) == param_name),
                    None,
                )
                msg = (
                    "must not be empty or only whitespace. Omit the flag instead of"
                    " passing an empty string."
                )
                if param_obj is not None:
                    raise click.BadParameter(msg, param=param_obj)
                ctx.fail(f"Option '--{param_name}' {msg}")
        return super().invoke(ctx)


def click_group(*args, **kwargs):
    """
    A wrapper around click.group that allows for command shorthands as long as
    they are unambiguous. For example, `rkv del` resolves to `rkv delete`. The group
    also renders remotekv errors instead of printing a traceback.
    """

    class ClickAliasedGroup(click.Group):
        def get_command(self, ctx, cmd_name):
            rv = click.Group.get_command(self, ctx, cmd_name)
            if rv is not None:
                return rv

            def is_abbrev(x, y):
                # first char must match
                if x[0] != y[0]:
                    return False
                it = iter(y)
                return all(any(c == ch for c in it) for ch in x)

            matches = [x for x in self.list_commands(ctx) if is_abbrev(cmd_name, x)]

            if not matches:
                return None
            elif len(matches) == 1:
                return click.Group.get_command(self, ctx, matches[0])
            ctx.fail(f"'{cmd_name}' is ambiguous: {', '.join(sorted(matches))}")

        def resolve_command(self, ctx, args):
            # always return the full command name
            _, cmd, args = super().resolve_command(ctx, args)
            return cmd.name, cmd, args

        def invoke(self, ctx):
            try:
                return super().invoke(ctx)
            except RemoteFailure as e:
                if e.status == 401 or e.status == 403:
                    console.print(
                        f"[red]{e.status} Error[/]: {e.message}\n\n[yellow]Hint:[/]"
                        " check that the api token (or email and key) has access to"
                        " the account and namespace."
                    )
                else:
                    console.print(f"[red]{e.status} Error[/]: {e.message}")
                sys.exit(1)
            except httpx.HTTPStatusError as e:
                response = e.response
                console.print(
                    f"[red]{response.status_code} Error[/]: {response.reason_phrase}"
                )
                logger.trace(traceback.format_exc())
                sys.exit(1)
            except (click.ClickException, click.exceptions.Exit):
                raise
            except (KVError, ValueError) as e:
                console.print(f"[red]Error[/]: {e}")
                logger.trace(traceback.format_exc())
                sys.exit(1)
            except Exception as e:
                console.print(f"[red]Unexpected error[/]: {e}")
                console.print(traceback.format_exc())
                sys.exit(1)

    return click.group(*args, cls=ClickAliasedGroup, **kwargs)


T = TypeVar("T")


def run_with_kv(ctx: click.Context, fn: Callable[[KV], Awaitable[T]]) -> T:
    """
    Creates a KV from the group options stored in ctx.obj, runs fn with it on a
    fresh event loop, and closes the KV afterwards.
    """

    async def _run() -> T:
        async with KV(**(ctx.obj or {})) as kv:
            return await fn(kv)

    return asyncio.run(_run())


def format_expiration(expiration: Optional[int]) -> str:
    if expiration is None:
        return "-"
    return datetime.fromtimestamp(expiration, tz=timezone.utc).strftime(
        "%Y-%m-%d %H:%M:%S UTC"
    )


def check(condition: Any, message: str) -> None:
    """
    Checks a condition and prints a message if the condition is false.

    :param condition: The condition to check.
    :param message: The message to print if the condition is false.
    """
    if not condition:
        console.print(message)
        sys.exit(1)
