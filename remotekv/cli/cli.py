import click

import remotekv
from remotekv import config
from remotekv._internal import logging as internal_logging
from . import kv
from .util import click_group

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


@click.version_option(remotekv.__version__, "-V", "--version")
@click_group(context_settings=CONTEXT_SETTINGS)
@click.option(
    "--account-id", envvar=config.ACCOUNT_ID_ENV, help="Cloudflare account id."
)
@click.option(
    "--namespace-id", "-n", envvar=config.NAMESPACE_ID_ENV, help="KV namespace id."
)
@click.option("--api-token", envvar=config.API_TOKEN_ENV, help="Cloudflare API token.")
@click.option(
    "--api-email",
    envvar=config.API_EMAIL_ENV,
    help="Account email, used with --api-key when there is no token.",
)
@click.option("--api-key", envvar=config.API_KEY_ENV, help="Global API key.")
@click.pass_context
def rkv(ctx, account_id, namespace_id, api_token, api_email, api_key):
    """
    Rkv reads and writes keys of a Cloudflare Workers KV namespace through the
    Cloudflare API. Every option can also be given through its environment
    variable, e.g. CLOUDFLARE_ACCOUNT_ID and CLOUDFLARE_API_TOKEN.
    """
    internal_logging.enable()
    ctx.obj = dict(
        account_id=account_id,
        namespace_id=namespace_id,
        api_token=api_token,
        api_email=api_email,
        api_key=api_key,
    )


# Add subcommands
kv.add_command(rkv)


if __name__ == "__main__":
    rkv()
