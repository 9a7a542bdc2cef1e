#!/usr/bin/env python3

import os

import click
from ape_accounts import import_account_from_private_key
from dotenv import load_dotenv

DEFAULT_ALIAS = "DEPLOYER"


@click.command()
@click.option(
    "--alias",
    "-a",
    help="Alias of the imported ape account.",
    default=DEFAULT_ALIAS,
    show_default=True,
)
def cli(alias):
    """Imports PRIVATE_KEY from the environment (or .env) as an ape account."""
    load_dotenv()
    try:
        passphrase = os.environ["DEPLOYER_PASSPHRASE"]
        private_key = os.environ["PRIVATE_KEY"]
    except KeyError:
        raise click.ClickException(
            "There are missing environment variables. "
            "Please set DEPLOYER_PASSPHRASE and PRIVATE_KEY."
        )
    if not private_key.startswith("0x"):
        private_key = f"0x{private_key}"
    account = import_account_from_private_key(alias, passphrase, private_key)
    click.echo(f"Account imported: {account.address}")


if __name__ == "__main__":
    cli()
