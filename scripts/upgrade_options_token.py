#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, account_option, network_option
from dotenv import load_dotenv

from options_deployment.constants import OPTIONS_TOKEN, UPGRADE_COOLDOWN
from options_deployment.deployer import Deployer
from options_deployment.options import (
    autosign_option,
    config_option,
    implementation_option,
    proxy_option,
    verify_option,
)
from options_deployment.upgrade import complete_upgrade, initiate_upgrade
from options_deployment.utils import get_contract_container, verify_contracts

contract_name_option = click.option(
    "--contract-name",
    "-n",
    help="Contract type of the new implementation.",
    type=click.STRING,
    default=OPTIONS_TOKEN,
    show_default=True,
)


def _get_proxy(deployer: Deployer, proxy_address):
    proxy_address = proxy_address or deployer.config.existing_address(OPTIONS_TOKEN)
    if not proxy_address:
        raise click.BadOptionUsage(
            option_name="--proxy",
            message="Provide --proxy or set OPTIONS_TOKEN in the deployment config.",
        )
    return get_contract_container(OPTIONS_TOKEN).at(proxy_address)


@click.group()
def cli():
    """Two-step upgrade of the OptionsToken proxy, separated by the upgrade cooldown."""


@cli.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@account_option()
@config_option
@verify_option
@autosign_option
@proxy_option
@contract_name_option
def initiate(network, account, config_filepath, verify, autosign, proxy, contract_name):
    """Deploys the new implementation and initiates the upgrade cooldown."""
    load_dotenv()
    deployer = Deployer.from_file(
        filepath=config_filepath,
        verify=verify,
        account=account,
        autosign=autosign,
        contract_names=(),
    )
    options_token = _get_proxy(deployer, proxy)
    implementation = initiate_upgrade(
        deployer, options_token, get_contract_container(contract_name)
    )
    if verify:
        verify_contracts([implementation])
    click.secho(
        f"Run 'complete' with --implementation {implementation.address} "
        f"after {UPGRADE_COOLDOWN // 3600} hours.",
        fg="green",
    )


@cli.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@account_option()
@config_option
@autosign_option
@proxy_option
@implementation_option
@contract_name_option
def complete(network, account, config_filepath, autosign, proxy, implementation, contract_name):
    """Upgrades the proxy to the implementation whose cooldown has elapsed."""
    load_dotenv()
    deployer = Deployer.from_file(
        filepath=config_filepath,
        verify=False,
        account=account,
        autosign=autosign,
        contract_names=(),
    )
    options_token = _get_proxy(deployer, proxy)
    upgraded = complete_upgrade(deployer, options_token, implementation, contract_name)
    click.secho(f"{upgraded.contract_type.name} at {upgraded.address}", fg="green")


if __name__ == "__main__":
    cli()
