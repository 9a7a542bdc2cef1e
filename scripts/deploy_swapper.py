#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, account_option, network_option
from dotenv import load_dotenv

from options_deployment.deployer import Deployer
from options_deployment.constants import SWAPPER_INFRA_CONTRACTS
from options_deployment.infra import deploy_swapper_infra
from options_deployment.options import autosign_option, config_option, verify_option


@click.command(cls=ConnectedProviderCommand, name="deploy-swapper")
@network_option(required=True)
@account_option()
@config_option
@verify_option
@autosign_option
@click.option(
    "--update-swap-paths",
    help="Register payment <-> underlying token Velodrome paths on the swapper.",
    is_flag=True,
    default=False,
)
def cli(network, account, config_filepath, verify, autosign, update_swap_paths):
    """
    Deploys the proxied ReaperSwapper, or attaches to the configured SWAPPER.

    ape run deploy_swapper --network optimism:mainnet:node -c path/to/config.json
    """
    load_dotenv()
    click.echo(f"Connected to {network.name} network.")

    deployer = Deployer.from_file(
        filepath=config_filepath,
        verify=verify,
        account=account,
        autosign=autosign,
        contract_names=SWAPPER_INFRA_CONTRACTS,
    )
    contracts = deploy_swapper_infra(deployer, deployer.config, with_swap_paths=update_swap_paths)
    deployer.finalize(deployments=contracts.deployed)


if __name__ == "__main__":
    cli()
