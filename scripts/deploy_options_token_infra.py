#!/usr/bin/python3

import click
from ape.cli import ConnectedProviderCommand, account_option, network_option
from dotenv import load_dotenv

from options_deployment.deployer import Deployer
from options_deployment.constants import OPTIONS_TOKEN_INFRA_CONTRACTS
from options_deployment.infra import deploy_options_token_infra
from options_deployment.options import autosign_option, config_option, verify_option


@click.command(cls=ConnectedProviderCommand, name="deploy-options-token-infra")
@network_option(required=True)
@account_option()
@config_option
@verify_option
@autosign_option
def cli(network, account, config_filepath, verify, autosign):
    """
    Deploys (or attaches to) ThenaOracle, OptionsToken, DiscountExercise and
    OptionsCompounder according to CONTRACTS_TO_DEPLOY.

    The swapper must already be deployed and configured as SWAPPER.
    """
    load_dotenv()
    click.echo(f"Connected to {network.name} network.")

    deployer = Deployer.from_file(
        filepath=config_filepath,
        verify=verify,
        account=account,
        autosign=autosign,
        contract_names=OPTIONS_TOKEN_INFRA_CONTRACTS,
    )
    contracts = deploy_options_token_infra(deployer, deployer.config)

    for contract_name, instance in contracts.items():
        if instance is None:
            click.secho(f"{contract_name}: not available", fg="yellow")
        else:
            click.secho(f"{contract_name}: {instance.address}", fg="green")

    deployer.finalize(deployments=contracts.deployed)


if __name__ == "__main__":
    cli()
