from pathlib import Path

import click
from ape import networks
from ape.cli import ConnectedProviderCommand, network_option
from dotenv import load_dotenv

from options_deployment.registry import contracts_from_registry
from options_deployment.utils import check_etherscan_plugin, get_registry_filepath, verify_contracts


@click.command(cls=ConnectedProviderCommand)
@network_option(required=True)
@click.option(
    "--contract-name",
    "-c",
    "contract_names",
    help="Contract to verify",
    type=click.STRING,
    required=True,
    multiple=True,
)
@click.option(
    "--registry-filepath",
    "-f",
    type=click.Path(dir_okay=False, exists=True, path_type=Path),
    help="Registry filepath; defaults to the registry of the connected chain",
    required=False,
)
def cli(network, contract_names, registry_filepath):
    """Verify deployed contracts listed in a registry."""
    load_dotenv()
    check_etherscan_plugin()
    registry_filepath = registry_filepath or get_registry_filepath()
    chain_id = networks.active_provider.chain_id
    contracts = contracts_from_registry(registry_filepath, chain_id=chain_id)

    contract_instances = []
    for contract_name in contract_names:
        try:
            contract_instances.append(contracts[contract_name])
        except KeyError:
            raise ValueError(
                f"Contract '{contract_name}' not found in registry, '{registry_filepath}', "
                f"for chain {chain_id}"
            )

    # proxies are resolved to their implementation while verifying
    verify_contracts(contract_instances)


if __name__ == "__main__":
    cli()
