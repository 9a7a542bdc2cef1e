import json
import os
from pathlib import Path
from typing import Iterable, List, Optional

import yaml
from ape import networks, project
from ape.api.networks import LOCAL_NETWORK_NAME
from ape.contracts import ContractContainer, ContractInstance

from options_deployment.constants import (
    ARTIFACTS_DIR,
    OZ_DEPENDENCY_NAME,
    OZ_DEPENDENCY_VERSION,
    SUPPORTED_CHAINS,
)

DEFAULT_EXPLORER_API_KEY_ENVVAR = "ETHERSCAN_API_KEY"


def _load_yaml(filepath: Path) -> dict:
    """Loads a YAML file."""
    with open(filepath, "r") as file:
        return yaml.safe_load(file)


def _load_json(filepath: Path) -> dict:
    """Loads a JSON file."""
    with open(filepath, "r") as file:
        return json.load(file)


def is_local_network() -> bool:
    network_name = networks.provider.network.name
    return network_name == LOCAL_NETWORK_NAME or network_name.endswith("-fork")


def get_registry_filepath(filename: Optional[str] = None) -> Path:
    """Returns the filepath of the registry for the connected chain."""
    if not filename:
        filename = f"{networks.provider.network.ecosystem.name}-{networks.provider.chain_id}.json"
    return ARTIFACTS_DIR / filename


def validate_config(config, contract_names: Optional[Iterable[str]] = None) -> Path:
    """
    Checks the deployment config and that it targets the connected chain.
    Returns the registry filepath for the deployment.
    """
    config.validate(contract_names=contract_names)

    chain_id = networks.provider.chain_id
    config_chain_id = config.chain_id
    if config_chain_id is not None and config_chain_id != chain_id and not is_local_network():
        raise ValueError(
            f"CHAIN_ID in deployment config ({config_chain_id}) does not match "
            f"chain_id of current network ({chain_id})."
        )
    if chain_id not in SUPPORTED_CHAINS.values() and not is_local_network():
        print(f"WARNING: chain_id {chain_id} is not one of {', '.join(SUPPORTED_CHAINS)}.")

    return get_registry_filepath(config.get("REGISTRY_FILENAME"))


def check_etherscan_plugin() -> None:
    """
    Checks that the ape-etherscan plugin is installed and that
    the appropriate API key environment variable is set.
    """
    if is_local_network():
        # unnecessary for local deployment
        return
    try:
        from ape_etherscan.utils import API_KEY_ENV_KEY_MAP
    except ImportError:
        raise ImportError("Please install the ape-etherscan plugin to use this script.")
    ecosystem_name = networks.provider.network.ecosystem.name
    explorer_envvar = API_KEY_ENV_KEY_MAP.get(ecosystem_name, DEFAULT_EXPLORER_API_KEY_ENVVAR)
    api_key = os.environ.get(explorer_envvar)
    if not api_key:
        raise ValueError(f"{explorer_envvar} is not set.")


def check_plugins(verify: bool) -> None:
    print("Checking plugins...")
    if verify:
        check_etherscan_plugin()


def verify_contracts(contracts: List[ContractInstance]) -> None:
    explorer = networks.provider.network.explorer
    if explorer is None:
        raise ValueError(
            f"No block explorer configured for {networks.provider.network.ecosystem.name}."
        )
    ecosystem = networks.provider.network.ecosystem
    for instance in contracts:
        address = instance.address
        proxy_info = ecosystem.get_proxy_info(address)
        if proxy_info:
            # verify the implementation behind the proxy
            print(f"(i) Proxy detected for {instance.contract_type.name} at {address}")
            address = proxy_info.target
        print(f"(i) Verifying {instance.contract_type.name} at {address}...")
        explorer.publish_contract(address)


def get_implementation_address(proxy_address: str) -> Optional[str]:
    """Returns the implementation address behind an EIP-1967 proxy, if any."""
    proxy_info = networks.provider.network.ecosystem.get_proxy_info(proxy_address)
    if not proxy_info:
        return None
    return proxy_info.target


def get_oz_dependency():
    return project.dependencies[OZ_DEPENDENCY_NAME][OZ_DEPENDENCY_VERSION]


def _get_dependency_contract_container(contract: str) -> ContractContainer:
    for dependency_name, dependency_versions in project.dependencies.items():
        if len(dependency_versions) > 1:
            raise ValueError(f"Ambiguous {dependency_name} dependency for {contract}")
        try:
            dependency_api = list(dependency_versions.values())[0]
            contract_container = getattr(dependency_api, contract)
            return contract_container
        except AttributeError:
            continue
    raise ValueError(f"No contract found with name '{contract}'.")


def get_contract_container(contract: str) -> ContractContainer:
    try:
        contract_container = getattr(project, contract)
    except AttributeError:
        # not in root project; check dependencies
        contract_container = _get_dependency_contract_container(contract)

    return contract_container

