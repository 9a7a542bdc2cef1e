from ape.contracts.base import ContractContainer, ContractInstance

from options_deployment.constants import UPGRADE_COOLDOWN


def initiate_upgrade(
    deployer, proxy: ContractInstance, container: ContractContainer
) -> ContractInstance:
    """
    Deploys a new implementation and starts the upgrade cooldown for it.
    The upgrade itself can only be completed once UPGRADE_COOLDOWN has elapsed.
    """
    implementation = deployer.prepare_upgrade(container)
    deployer.transact(proxy.initiateUpgradeCooldown, implementation.address)
    hours = UPGRADE_COOLDOWN // 3600
    print(
        f"Upgrade cooldown initiated for {implementation.address}; "
        f"the upgrade can be completed in {hours} hours."
    )
    return implementation


def complete_upgrade(
    deployer, proxy: ContractInstance, implementation_address: str, contract_name: str
) -> ContractInstance:
    """Upgrades the proxy to the implementation set during initiate_upgrade."""
    deployer.upgrade_to(proxy, implementation_address)
    print(f"{proxy.address} upgraded to {implementation_address}")
    return deployer.wrap(contract_name, proxy.address)
