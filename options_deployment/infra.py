"""
Deploy-or-attach sequence for the options token infrastructure.

Every contract is either deployed (when listed in CONTRACTS_TO_DEPLOY) or
attached to the address configured for it. Contracts that cannot be attached
are recorded as absent; later steps that depend on them raise MissingContract.
"""

import typing
from collections import OrderedDict
from typing import List, NamedTuple, Optional

from ape.contracts.base import ContractInstance
from eth_typing import ChecksumAddress

from options_deployment.config import DeploymentConfig
from options_deployment.constants import (
    DISCOUNT_EXERCISE,
    EXISTING_ADDRESS_KEYS,
    GUARDIAN_INDEX,
    OPTIONS_COMPOUNDER,
    OPTIONS_TOKEN,
    ORACLE,
    SUPER_ADMIN_INDEX,
    SWAPPER,
)
from options_deployment.utils import get_contract_container


class MissingContract(Exception):
    """Raised when a step needs a contract that was neither deployed nor attached."""

    def __init__(self, contract_name: str):
        self.contract_name = contract_name
        super().__init__(f"{contract_name} NOT available due to lack of configuration")


class DeployedContracts:
    """Contracts resolved so far, by contract name; None marks an absent contract."""

    def __init__(self):
        self._instances: typing.Dict[str, Optional[ContractInstance]] = OrderedDict()
        self.deployed: List[ContractInstance] = list()

    def record(
        self, contract_name: str, instance: Optional[ContractInstance], deployed: bool = False
    ) -> None:
        self._instances[contract_name] = instance
        if deployed and instance is not None:
            self.deployed.append(instance)

    def get(self, contract_name: str) -> Optional[ContractInstance]:
        return self._instances.get(contract_name)

    def require(self, contract_name: str) -> ContractInstance:
        instance = self._instances.get(contract_name)
        if instance is None:
            raise MissingContract(contract_name)
        return instance

    def __contains__(self, contract_name: str) -> bool:
        return self._instances.get(contract_name) is not None

    def items(self):
        return self._instances.items()


class SwapProps(NamedTuple):
    """Mirrors the SwapProps struct shared by the exercise and compounder contracts."""

    swapper: ChecksumAddress
    exchangeAddress: ChecksumAddress
    exchangeTypes: int
    maxSwapSlippage: int


class VeloRoute(NamedTuple):
    from_: ChecksumAddress
    to: ChecksumAddress
    stable: bool


#
# Arguments
#


def swapper_initializer_args(config: DeploymentConfig) -> list:
    roles = config.multisig_roles()
    return [
        config.addresses("STRATEGISTS"),
        roles[GUARDIAN_INDEX],
        roles[SUPER_ADMIN_INDEX],
    ]


def oracle_constructor_args(config: DeploymentConfig) -> list:
    return [
        config.address("ORACLE_SOURCE"),
        config.address("OT_UNDERLYING_TOKEN"),
        config.address("OWNER"),
        config.integer("ORACLE_SECS"),
        config.integer("ORACLE_MIN_PRICE"),
    ]


def options_token_initializer_args(config: DeploymentConfig) -> list:
    return [
        config.string("OT_NAME"),
        config.string("OT_SYMBOL"),
        config.address("OT_TOKEN_ADMIN"),
    ]


def swap_props(config: DeploymentConfig, swapper_address: ChecksumAddress) -> SwapProps:
    return SwapProps(
        swapper=swapper_address,
        exchangeAddress=config.address("VELO_ROUTER"),
        exchangeTypes=int(config.exchange_type),
        maxSwapSlippage=config.max_swap_slippage,
    )


def exercise_constructor_args(
    config: DeploymentConfig,
    options_token_address: ChecksumAddress,
    oracle_address: ChecksumAddress,
    props: SwapProps,
) -> list:
    fee_recipients, fee_bps = config.fees()
    return [
        options_token_address,
        config.address("OWNER"),
        config.address("OT_PAYMENT_TOKEN"),
        config.address("OT_UNDERLYING_TOKEN"),
        oracle_address,
        config.integer("MULTIPLIER"),
        config.integer("INSTANT_EXIT_FEE"),
        config.integer("MIN_AMOUNT_TO_TRIGGER_SWAP"),
        fee_recipients,
        fee_bps,
        props,
    ]


def compounder_initializer_args(
    config: DeploymentConfig,
    options_token_address: ChecksumAddress,
    oracle_address: ChecksumAddress,
    props: SwapProps,
) -> list:
    return [
        options_token_address,
        config.address("ADDRESS_PROVIDER"),
        props,
        oracle_address,
        config.addresses("STRATS"),
    ]


def velo_swap_paths(
    config: DeploymentConfig,
) -> List[typing.Tuple[ChecksumAddress, ChecksumAddress, List[VeloRoute]]]:
    """Payment token -> underlying token and back, both through a volatile pool."""
    payment_token = config.address("OT_PAYMENT_TOKEN")
    underlying_token = config.address("OT_UNDERLYING_TOKEN")
    return [
        (payment_token, underlying_token, [VeloRoute(payment_token, underlying_token, False)]),
        (underlying_token, payment_token, [VeloRoute(underlying_token, payment_token, False)]),
    ]


#
# Steps
#


def _attach(deployer, config: DeploymentConfig, contracts: DeployedContracts, contract_name: str):
    container = get_contract_container(contract_name)
    instance = deployer.attach(container, config.existing_address(contract_name))
    contracts.record(contract_name, instance)
    return instance


def deploy_swapper(deployer, config: DeploymentConfig, contracts: DeployedContracts):
    if not config.should_deploy(SWAPPER):
        return _attach(deployer, config, contracts, SWAPPER)

    swapper = deployer.deploy_proxy(
        get_contract_container(SWAPPER), *swapper_initializer_args(config)
    )
    contracts.record(SWAPPER, swapper, deployed=True)
    return swapper


def update_swap_paths(deployer, config: DeploymentConfig, contracts: DeployedContracts) -> None:
    swapper = contracts.require(SWAPPER)
    router = config.address("VELO_ROUTER")
    for token_in, token_out, path in velo_swap_paths(config):
        deployer.transact(swapper.updateVeloSwapPath, token_in, token_out, router, path)


def deploy_oracle(deployer, config: DeploymentConfig, contracts: DeployedContracts):
    if not config.should_deploy(ORACLE):
        return _attach(deployer, config, contracts, ORACLE)

    oracle = deployer.deploy(get_contract_container(ORACLE), *oracle_constructor_args(config))
    contracts.record(ORACLE, oracle, deployed=True)
    return oracle


def deploy_options_token(deployer, config: DeploymentConfig, contracts: DeployedContracts):
    if not config.should_deploy(OPTIONS_TOKEN):
        return _attach(deployer, config, contracts, OPTIONS_TOKEN)

    options_token = deployer.deploy_proxy(
        get_contract_container(OPTIONS_TOKEN), *options_token_initializer_args(config)
    )
    contracts.record(OPTIONS_TOKEN, options_token, deployed=True)
    return options_token


def deploy_discount_exercise(deployer, config: DeploymentConfig, contracts: DeployedContracts):
    if not config.should_deploy(DISCOUNT_EXERCISE):
        return _attach(deployer, config, contracts, DISCOUNT_EXERCISE)

    options_token = contracts.require(OPTIONS_TOKEN)
    oracle = contracts.require(ORACLE)
    props = swap_props(config, contracts.require(SWAPPER).address)
    exercise = deployer.deploy(
        get_contract_container(DISCOUNT_EXERCISE),
        *exercise_constructor_args(config, options_token.address, oracle.address, props),
    )
    contracts.record(DISCOUNT_EXERCISE, exercise, deployed=True)

    deployer.transact(options_token.setExerciseContract, exercise.address, True)
    print(f"Exercise set to: {exercise.address}")
    return exercise


def deploy_options_compounder(deployer, config: DeploymentConfig, contracts: DeployedContracts):
    if not config.should_deploy(OPTIONS_COMPOUNDER):
        compounder = _attach(deployer, config, contracts, OPTIONS_COMPOUNDER)
        if compounder is not None and "STRATS" in config:
            deployer.transact(compounder.setStrats, config.addresses("STRATS"))
        return compounder

    options_token = contracts.require(OPTIONS_TOKEN)
    oracle = contracts.require(ORACLE)
    props = swap_props(config, contracts.require(SWAPPER).address)
    compounder = deployer.deploy_proxy(
        get_contract_container(OPTIONS_COMPOUNDER),
        *compounder_initializer_args(config, options_token.address, oracle.address, props),
    )
    contracts.record(OPTIONS_COMPOUNDER, compounder, deployed=True)
    return compounder


#
# Sequences
#


def deploy_swapper_infra(
    deployer, config: DeploymentConfig, with_swap_paths: bool = False
) -> DeployedContracts:
    contracts = DeployedContracts()
    deploy_swapper(deployer, config, contracts)
    if with_swap_paths:
        update_swap_paths(deployer, config, contracts)
    return contracts


def deploy_options_token_infra(deployer, config: DeploymentConfig) -> DeployedContracts:
    """Oracle, options token, discount exercise and compounder, in that order."""
    contracts = DeployedContracts()
    # the swapper is deployed separately and always attached here
    if config.should_deploy(SWAPPER):
        print(
            f"WARNING: {SWAPPER} is deployed by deploy_swapper; "
            f"attaching to {EXISTING_ADDRESS_KEYS[SWAPPER]} instead."
        )
    _attach(deployer, config, contracts, SWAPPER)
    deploy_oracle(deployer, config, contracts)
    deploy_options_token(deployer, config, contracts)
    deploy_discount_exercise(deployer, config, contracts)
    deploy_options_compounder(deployer, config, contracts)
    return contracts
