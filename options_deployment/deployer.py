import typing
from typing import Any, List, Optional

from ape import networks
from ape.api import AccountAPI, ReceiptAPI
from ape.cli.choices import select_account
from ape.contracts.base import ContractContainer, ContractInstance, ContractTransactionHandler
from ape.exceptions import ContractNotFoundError, ConversionError
from ethpm_types import MethodABI
from web3.auto import w3

from options_deployment.config import DeploymentConfig
from options_deployment.confirm import _confirm_resolution, _continue
from options_deployment.constants import UUPS_PROXY
from options_deployment.registry import registry_from_ape_deployments
from options_deployment.utils import (
    check_plugins,
    get_contract_container,
    get_implementation_address,
    get_oz_dependency,
    validate_config,
    verify_contracts,
)


def _named_args(abi_inputs: List[Any], args: typing.Sequence[Any]) -> typing.Dict[str, Any]:
    named_args = dict()
    for position, (abi_input, arg) in enumerate(zip(abi_inputs, args)):
        named_args[abi_input.name or f"arg{position}"] = arg
    return named_args


def _validate_method_args(
    method_abis: List[MethodABI], args: typing.Sequence[Any]
) -> typing.Dict[str, Any]:
    """Validates the transaction arguments against the function ABI."""
    if len(method_abis) == 0:
        raise ValueError("No method abis provided for validation of args")

    abis_matching_args_length = [abi for abi in method_abis if len(abi.inputs) == len(args)]
    for abi in abis_matching_args_length:
        if all(
            w3.is_encodable(abi_input.canonical_type, arg)
            for arg, abi_input in zip(args, abi.inputs)
        ):
            return _named_args(abi.inputs, args)
    raise ValueError(
        f"Could not find ABI for '{method_abis[0].name}' with {len(args)} arg(s) and given type(s)"
    )


def _validate_constructor_args(
    container: ContractContainer, args: typing.Sequence[Any]
) -> typing.Dict[str, Any]:
    """Validates the constructor arguments against the constructor ABI."""
    contract_name = container.contract_type.name
    abi_inputs = container.constructor.abi.inputs
    if len(args) != len(abi_inputs):
        raise Deployer.Invalid(
            f"Constructor parameters length mismatch - "
            f"{contract_name} ABI requires {len(abi_inputs)}, Got {len(args)}."
        )
    for position, (abi_input, value) in enumerate(zip(abi_inputs, args)):
        if not w3.is_encodable(abi_input.canonical_type, value):
            raise Deployer.Invalid(
                f"{contract_name} constructor param '{abi_input.name}' at position {position} "
                f"has a value '{value}' whose type does not match expected ABI type "
                f"'{abi_input.canonical_type}'"
            )
    return _named_args(abi_inputs, args)


class Transactor:
    """
    Represents an ape account plus validated/annotated transaction execution.
    """

    def __init__(self, account: Optional[AccountAPI] = None, autosign: bool = False):
        if account is None:
            self._account = select_account()
        else:
            self._account = account
        if autosign:
            print("WARNING: Autosign is enabled. Transactions will be signed automatically.")
        self._autosign = autosign
        self._account.set_autosign(autosign)

    def get_account(self) -> AccountAPI:
        """Returns the transactor account."""
        return self._account

    def transact(self, method: ContractTransactionHandler, *args) -> ReceiptAPI:
        named_args = _validate_method_args(method_abis=method.abis, args=args)
        base_message = (
            f"\nTransacting {method.contract.contract_type.name}"
            f"[{method.contract.address[:10]}].{method}"
        )
        if named_args:
            pretty_args = "\n\t".join(f"{k}={v}" for k, v in named_args.items())
            message = f"{base_message} with arguments:\n\t{pretty_args}"
        else:
            message = f"{base_message} with no arguments"
        print(message)
        if not self._autosign:
            _continue()

        return method(*args, sender=self._account)


class Deployer(Transactor):
    """
    Represents an ape account plus the deployment config for the options token
    contracts, plus validated/annotated deployment, proxying and upgrades.
    """

    class Invalid(Exception):
        """Raised when deployment arguments do not match the contract ABI"""

    def __init__(
        self,
        config: DeploymentConfig,
        verify: bool,
        account: Optional[AccountAPI] = None,
        autosign: bool = False,
        contract_names: Optional[typing.Iterable[str]] = None,
    ):
        super().__init__(account, autosign)

        check_plugins(verify=verify)
        self.config = config
        self.verify = verify
        self.contract_names = contract_names
        self.registry_filepath = validate_config(
            config=self.config, contract_names=self.contract_names
        )
        self._print_deployment_info()

        if not self._autosign:
            # Confirms the start of the deployment.
            _continue()

    @classmethod
    def from_file(cls, filepath, *args, **kwargs) -> "Deployer":
        config = DeploymentConfig.from_file(filepath)
        return cls(config, *args, **kwargs)

    def deploy(self, container: ContractContainer, *args) -> ContractInstance:
        contract_name = container.contract_type.name
        named_args = _validate_constructor_args(container, args)
        if not self._autosign:
            _confirm_resolution(named_args, contract_name)

        instance = self.get_account().deploy(container, *args)
        print(f"{contract_name} deployed to: {instance.address}")
        return instance

    def deploy_proxy(
        self, container: ContractContainer, *initializer_args, initializer: str = "initialize"
    ) -> ContractInstance:
        """
        Deploys `container` behind an ERC1967 (UUPS) proxy initialized with
        `initializer(*initializer_args)`, and returns it wrapped at the proxy address.
        """
        contract_name = container.contract_type.name
        implementation = self.deploy(container)

        initializer_method = getattr(implementation, initializer)
        named_args = _validate_method_args(initializer_method.abis, initializer_args)
        if not self._autosign:
            _confirm_resolution(named_args, f"{contract_name}.{initializer}")
        encoded_initializer = initializer_method.encode_input(*initializer_args)

        proxy_container = getattr(get_oz_dependency(), UUPS_PROXY)
        print(f"\nDeploying {UUPS_PROXY} contract to proxy {contract_name}.")
        proxy = self.deploy(proxy_container, implementation.address, encoded_initializer)

        print(
            f"\nWrapping {contract_name} into {UUPS_PROXY} at {proxy.address}.\n"
            f"Implementation: {get_implementation_address(proxy.address)}"
        )
        return container.at(proxy.address)

    def attach(
        self, container: ContractContainer, address: Optional[str]
    ) -> Optional[ContractInstance]:
        """
        Returns the contract at `address`, or None if it cannot be attached;
        callers must check for None before using the result.
        """
        contract_name = container.contract_type.name
        if not address:
            print(f"WARNING: {contract_name} NOT available due to lack of configuration")
            return None
        try:
            instance = container.at(address)
        except (ContractNotFoundError, ConversionError) as error:
            print(f"WARNING: {contract_name} NOT available due to lack of configuration ({error})")
            return None
        print(f"Attached to {contract_name} at {instance.address}")
        return instance

    def prepare_upgrade(self, container: ContractContainer) -> ContractInstance:
        """Deploys a new implementation for an existing UUPS proxy."""
        return self.deploy(container)

    def upgrade_to(self, proxy: ContractInstance, implementation_address: str) -> ReceiptAPI:
        return self.transact(proxy.upgradeTo, implementation_address)

    def wrap(self, contract_name: str, address: str) -> ContractInstance:
        return get_contract_container(contract_name).at(address)

    def finalize(self, deployments: List[ContractInstance]) -> None:
        """
        Publishes the deployments to the registry and optionally to block explorers.
        """
        if not deployments:
            print("(i) No contracts were deployed.")
            return
        registry_from_ape_deployments(
            deployments=deployments,
            output_filepath=self.registry_filepath,
        )
        if self.verify:
            verify_contracts(contracts=deployments)

    def _print_deployment_info(self):
        to_deploy = self.config.deploying(self.contract_names)
        print(
            f"Account: {self.get_account().address}",
            f"Config: {self.config.path}",
            f"Contracts to deploy: {', '.join(to_deploy) or 'none'}",
            f"Registry: {self.registry_filepath}",
            f"Verify: {self.verify}",
            f"Ecosystem: {networks.provider.network.ecosystem.name}",
            f"Network: {networks.provider.network.name}",
            f"Chain ID: {networks.provider.network.chain_id}",
            f"Gas Price: {networks.provider.gas_price}",
            sep="\n",
        )
