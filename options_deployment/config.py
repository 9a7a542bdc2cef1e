import typing
from pathlib import Path
from typing import Any, List, Optional

from eth_typing import ChecksumAddress
from eth_utils import is_address, to_checksum_address

from options_deployment.constants import (
    BPS_DENOMINATOR,
    DEFAULT_EXCHANGE_TYPE,
    DEFAULT_MAX_SWAP_SLIPPAGE,
    DEPLOYABLE_CONTRACTS,
    DISCOUNT_EXERCISE,
    EXISTING_ADDRESS_KEYS,
    ExchangeType,
    OPTIONS_COMPOUNDER,
    OPTIONS_TOKEN,
    ORACLE,
    SWAPPER,
)
from options_deployment.utils import _load_json, _load_yaml

CONTRACTS_TO_DEPLOY_KEY = "CONTRACTS_TO_DEPLOY"

# fields required to deploy each contract
REQUIRED_FIELDS = {
    SWAPPER: ["STRATEGISTS", "MULTISIG_ROLES"],
    ORACLE: ["ORACLE_SOURCE", "OT_UNDERLYING_TOKEN", "OWNER", "ORACLE_SECS", "ORACLE_MIN_PRICE"],
    OPTIONS_TOKEN: ["OT_NAME", "OT_SYMBOL", "OT_TOKEN_ADMIN"],
    DISCOUNT_EXERCISE: [
        "OWNER",
        "OT_PAYMENT_TOKEN",
        "OT_UNDERLYING_TOKEN",
        "VELO_ROUTER",
        "MULTIPLIER",
        "INSTANT_EXIT_FEE",
        "MIN_AMOUNT_TO_TRIGGER_SWAP",
        "FEE_RECIPIENTS",
        "FEE_BPS",
    ],
    OPTIONS_COMPOUNDER: ["ADDRESS_PROVIDER", "VELO_ROUTER", "STRATS"],
}

# contracts wired into the exercise and the compounder
DEPENDENCIES = {
    DISCOUNT_EXERCISE: [ORACLE, OPTIONS_TOKEN, SWAPPER],
    OPTIONS_COMPOUNDER: [ORACLE, OPTIONS_TOKEN, SWAPPER],
}


class DeploymentConfigError(ValueError):
    pass


def _split(value: Any) -> List[Any]:
    """Accepts either a list or a comma separated string."""
    if isinstance(value, (list, tuple)):
        return list(value)
    return [item.strip() for item in str(value).split(",") if item.strip()]


def _to_address(key: str, value: Any) -> ChecksumAddress:
    if not isinstance(value, str) or not is_address(value):
        raise DeploymentConfigError(f"{key} has an invalid address value '{value}'.")
    return to_checksum_address(value)


def _to_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise DeploymentConfigError(f"{key} must be an integer, got '{value}'.")
    if isinstance(value, float) and not value.is_integer():
        raise DeploymentConfigError(f"{key} must be an integer, got '{value}'.")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise DeploymentConfigError(f"{key} must be an integer, got '{value}'.")


def _check_bps(key: str, value: int) -> int:
    if not 0 <= value <= BPS_DENOMINATOR:
        raise DeploymentConfigError(
            f"{key} must be between 0 and {BPS_DENOMINATOR} basis points, got {value}."
        )
    return value


class DeploymentConfig:
    """
    Read-only view over the JSON deployment configuration.

    Typed accessors raise DeploymentConfigError for missing or malformed fields
    so that problems surface before any transaction is sent.
    """

    def __init__(self, data: typing.Dict[str, Any], path: Optional[Path] = None):
        if not isinstance(data, dict):
            raise DeploymentConfigError("Deployment configuration must be a mapping.")
        self._data = dict(data)
        self.path = path

    @classmethod
    def from_file(cls, filepath: Path) -> "DeploymentConfig":
        filepath = Path(filepath)
        if filepath.suffix in (".yml", ".yaml"):
            data = _load_yaml(filepath)
        else:
            data = _load_json(filepath)
        return cls(data=data, path=filepath)

    def __contains__(self, key: str) -> bool:
        value = self._data.get(key)
        return value is not None and value != ""

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def _require(self, key: str) -> Any:
        if key not in self:
            raise DeploymentConfigError(f"{key} is not set in deployment config.")
        return self._data[key]

    #
    # Typed accessors
    #

    def string(self, key: str) -> str:
        return str(self._require(key))

    def integer(self, key: str) -> int:
        return _to_int(key, self._require(key))

    def integers(self, key: str) -> List[int]:
        return [_to_int(key, v) for v in _split(self._require(key))]

    def address(self, key: str) -> ChecksumAddress:
        return _to_address(key, self._require(key))

    def addresses(self, key: str) -> List[ChecksumAddress]:
        return [_to_address(key, v) for v in _split(self._require(key))]

    def optional_address(self, key: str) -> Optional[ChecksumAddress]:
        if key not in self:
            return None
        return self.address(key)

    #
    # Deployment specifics
    #

    @property
    def contracts_to_deploy(self) -> List[str]:
        names = self._data.get(CONTRACTS_TO_DEPLOY_KEY) or []
        if isinstance(names, str):
            names = _split(names)
        contracts = list()
        for name in names:
            try:
                contracts.append(DEPLOYABLE_CONTRACTS[name])
            except KeyError:
                raise DeploymentConfigError(
                    f"Unknown contract '{name}' in {CONTRACTS_TO_DEPLOY_KEY}; "
                    f"expected one of {', '.join(DEPLOYABLE_CONTRACTS)}."
                )
        return contracts

    def deploying(self, contract_names: Optional[typing.Iterable[str]] = None) -> List[str]:
        """Contracts to deploy, restricted to `contract_names` when given."""
        to_deploy = self.contracts_to_deploy
        if contract_names is None:
            return to_deploy
        return [name for name in to_deploy if name in contract_names]

    def should_deploy(self, contract_name: str) -> bool:
        return contract_name in self.contracts_to_deploy

    def existing_address(self, contract_name: str) -> Optional[ChecksumAddress]:
        """Returns the configured address of an already deployed contract, if any."""
        return self.optional_address(EXISTING_ADDRESS_KEYS[contract_name])

    @property
    def chain_id(self) -> Optional[int]:
        if "CHAIN_ID" not in self:
            return None
        return self.integer("CHAIN_ID")

    @property
    def exchange_type(self) -> ExchangeType:
        if "EXCHANGE_TYPE" not in self:
            return DEFAULT_EXCHANGE_TYPE
        value = self.integer("EXCHANGE_TYPE")
        try:
            return ExchangeType(value)
        except ValueError:
            raise DeploymentConfigError(f"EXCHANGE_TYPE {value} is not a known exchange type.")

    @property
    def max_swap_slippage(self) -> int:
        if "MAX_SWAP_SLIPPAGE" not in self:
            return DEFAULT_MAX_SWAP_SLIPPAGE
        return _check_bps("MAX_SWAP_SLIPPAGE", self.integer("MAX_SWAP_SLIPPAGE"))

    def fees(self) -> typing.Tuple[List[ChecksumAddress], List[int]]:
        recipients = self.addresses("FEE_RECIPIENTS")
        fee_bps = [_check_bps("FEE_BPS", bps) for bps in self.integers("FEE_BPS")]
        if len(recipients) != len(fee_bps):
            raise DeploymentConfigError(
                f"FEE_RECIPIENTS ({len(recipients)}) and FEE_BPS ({len(fee_bps)}) "
                "must have the same length."
            )
        if sum(fee_bps) > BPS_DENOMINATOR:
            raise DeploymentConfigError(
                f"FEE_BPS add up to {sum(fee_bps)}, more than {BPS_DENOMINATOR}."
            )
        return recipients, fee_bps

    def multisig_roles(self) -> List[ChecksumAddress]:
        roles = self.addresses("MULTISIG_ROLES")
        if len(roles) != 3:
            raise DeploymentConfigError(
                "MULTISIG_ROLES must list exactly 3 addresses (super admin, admin, guardian)."
            )
        return roles

    def validate(self, contract_names: Optional[typing.Iterable[str]] = None) -> None:
        """
        Checks every field required to deploy or attach the requested contracts,
        and that the contracts they are wired to will be available.
        Only contracts in `contract_names` are considered when given.
        """
        print("Validating deployment config...")
        considered = list(EXISTING_ADDRESS_KEYS if contract_names is None else contract_names)
        to_deploy = self.deploying(contract_names)

        # everything else is attached to its configured address, if any
        for contract_name in considered:
            if contract_name not in to_deploy:
                self.existing_address(contract_name)
        if OPTIONS_COMPOUNDER in considered and OPTIONS_COMPOUNDER not in to_deploy:
            if "STRATS" in self:
                self.addresses("STRATS")

        for contract_name in to_deploy:
            for dependency in DEPENDENCIES.get(contract_name, []):
                if dependency in to_deploy or self.existing_address(dependency):
                    continue
                raise DeploymentConfigError(
                    f"{contract_name} requires {dependency}, which is neither deployed "
                    f"nor configured as {EXISTING_ADDRESS_KEYS[dependency]}."
                )

        for contract_name in to_deploy:
            for key in REQUIRED_FIELDS[contract_name]:
                self._require(key)

        if SWAPPER in to_deploy:
            self.addresses("STRATEGISTS")
            self.multisig_roles()
        if ORACLE in to_deploy:
            self.address("ORACLE_SOURCE")
            self.address("OT_UNDERLYING_TOKEN")
            self.address("OWNER")
            self.integer("ORACLE_SECS")
            self.integer("ORACLE_MIN_PRICE")
        if OPTIONS_TOKEN in to_deploy:
            self.address("OT_TOKEN_ADMIN")
        if DISCOUNT_EXERCISE in to_deploy:
            for key in ("OWNER", "OT_PAYMENT_TOKEN", "OT_UNDERLYING_TOKEN", "VELO_ROUTER"):
                self.address(key)
            self.integer("MULTIPLIER")
            _check_bps("INSTANT_EXIT_FEE", self.integer("INSTANT_EXIT_FEE"))
            self.integer("MIN_AMOUNT_TO_TRIGGER_SWAP")
            self.fees()
        if OPTIONS_COMPOUNDER in to_deploy:
            self.address("ADDRESS_PROVIDER")
            self.address("VELO_ROUTER")
            self.addresses("STRATS")

        # swap props are needed by both the exercise and the compounder
        if DISCOUNT_EXERCISE in to_deploy or OPTIONS_COMPOUNDER in to_deploy:
            _ = self.exchange_type
            _ = self.max_swap_slippage


def load_config(filepath: Path) -> DeploymentConfig:
    return DeploymentConfig.from_file(filepath)
