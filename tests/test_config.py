import json

import pytest
import yaml
from eth_utils import to_checksum_address

from options_deployment.config import DeploymentConfig, DeploymentConfigError, load_config
from options_deployment.constants import (
    DEFAULT_MAX_SWAP_SLIPPAGE,
    DISCOUNT_EXERCISE,
    OPTIONS_COMPOUNDER,
    OPTIONS_TOKEN,
    OPTIONS_TOKEN_INFRA_CONTRACTS,
    ORACLE,
    SWAPPER,
    ExchangeType,
)

FEE_RECIPIENT_1 = "0xc8fe43d6f2b0e0c6d6c4f0f1c1c3a7a52b5d6d90"
FEE_RECIPIENT_2 = "0x4c3490df15edfa178333445ce568ec6d99b5d71c"


def test_contracts_to_deploy_maps_config_names(config):
    assert config.contracts_to_deploy == [
        SWAPPER,
        ORACLE,
        OPTIONS_TOKEN,
        DISCOUNT_EXERCISE,
        OPTIONS_COMPOUNDER,
    ]
    assert config.should_deploy(SWAPPER)
    assert config.should_deploy(OPTIONS_COMPOUNDER)


def test_unknown_contract_to_deploy(config_data):
    config_data["CONTRACTS_TO_DEPLOY"] = ["OptionsToken", "Vault"]
    config = DeploymentConfig(config_data)
    with pytest.raises(DeploymentConfigError, match="Unknown contract 'Vault'"):
        _ = config.contracts_to_deploy


def test_nothing_to_deploy(config_data):
    del config_data["CONTRACTS_TO_DEPLOY"]
    config = DeploymentConfig(config_data)
    assert config.contracts_to_deploy == []
    assert not config.should_deploy(OPTIONS_TOKEN)
    config.validate()


def test_list_fields_accept_lists_and_comma_separated_strings(config_data):
    expected = [to_checksum_address(FEE_RECIPIENT_1), to_checksum_address(FEE_RECIPIENT_2)]

    config = DeploymentConfig(config_data)
    assert config.addresses("FEE_RECIPIENTS") == expected
    assert config.integers("FEE_BPS") == [7000, 3000]

    config_data["FEE_RECIPIENTS"] = [FEE_RECIPIENT_1, FEE_RECIPIENT_2]
    config_data["FEE_BPS"] = [7000, 3000]
    config = DeploymentConfig(config_data)
    assert config.addresses("FEE_RECIPIENTS") == expected
    assert config.integers("FEE_BPS") == [7000, 3000]

    # single value without separator
    config_data["STRATS"] = FEE_RECIPIENT_1
    config = DeploymentConfig(config_data)
    assert config.addresses("STRATS") == [to_checksum_address(FEE_RECIPIENT_1)]


def test_addresses_are_checksummed(config):
    address = config.address("OWNER")
    assert address == to_checksum_address(address)


def test_invalid_values(config_data):
    config_data["OWNER"] = "0x1234"
    config_data["ORACLE_SECS"] = "thirty minutes"
    config_data["MULTIPLIER"] = True
    config = DeploymentConfig(config_data)

    with pytest.raises(DeploymentConfigError, match="OWNER has an invalid address"):
        config.address("OWNER")
    with pytest.raises(DeploymentConfigError, match="ORACLE_SECS must be an integer"):
        config.integer("ORACLE_SECS")
    with pytest.raises(DeploymentConfigError, match="MULTIPLIER must be an integer"):
        config.integer("MULTIPLIER")


def test_missing_and_empty_values(config_data):
    config_data["ORACLE"] = ""
    config = DeploymentConfig(config_data)

    assert "ORACLE" not in config
    assert "OPTIONS_COMPOUNDER" not in config
    assert config.existing_address(ORACLE) is None
    assert config.existing_address(SWAPPER) == to_checksum_address(config_data["SWAPPER"])
    with pytest.raises(DeploymentConfigError, match="ADDRESS is not set"):
        config.address("ADDRESS")


def test_fees(config):
    recipients, fee_bps = config.fees()
    assert len(recipients) == len(fee_bps) == 2
    assert sum(fee_bps) == 10_000


def test_fees_length_mismatch(config_data):
    config_data["FEE_BPS"] = "10000"
    with pytest.raises(DeploymentConfigError, match="must have the same length"):
        DeploymentConfig(config_data).fees()


def test_fees_out_of_range(config_data):
    config_data["FEE_BPS"] = "10001,0"
    with pytest.raises(DeploymentConfigError, match="between 0 and 10000"):
        DeploymentConfig(config_data).fees()

    config_data["FEE_BPS"] = "7000,7000"
    with pytest.raises(DeploymentConfigError, match="add up to 14000"):
        DeploymentConfig(config_data).fees()


def test_swap_defaults(config):
    assert config.exchange_type == ExchangeType.VELO_SOLID
    assert config.max_swap_slippage == DEFAULT_MAX_SWAP_SLIPPAGE


def test_swap_overrides(config_data):
    config_data["EXCHANGE_TYPE"] = 0
    config_data["MAX_SWAP_SLIPPAGE"] = "100"
    config = DeploymentConfig(config_data)
    assert config.exchange_type == ExchangeType.UNI_V2
    assert config.max_swap_slippage == 100

    config_data["EXCHANGE_TYPE"] = 7
    with pytest.raises(DeploymentConfigError, match="not a known exchange type"):
        _ = DeploymentConfig(config_data).exchange_type


def test_multisig_roles(config_data):
    config_data["MULTISIG_ROLES"] = config_data["MULTISIG_ROLES"][:2]
    with pytest.raises(DeploymentConfigError, match="exactly 3 addresses"):
        DeploymentConfig(config_data).multisig_roles()


def test_validate(config):
    config.validate()


def test_validate_only_checks_active_branches(config_data):
    del config_data["ADDRESS_PROVIDER"]
    del config_data["STRATS"]

    config = DeploymentConfig(config_data)
    with pytest.raises(DeploymentConfigError, match="ADDRESS_PROVIDER is not set"):
        config.validate()

    # not required when the compounder is attached instead of deployed
    config_data["CONTRACTS_TO_DEPLOY"] = ["ThenaOracle", "OptionsToken", "DiscountExercise"]
    DeploymentConfig(config_data).validate()

    # or when validating a subset of contracts
    config.validate(contract_names=[SWAPPER])


def test_validate_rejects_malformed_active_fields(config_data):
    config_data["INSTANT_EXIT_FEE"] = 20_000
    with pytest.raises(DeploymentConfigError, match="INSTANT_EXIT_FEE"):
        DeploymentConfig(config_data).validate()


def test_load_json_and_yaml(tmp_path, config_data):
    json_filepath = tmp_path / "config.json"
    json_filepath.write_text(json.dumps(config_data))
    yaml_filepath = tmp_path / "config.yml"
    yaml_filepath.write_text(yaml.safe_dump(config_data))

    for filepath in (json_filepath, yaml_filepath):
        config = load_config(filepath)
        assert config.path == filepath
        assert config.string("OT_NAME") == "TEST"
        assert config.contracts_to_deploy[0] == SWAPPER


def test_config_must_be_a_mapping(tmp_path):
    filepath = tmp_path / "config.json"
    filepath.write_text(json.dumps(["OptionsToken"]))
    with pytest.raises(DeploymentConfigError, match="must be a mapping"):
        load_config(filepath)


def test_fractional_integers_are_rejected(config_data):
    config_data["MULTIPLIER"] = 5000.9
    config_data["FEE_BPS"] = [6999.5, 3000.5]
    config_data["MIN_AMOUNT_TO_TRIGGER_SWAP"] = 1e15
    config = DeploymentConfig(config_data)

    with pytest.raises(DeploymentConfigError, match="MULTIPLIER must be an integer"):
        config.integer("MULTIPLIER")
    with pytest.raises(DeploymentConfigError, match="FEE_BPS must be an integer"):
        config.fees()
    with pytest.raises(DeploymentConfigError, match="MULTIPLIER"):
        config.validate()

    # integral floats, e.g. JSON exponent notation, are accepted
    assert config.integer("MIN_AMOUNT_TO_TRIGGER_SWAP") == 10**15
    assert isinstance(config.integer("MIN_AMOUNT_TO_TRIGGER_SWAP"), int)


def test_validate_checks_attach_addresses(config_data):
    config_data["CONTRACTS_TO_DEPLOY"] = ["ThenaOracle"]
    config_data["OPTIONS_TOKEN"] = "0x1234"
    config = DeploymentConfig(config_data)
    with pytest.raises(DeploymentConfigError, match="OPTIONS_TOKEN has an invalid address"):
        config.validate(contract_names=OPTIONS_TOKEN_INFRA_CONTRACTS)

    # not checked when deployed instead of attached
    config_data["CONTRACTS_TO_DEPLOY"] = ["ThenaOracle", "OptionsToken"]
    DeploymentConfig(config_data).validate(contract_names=OPTIONS_TOKEN_INFRA_CONTRACTS)


def test_validate_checks_strats_of_attached_compounder(config_data):
    config_data["CONTRACTS_TO_DEPLOY"] = []
    config_data["STRATS"] = "0xnot-an-address"
    with pytest.raises(DeploymentConfigError, match="STRATS has an invalid address"):
        DeploymentConfig(config_data).validate()

    # STRATS is optional when attaching
    del config_data["STRATS"]
    DeploymentConfig(config_data).validate()


def test_validate_requires_dependencies_to_be_available(config_data):
    # the oracle is neither deployed nor configured
    config_data["CONTRACTS_TO_DEPLOY"] = ["OptionsToken", "DiscountExercise"]
    config = DeploymentConfig(config_data)
    with pytest.raises(DeploymentConfigError, match="DiscountExercise requires ThenaOracle"):
        config.validate(contract_names=OPTIONS_TOKEN_INFRA_CONTRACTS)

    config_data["ORACLE"] = "0x00000000000000000000000000000000000000a1"
    DeploymentConfig(config_data).validate(contract_names=OPTIONS_TOKEN_INFRA_CONTRACTS)


def test_validate_requires_configured_swapper_for_infra(config_data):
    del config_data["SWAPPER"]
    config = DeploymentConfig(config_data)

    # the infra sequence never deploys the swapper itself
    with pytest.raises(DeploymentConfigError, match="DiscountExercise requires ReaperSwapper"):
        config.validate(contract_names=OPTIONS_TOKEN_INFRA_CONTRACTS)


def test_validate_ignores_swapper_fields_for_infra(config_data):
    del config_data["STRATEGISTS"]
    del config_data["MULTISIG_ROLES"]
    config = DeploymentConfig(config_data)

    config.validate(contract_names=OPTIONS_TOKEN_INFRA_CONTRACTS)
    assert config.deploying(OPTIONS_TOKEN_INFRA_CONTRACTS) == [
        ORACLE,
        OPTIONS_TOKEN,
        DISCOUNT_EXERCISE,
        OPTIONS_COMPOUNDER,
    ]
    with pytest.raises(DeploymentConfigError, match="STRATEGISTS is not set"):
        config.validate()
