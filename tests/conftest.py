from types import SimpleNamespace

import pytest

from options_deployment import infra
from options_deployment.config import DeploymentConfig
from options_deployment.utils import get_oz_dependency

# Common constants
PAYMENT_TOKEN = "0x4200000000000000000000000000000000000006"
UNDERLYING_TOKEN = "0x95177295a394f2b9b04545fff58f4af0673e839d"
OWNER = "0xf29da3595351dbfd0d647857c46f8d63fc2e68c5"
VELO_ROUTER = "0x3a63171dd9bebf4d07bc782fecc7eb0b890c2a45"
ADDRESS_PROVIDER = "0xedc83309549e36f3c7fd8c2c5c54b4c8e5fa00fc"
ORACLE_SOURCE = "0x17fe9d0b6c2e8ffa5ee0a5e58c6e6e8ab1aea1a9"
SUPER_ADMIN = "0x159cc26bcab2851835e963d0c24e1956b2279ca9"
GUARDIAN = "0x60bc5e0440c867eeb4cbce84bb1123fad2b262b1"
STRATEGIST = "0x1e71aee6081f62053123140aacc7a06021d77348"
FEE_RECIPIENT_1 = "0xc8fe43d6f2b0e0c6d6c4f0f1c1c3a7a52b5d6d90"
FEE_RECIPIENT_2 = "0x4c3490df15edfa178333445ce568ec6d99b5d71c"
STRAT_1 = "0xe3b5c7d2bd0a8ff3d9c0ac0e4f0c0c6d2a9bf1e2"
STRAT_2 = "0xb26cd6633db6b0c9ae919049c1437271ae496d15"

EXISTING_SWAPPER = "0x63d170618a8ed1987f3ca6391b5e2f6a4554cf53"
EXISTING_OPTIONS_TOKEN = "0x00000000000000000000000000000000000000a2"


class FakeMethod:
    def __init__(self, contract, name):
        self.contract = contract
        self.name = name


class FakeInstance:
    def __init__(self, contract_name, address):
        self.contract_type = SimpleNamespace(name=contract_name)
        self.address = address

    def __getattr__(self, name):
        return FakeMethod(self, name)


class FakeContainer:
    def __init__(self, contract_name):
        self.contract_type = SimpleNamespace(name=contract_name)


class FakeDeployer:
    """Records deployments and transactions instead of sending them."""

    def __init__(self):
        self.calls = list()
        self.transactions = list()
        self._nonce = 0

    def _new_instance(self, container):
        self._nonce += 1
        return FakeInstance(container.contract_type.name, f"0x{self._nonce:040x}")

    def deploy(self, container, *args):
        self.calls.append(("deploy", container.contract_type.name, list(args)))
        return self._new_instance(container)

    def deploy_proxy(self, container, *initializer_args, initializer="initialize"):
        self.calls.append(("deploy_proxy", container.contract_type.name, list(initializer_args)))
        return self._new_instance(container)

    def prepare_upgrade(self, container):
        self.calls.append(("prepare_upgrade", container.contract_type.name, []))
        return self._new_instance(container)

    def attach(self, container, address):
        self.calls.append(("attach", container.contract_type.name, [address]))
        if not address:
            return None
        return FakeInstance(container.contract_type.name, address)

    def transact(self, method, *args):
        self.transactions.append((method.contract.contract_type.name, method.name, list(args)))

    def upgrade_to(self, proxy, implementation_address):
        self.transact(FakeMethod(proxy, "upgradeTo"), implementation_address)

    def wrap(self, contract_name, address):
        return FakeInstance(contract_name, address)

    def deployed_names(self):
        return [name for kind, name, _ in self.calls if kind != "attach"]


# Fixtures
@pytest.fixture(scope="session")
def oz_dependency():
    return get_oz_dependency()


@pytest.fixture
def creator(accounts):
    return accounts[0]


@pytest.fixture
def config_data():
    return {
        "CONTRACTS_TO_DEPLOY": [
            "Swapper",
            "ThenaOracle",
            "OptionsToken",
            "DiscountExercise",
            "OptionsCompounder",
        ],
        "OT_NAME": "TEST",
        "OT_SYMBOL": "TEST",
        "OT_PAYMENT_TOKEN": PAYMENT_TOKEN,
        "OT_UNDERLYING_TOKEN": UNDERLYING_TOKEN,
        "OT_TOKEN_ADMIN": OWNER,
        "OWNER": OWNER,
        "VELO_ROUTER": VELO_ROUTER,
        "ADDRESS_PROVIDER": ADDRESS_PROVIDER,
        "ORACLE_SOURCE": ORACLE_SOURCE,
        "ORACLE_SECS": 1800,
        "ORACLE_MIN_PRICE": 10**13,
        "MULTIPLIER": 5000,
        "INSTANT_EXIT_FEE": 1000,
        "MIN_AMOUNT_TO_TRIGGER_SWAP": 10**15,
        "FEE_RECIPIENTS": f"{FEE_RECIPIENT_1},{FEE_RECIPIENT_2}",
        "FEE_BPS": "7000,3000",
        "STRATEGISTS": [STRATEGIST],
        "MULTISIG_ROLES": [SUPER_ADMIN, SUPER_ADMIN, GUARDIAN],
        "STRATS": f"{STRAT_1},{STRAT_2}",
        "SWAPPER": EXISTING_SWAPPER,
    }


@pytest.fixture
def config(config_data):
    return DeploymentConfig(config_data)


@pytest.fixture
def fake_deployer():
    return FakeDeployer()


@pytest.fixture
def fake_containers(monkeypatch):
    monkeypatch.setattr(infra, "get_contract_container", FakeContainer)


@pytest.fixture
def options_token_proxy():
    return FakeInstance("OptionsToken", EXISTING_OPTIONS_TOKEN)


@pytest.fixture
def options_token_v2_container():
    return FakeContainer("OptionsTokenV2")
