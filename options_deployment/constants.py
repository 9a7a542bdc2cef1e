from enum import IntEnum
from pathlib import Path

import options_deployment

#
# Filesystem
#

DEPLOYMENT_DIR = Path(options_deployment.__file__).parent
CONFIGS_DIR = DEPLOYMENT_DIR / "configs"
ARTIFACTS_DIR = DEPLOYMENT_DIR / "artifacts"
DEFAULT_CONFIG_FILEPATH = CONFIGS_DIR / "config.json"

#
# Networks
#

OPTIMISM = "optimism"
BSC = "bsc"
MODE = "mode"
SCROLL = "scroll"

SUPPORTED_CHAINS = {
    OPTIMISM: 10,
    BSC: 56,
    MODE: 34443,
    SCROLL: 534352,
}

#
# Contracts
#

SWAPPER = "ReaperSwapper"
ORACLE = "ThenaOracle"
OPTIONS_TOKEN = "OptionsToken"
DISCOUNT_EXERCISE = "DiscountExercise"
OPTIONS_COMPOUNDER = "OptionsCompounder"

# configuration names accepted in CONTRACTS_TO_DEPLOY -> contract type names
DEPLOYABLE_CONTRACTS = {
    "Swapper": SWAPPER,
    "ThenaOracle": ORACLE,
    "OptionsToken": OPTIONS_TOKEN,
    "DiscountExercise": DISCOUNT_EXERCISE,
    "OptionsCompounder": OPTIONS_COMPOUNDER,
}

# contract type name -> config key holding the address of an existing deployment
EXISTING_ADDRESS_KEYS = {
    SWAPPER: "SWAPPER",
    ORACLE: "ORACLE",
    OPTIONS_TOKEN: "OPTIONS_TOKEN",
    DISCOUNT_EXERCISE: "DISCOUNT_EXERCISE",
    OPTIONS_COMPOUNDER: "OPTIONS_COMPOUNDER",
}

# contracts handled by each deployment sequence
SWAPPER_INFRA_CONTRACTS = (SWAPPER,)
OPTIONS_TOKEN_INFRA_CONTRACTS = (ORACLE, OPTIONS_TOKEN, DISCOUNT_EXERCISE, OPTIONS_COMPOUNDER)

OZ_DEPENDENCY_NAME = "openzeppelin"
OZ_DEPENDENCY_VERSION = "4.9.3"
UUPS_PROXY = "ERC1967Proxy"

#
# Options token parameters
#

BPS_DENOMINATOR = 10_000
DEFAULT_MAX_SWAP_SLIPPAGE = 500  # 5%
UPGRADE_COOLDOWN = 48 * 60 * 60  # seconds


class ExchangeType(IntEnum):
    """Exchange types as defined in the ReaperSwapper contract"""

    UNI_V2 = 0
    BAL = 1
    VELO_SOLID = 2
    UNI_V3 = 3


DEFAULT_EXCHANGE_TYPE = ExchangeType.VELO_SOLID

# MULTISIG_ROLES ordering
SUPER_ADMIN_INDEX = 0
GUARDIAN_INDEX = 2
