ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
MAX_UINT256 = 2 ** 256 - 1

DEFAULT_RPC_URL = "http://127.0.0.1:8545"
DEFAULT_HERMES_URL = "https://hermes.pyth.network"

# account ids are "1337" followed by a random suffix below ACCOUNT_ID_SUFFIX_RANGE
ACCOUNT_ID_PREFIX = "1337"
ACCOUNT_ID_SUFFIX_RANGE = 1000

ETH_DECIMALS = 18
D18 = 18

# oracle attestations older than this are rejected by price dependent calls
PRICE_FRESHNESS_WINDOW = 3600
PYTH_UPDATE_TYPE = 1
PYTH_STALENESS_TOLERANCE = 60
PYTH_UPDATE_FEE = 1

# gas money given to impersonated actors
IMPERSONATED_ETH_BALANCE = 100

DEFAULT_LEVERAGE = 10 ** 18

READ_RETRY_ATTEMPTS = 3
READ_RETRY_WAIT_MAX = 4.0


class Whale:
    USDC = "0xcdac0d6c6c59727a65f871236188350531885c43"
    SNX = "0xcc79bfa7a3212d94390c358e88afcd39294549ca"


class Contract:
    CORE_PROXY = "CoreProxy"
    SPOT_MARKET_PROXY = "SpotMarketProxy"
    PERPS_MARKET_PROXY = "PerpsMarketProxy"
    PYTH_WRAPPER = "PythERC7412Wrapper"
    SNX_DISTRIBUTOR = "RewardsDistributorForSpartanCouncilPoolSNX"


# collateral symbol => deployment manifest name
TOKEN_CONTRACTS = {
    "USDC": "USDCToken",
    "sUSDC": "SynthUSDCToken",
    "SNX": "SNXToken",
}
