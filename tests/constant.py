from rewards_e2e.constants import Whale


class Addr:
    CORE_PROXY = "0x32c222a9a159782afd7529c87fa34b96ca72c696"
    SPOT_MARKET_PROXY = "0x18141523403e2595d31b22604acb8fc06a4caa61"
    PERPS_MARKET_PROXY = "0x0a2af931effd34b81ebcc57e3d3c9b1e1de1c9ce"
    PYTH_WRAPPER = "0x4f7a5f1d7d4a6efc6c2b3e2f6be19ca5ce0d4ed2"
    SNX_DISTRIBUTOR = "0x45063dcd92f56138686810eacb1b510c941d6593"
    USDC = "0x833589fcd6edb6e08f4c7c32d4f71b54bda02913"
    SUSDC = "0xc74ea762cf06c9151ce074e6a569a5945b6302e7"
    SNX = "0x22e6966b799c4d5b13be962e1d117b56327fda66"


CONTRACTS = {
    "CoreProxy": Addr.CORE_PROXY,
    "SpotMarketProxy": Addr.SPOT_MARKET_PROXY,
    "PerpsMarketProxy": Addr.PERPS_MARKET_PROXY,
    "PythERC7412Wrapper": Addr.PYTH_WRAPPER,
    "RewardsDistributorForSpartanCouncilPoolSNX": Addr.SNX_DISTRIBUTOR,
    "USDCToken": Addr.USDC,
    "SynthUSDCToken": Addr.SUSDC,
    "SNXToken": Addr.SNX,
}

EXTRAS = {
    "synth_usdc_market_id": "1",
    "eth_pyth_settlement_strategy": "0",
    "btc_pyth_settlement_strategy": "0",
    "snx_pyth_settlement_strategy": "0",
    "sol_pyth_settlement_strategy": "0",
    "wif_pyth_settlement_strategy": "0",
    "w_pyth_settlement_strategy": "0",
}

PRICE_MARKETS = [
    [100, "eth_pyth_settlement_strategy"],
    [200, "btc_pyth_settlement_strategy"],
    [300, "snx_pyth_settlement_strategy"],
    [400, "sol_pyth_settlement_strategy"],
    [500, "wif_pyth_settlement_strategy"],
    [600, "w_pyth_settlement_strategy"],
]

# raw units each whale holds on the fake fork
WHALE_FUNDS = {
    ("USDCToken", Whale.USDC): 10_000_000 * 10 ** 6,
    ("SNXToken", Whale.SNX): 10_000_000 * 10 ** 18,
}

SYNTH_USDC_MARKET_ID = 1
POOL_ID = 1
