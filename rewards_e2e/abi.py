def _fn(name, inputs, outputs=(), mutability="nonpayable"):
    return {
        "type": "function",
        "name": name,
        "stateMutability": mutability,
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": [_param(o) for o in outputs],
    }


def _param(spec):
    if isinstance(spec, tuple):
        name, type_ = spec
        return {"name": name, "type": type_}
    # struct: (name, [components])
    name, components = spec["name"], spec["components"]
    return {"name": name, "type": "tuple", "components": [_param(c) for c in components]}


def _view(name, inputs, outputs):
    return _fn(name, inputs, outputs, mutability="view")


ERC20 = [
    _view("balanceOf", [("account", "address")], [("", "uint256")]),
    _view("allowance", [("owner", "address"), ("spender", "address")], [("", "uint256")]),
    _view("decimals", [], [("", "uint8")]),
    _fn("approve", [("spender", "address"), ("amount", "uint256")], [("", "bool")]),
    _fn("transfer", [("to", "address"), ("amount", "uint256")], [("", "bool")]),
]

COLLATERAL_CONFIGURATION = {
    "name": "config",
    "components": [
        ("depositingEnabled", "bool"),
        ("issuanceRatioD18", "uint256"),
        ("liquidationRatioD18", "uint256"),
        ("liquidationRewardD18", "uint256"),
        ("oracleNodeId", "bytes32"),
        ("tokenAddress", "address"),
        ("minDelegationD18", "uint256"),
    ],
}

CORE_PROXY = [
    _view("owner", [], [("", "address")]),
    _view("getAccountOwner", [("accountId", "uint128")], [("", "address")]),
    _view(
        "getAccountCollateral",
        [("accountId", "uint128"), ("collateralType", "address")],
        [("totalDeposited", "uint256"), ("totalAssigned", "uint256"), ("totalLocked", "uint256")],
    ),
    _view("getPoolOwner", [("poolId", "uint128")], [("", "address")]),
    _view("getCollateralConfiguration", [("collateralType", "address")], [COLLATERAL_CONFIGURATION]),
    _fn("createAccount", [("requestedAccountId", "uint128")]),
    _fn("deposit", [("accountId", "uint128"), ("collateralType", "address"), ("tokenAmount", "uint256")]),
    _fn(
        "delegateCollateral",
        [
            ("accountId", "uint128"),
            ("poolId", "uint128"),
            ("collateralType", "address"),
            ("newCollateralAmountD18", "uint256"),
            ("leverage", "uint256"),
        ],
    ),
    _fn(
        "configureMaximumMarketCollateral",
        [("marketId", "uint128"), ("collateralType", "address"), ("amount", "uint256")],
    ),
    # not a view on chain, only ever eth_call'ed
    _fn(
        "getAvailableRewards",
        [("accountId", "uint128"), ("poolId", "uint128"), ("collateralType", "address"), ("distributor", "address")],
        [("rewardAmount", "uint256")],
    ),
    _fn(
        "claimRewards",
        [("accountId", "uint128"), ("poolId", "uint128"), ("collateralType", "address"), ("distributor", "address")],
        [("amountClaimedD18", "uint256")],
    ),
]

ORDER_FEES = {
    "name": "fees",
    "components": [
        ("fixedFees", "uint256"),
        ("utilizationFees", "uint256"),
        ("skewFees", "int256"),
        ("wrapperFees", "int256"),
    ],
}

SPOT_MARKET_PROXY = [
    _view("getMarketOwner", [("synthMarketId", "uint128")], [("", "address")]),
    _fn(
        "setWrapper",
        [("marketId", "uint128"), ("wrapCollateralType", "address"), ("maxWrappableAmount", "uint256")],
    ),
    _fn(
        "wrap",
        [("marketId", "uint128"), ("wrapAmount", "uint256"), ("minAmountReceived", "uint256")],
        [("amountToMint", "uint256"), ORDER_FEES],
    ),
]

SETTLEMENT_STRATEGY = {
    "name": "settlementStrategy",
    "components": [
        ("strategyType", "uint8"),
        ("settlementDelay", "uint256"),
        ("settlementWindowDuration", "uint256"),
        ("priceVerificationContract", "address"),
        ("feedId", "bytes32"),
        ("settlementReward", "uint256"),
        ("disabled", "bool"),
        ("commitPriceDelay", "uint256"),
    ],
}

PERPS_MARKET_PROXY = [
    _view(
        "getSettlementStrategy",
        [("marketId", "uint128"), ("strategyId", "uint256")],
        [SETTLEMENT_STRATEGY],
    ),
]

PYTH_ERC7412_WRAPPER = [
    _fn("fulfillOracleQuery", [("signedOffchainData", "bytes")], mutability="payable"),
]

REWARDS_DISTRIBUTOR = [
    _view("name", [], [("", "string")]),
    _view("poolId", [], [("", "uint128")]),
    _view("collateralType", [], [("", "address")]),
    _view("payoutToken", [], [("", "address")]),
    _view("precision", [], [("", "uint256")]),
    _view("token", [], [("", "address")]),
    _view("rewardManager", [], [("", "address")]),
    _view("shouldFailPayout", [], [("", "bool")]),
    _view("rewardsAmount", [], [("", "uint256")]),
    _fn(
        "distributeRewards",
        [
            ("poolId_", "uint128"),
            ("collateralType_", "address"),
            ("amount_", "uint256"),
            ("start_", "uint64"),
            ("duration_", "uint32"),
        ],
    ),
]

ABIS = {
    "ERC20": ERC20,
    "CoreProxy": CORE_PROXY,
    "SpotMarketProxy": SPOT_MARKET_PROXY,
    "PerpsMarketProxy": PERPS_MARKET_PROXY,
    "PythERC7412Wrapper": PYTH_ERC7412_WRAPPER,
    "RewardsDistributor": REWARDS_DISTRIBUTOR,
}
