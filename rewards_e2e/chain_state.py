import logging
from collections import namedtuple

from eth_utils import to_checksum_address
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from .amount import Amount
from .constants import Contract, D18, ETH_DECIMALS, READ_RETRY_ATTEMPTS, READ_RETRY_WAIT_MAX
from .errors import PostconditionMismatch, TransportError

logger = logging.getLogger(__name__)

CollateralPosition = namedtuple("CollateralPosition", ["total_deposited", "total_assigned", "total_locked"])

DistributorInfo = namedtuple("DistributorInfo", [
    "name", "pool_id", "collateral_type", "payout_token", "precision", "token",
    "reward_manager", "should_fail_payout",
])

CollateralConfig = namedtuple("CollateralConfig", [
    "depositing_enabled", "issuance_ratio", "liquidation_ratio", "liquidation_reward",
    "oracle_node_id", "token_address", "min_delegation",
])


def read_retry(fn):
    # only transport failures are retried, reads have no side effects
    return retry(
        retry=retry_if_exception_type(TransportError),
        stop=stop_after_attempt(READ_RETRY_ATTEMPTS),
        wait=wait_exponential(multiplier=0.2, max=READ_RETRY_WAIT_MAX) + wait_random(0, 0.2),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )(fn)


def precision_to_decimals(precision):
    decimals = len(str(precision)) - 1
    assert precision == 10 ** decimals, f"precision {precision} is not a power of ten"
    return decimals


class ChainState:
    """Read-only view of the forked chain. Nothing is cached, every call hits the node."""

    def __init__(self, client, deployment):
        self.client = client
        self.deployment = deployment

    @property
    def core_proxy(self):
        return self.deployment.address(Contract.CORE_PROXY)

    @property
    def spot_market_proxy(self):
        return self.deployment.address(Contract.SPOT_MARKET_PROXY)

    @property
    def perps_market_proxy(self):
        return self.deployment.address(Contract.PERPS_MARKET_PROXY)

    def get_token_address(self, symbol):
        return self.deployment.token_address(symbol)

    @read_retry
    def get_block_timestamp(self):
        return self.client.get_block_timestamp()

    @read_retry
    def get_eth_balance(self, address):
        return Amount(self.client.get_balance(address), ETH_DECIMALS)

    @read_retry
    def get_token_decimals(self, token):
        return self.client.call(token, "ERC20", "decimals")

    @read_retry
    def get_token_balance(self, address, token):
        decimals = self.client.call(token, "ERC20", "decimals")
        return Amount(self.client.call(token, "ERC20", "balanceOf", [address]), decimals)

    def get_collateral_balance(self, address, symbol):
        return self.get_token_balance(address, self.get_token_address(symbol))

    @read_retry
    def get_allowance(self, owner, token, spender):
        decimals = self.client.call(token, "ERC20", "decimals")
        return Amount(self.client.call(token, "ERC20", "allowance", [owner, spender]), decimals)

    def is_collateral_approved(self, address, symbol, spender):
        return not self.get_allowance(address, self.get_token_address(symbol), spender).is_zero()

    @read_retry
    def get_account_owner(self, account_id):
        return to_checksum_address(self.client.call(self.core_proxy, "CoreProxy", "getAccountOwner", [account_id]))

    @read_retry
    def get_account_collateral(self, account_id, symbol):
        collateral_type = self.get_token_address(symbol)
        deposited, assigned, locked = self.client.call(
            self.core_proxy, "CoreProxy", "getAccountCollateral", [account_id, collateral_type]
        )
        position = CollateralPosition(Amount(deposited, D18), Amount(assigned, D18), Amount(locked, D18))

        if position.total_assigned > position.total_deposited:
            raise PostconditionMismatch(
                f"{account_id}_{symbol}_total_assigned", f"<= {position.total_deposited}", position.total_assigned
            )
        if position.total_locked > position.total_assigned:
            raise PostconditionMismatch(
                f"{account_id}_{symbol}_total_locked", f"<= {position.total_assigned}", position.total_locked
            )
        return position

    @read_retry
    def get_collateral_config(self, symbol):
        data = self.client.call(
            self.core_proxy, "CoreProxy", "getCollateralConfiguration", [self.get_token_address(symbol)]
        )
        assert len(data) == 7
        return CollateralConfig(
            data[0],
            Amount(data[1], D18),
            Amount(data[2], D18),
            Amount(data[3], D18),
            data[4],
            to_checksum_address(data[5]),
            Amount(data[6], D18),
        )

    @read_retry
    def get_core_owner(self):
        return to_checksum_address(self.client.call(self.core_proxy, "CoreProxy", "owner"))

    @read_retry
    def get_pool_owner(self, pool_id):
        return to_checksum_address(self.client.call(self.core_proxy, "CoreProxy", "getPoolOwner", [pool_id]))

    @read_retry
    def get_market_owner(self, market_id):
        return to_checksum_address(
            self.client.call(self.spot_market_proxy, "SpotMarketProxy", "getMarketOwner", [market_id])
        )

    @read_retry
    def get_settlement_strategy(self, market_id, strategy_id):
        data = self.client.call(
            self.perps_market_proxy, "PerpsMarketProxy", "getSettlementStrategy", [market_id, strategy_id]
        )
        return {
            "strategy_type": data[0],
            "price_verification_contract": to_checksum_address(data[3]),
            "feed_id": data[4],
            "disabled": data[6],
        }

    @read_retry
    def get_distributor_info(self, distributor):
        def read(fn_name):
            return self.client.call(distributor, "RewardsDistributor", fn_name)

        return DistributorInfo(
            name=read("name"),
            pool_id=read("poolId"),
            collateral_type=to_checksum_address(read("collateralType")),
            payout_token=to_checksum_address(read("payoutToken")),
            precision=read("precision"),
            token=to_checksum_address(read("token")),
            reward_manager=to_checksum_address(read("rewardManager")),
            should_fail_payout=read("shouldFailPayout"),
        )

    @read_retry
    def get_distributor_rewards_amount(self, distributor):
        precision = self.client.call(distributor, "RewardsDistributor", "precision")
        rewards_amount = self.client.call(distributor, "RewardsDistributor", "rewardsAmount")
        return Amount(rewards_amount, precision_to_decimals(precision))

    @read_retry
    def get_available_rewards(self, account_id, pool_id, collateral_type, distributor):
        amount = self.client.call(
            self.core_proxy, "CoreProxy", "getAvailableRewards", [account_id, pool_id, collateral_type, distributor]
        )
        return Amount(amount, D18)
