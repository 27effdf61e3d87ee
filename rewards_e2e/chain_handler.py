import logging
import time

from eth_abi import encode

from .amount import Amount
from .chain_client import sender_address
from .constants import (
    D18,
    DEFAULT_LEVERAGE,
    ETH_DECIMALS,
    IMPERSONATED_ETH_BALANCE,
    MAX_UINT256,
    PYTH_STALENESS_TOLERANCE,
    PYTH_UPDATE_FEE,
    PYTH_UPDATE_TYPE,
)
from .impersonation import Impersonation

logger = logging.getLogger(__name__)


def raw(amount, decimals):
    assert isinstance(amount, Amount), f"expected Amount, got {amount!r}"
    return amount.to_decimals(decimals).value


class ChainHandler:
    """State changing operations. Each call returns once its transaction is
    mined and raises MutationRejected if it reverted. Nothing here retries."""

    def __init__(self, client, state, price_source=None):
        self.client = client
        self.state = state
        self.price_source = price_source

    ################## balances #######################
    def set_eth_balance(self, address, amount):
        logger.info("Set ETH balance of %s to %s", sender_address(address), amount)
        self.client.set_balance(address, raw(amount, ETH_DECIMALS))

    def set_token_balance(self, wallet, token, amount, whale):
        """Top up (or drain) `wallet` to exactly `amount` of `token` using a whale."""
        current = self.state.get_token_balance(sender_address(wallet), token)
        decimals = current.decimals
        delta = raw(amount, decimals) - current.value
        if delta == 0:
            return

        if delta > 0:
            self.set_eth_balance(whale, Amount.of(IMPERSONATED_ETH_BALANCE, ETH_DECIMALS))
            with Impersonation(self.client, whale) as signer:
                self.client.transact(signer, token, "ERC20", "transfer", [sender_address(wallet), delta])
        else:
            # only keyed wallets can hand tokens back
            self.client.transact(wallet, token, "ERC20", "transfer", [sender_address(whale), -delta])

    def transfer_token(self, identity, token, to, amount):
        decimals = self.state.get_token_decimals(token)
        logger.info("Transfer %s of %s to %s", amount, token, to)
        return self.client.transact(identity, token, "ERC20", "transfer", [to, raw(amount, decimals)])

    def approve(self, identity, token, spender, amount=None):
        value = MAX_UINT256 if amount is None else raw(amount, self.state.get_token_decimals(token))
        return self.client.transact(identity, token, "ERC20", "approve", [spender, value])

    def approve_collateral(self, identity, symbol, spender, amount=None):
        return self.approve(identity, self.state.get_token_address(symbol), spender, amount)

    ################## accounts and collateral #######################
    def create_account(self, identity, account_id):
        logger.info("Create account %s for %s", account_id, sender_address(identity))
        return self.client.transact(identity, self.state.core_proxy, "CoreProxy", "createAccount", [account_id])

    def wrap_collateral(self, identity, market_id, symbol, amount, synth_symbol=None):
        """Wrap `amount` of `symbol` into its synth 1:1, returns the resulting synth balance."""
        if synth_symbol is None:
            synth_symbol = f"s{symbol}"
        token = self.state.get_token_address(symbol)
        synth = self.state.get_token_address(synth_symbol)
        wrap_amount = raw(amount, self.state.get_token_decimals(token))
        min_received = raw(amount, self.state.get_token_decimals(synth))

        self.client.transact(
            identity, self.state.spot_market_proxy, "SpotMarketProxy", "wrap", [market_id, wrap_amount, min_received]
        )
        return self.state.get_token_balance(sender_address(identity), synth)

    def deposit_collateral(self, identity, account_id, symbol, amount):
        token = self.state.get_token_address(symbol)
        return self.client.transact(
            identity,
            self.state.core_proxy,
            "CoreProxy",
            "deposit",
            [account_id, token, raw(amount, self.state.get_token_decimals(token))],
        )

    def delegate_collateral(self, identity, account_id, pool_id, symbol, amount, leverage=DEFAULT_LEVERAGE):
        return self.client.transact(
            identity,
            self.state.core_proxy,
            "CoreProxy",
            "delegateCollateral",
            [account_id, pool_id, self.state.get_token_address(symbol), raw(amount, D18), leverage],
        )

    ################## administrative overrides #######################
    def configure_maximum_market_collateral(self, market_id, symbol, amount):
        owner = self.state.get_core_owner()
        self.set_eth_balance(owner, Amount.of(IMPERSONATED_ETH_BALANCE, ETH_DECIMALS))
        with Impersonation(self.client, owner) as signer:
            return self.client.transact(
                signer,
                self.state.core_proxy,
                "CoreProxy",
                "configureMaximumMarketCollateral",
                [market_id, self.state.get_token_address(symbol), raw(amount, D18)],
            )

    def set_spot_wrapper(self, market_id, symbol, amount):
        owner = self.state.get_market_owner(market_id)
        self.set_eth_balance(owner, Amount.of(IMPERSONATED_ETH_BALANCE, ETH_DECIMALS))
        with Impersonation(self.client, owner) as signer:
            return self.client.transact(
                signer,
                self.state.spot_market_proxy,
                "SpotMarketProxy",
                "setWrapper",
                [market_id, self.state.get_token_address(symbol), raw(amount, D18)],
            )

    ################## oracle #######################
    def update_price(self, identity, market_id, settlement_strategy_id):
        """Push a fresh Pyth attestation for `market_id`, returns the chain time it landed at."""
        assert self.price_source is not None, "no price source configured"

        strategy = self.state.get_settlement_strategy(market_id, settlement_strategy_id)
        feed_id = strategy["feed_id"]
        update_data = self.price_source.get_price_update(feed_id)
        signed_offchain_data = encode(
            ["uint8", "uint64", "bytes32[]", "bytes[]"],
            [PYTH_UPDATE_TYPE, PYTH_STALENESS_TOLERANCE, [feed_id], [update_data]],
        )

        self.client.transact(
            identity,
            strategy["price_verification_contract"],
            "PythERC7412Wrapper",
            "fulfillOracleQuery",
            [signed_offchain_data],
            value=PYTH_UPDATE_FEE,
        )
        timestamp = self.state.get_block_timestamp()
        logger.info("Price update for market %s (strategy %s) at %s", market_id, settlement_strategy_id, timestamp)
        return timestamp

    ################## rewards #######################
    def distribute_rewards(self, signer, distributor, pool_id, collateral_type, amount, start, duration):
        logger.info("Distribute %s rewards via %s from %s", amount, distributor, sender_address(signer))
        return self.client.transact(
            signer,
            distributor,
            "RewardsDistributor",
            "distributeRewards",
            [pool_id, collateral_type, raw(amount, D18), start, duration],
        )

    def claim_rewards(self, identity, account_id, pool_id, collateral_type, distributor):
        return self.client.transact(
            identity,
            self.state.core_proxy,
            "CoreProxy",
            "claimRewards",
            [account_id, pool_id, collateral_type, distributor],
        )

    ################## time #######################
    def sync_time(self, now=None):
        """Move the fork clock forward to wall clock time, never backwards."""
        if now is None:
            now = int(time.time())
        latest = self.state.get_block_timestamp()
        if latest >= now:
            logger.info("Fork time %s is not behind %s", latest, now)
            return latest

        self.client.set_next_block_timestamp(now)
        self.client.mine()
        logger.info("Synced fork time %s -> %s", latest, now)
        return now

    def advance_time(self, seconds):
        self.client.increase_time(seconds)
        self.client.mine()
        return self.state.get_block_timestamp()
