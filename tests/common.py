from rewards_e2e.amount import Amount
from rewards_e2e.constants import ETH_DECIMALS, Whale

from .constant import POOL_ID, SYNTH_USDC_MARKET_ID

PRICE_MARKET_IDS = (100, 200, 300, 400, 500, 600)
CEILING = Amount.of(10 ** 12)


def fund_gas(handler, identity, eth=100):
    handler.set_eth_balance(identity.address, Amount.of(eth, ETH_DECIMALS))


def register_account(handler, identity, account_id, eth=100):
    fund_gas(handler, identity, eth)
    handler.create_account(identity, account_id)


def wrap_usdc(handler, identity, amount):
    """USDC from the whale, wrapped into sUSDC through the spot market."""
    state = handler.state
    handler.configure_maximum_market_collateral(SYNTH_USDC_MARKET_ID, "USDC", CEILING)
    handler.set_spot_wrapper(SYNTH_USDC_MARKET_ID, "USDC", CEILING)
    handler.set_token_balance(identity, state.get_token_address("USDC"), amount, Whale.USDC)
    handler.approve_collateral(identity, "USDC", state.spot_market_proxy)
    return handler.wrap_collateral(identity, SYNTH_USDC_MARKET_ID, "USDC", amount)


def deposit_susdc(handler, identity, account_id, amount):
    wrap_usdc(handler, identity, amount)
    handler.approve_collateral(identity, "sUSDC", handler.state.core_proxy)
    handler.deposit_collateral(identity, account_id, "sUSDC", amount)


def push_prices(handler, identity, market_ids=PRICE_MARKET_IDS):
    return {market_id: handler.update_price(identity, market_id, 0) for market_id in market_ids}


def stake(handler, identity, account_id, amount):
    """Registered account with `amount` sUSDC deposited and delegated to the pool."""
    register_account(handler, identity, account_id)
    deposit_susdc(handler, identity, account_id, amount)
    handler.sync_time()
    push_prices(handler, identity)
    handler.delegate_collateral(identity, account_id, POOL_ID, "sUSDC", amount)


def fund_distributor(handler, identity, distributor, amount):
    state = handler.state
    snx = state.get_token_address("SNX")
    handler.set_token_balance(identity, snx, amount, Whale.SNX)
    handler.transfer_token(identity, snx, distributor, amount)
