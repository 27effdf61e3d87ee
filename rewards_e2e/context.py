from .account_mgr import AccountMgr
from .chain_handler import ChainHandler
from .chain_state import ChainState
from .constants import Contract, PRICE_FRESHNESS_WINDOW
from .errors import PreconditionViolation


class ScenarioContext:
    """Everything one run carries from step to step.

    Chain state itself is never cached here, only the values a later step
    compares against (baselines) and what the run created (identity, account id).
    """

    def __init__(self, client, deployment, price_source=None, account_mgr=None,
                 distributor_name=Contract.SNX_DISTRIBUTOR, payout_symbol="SNX",
                 collateral_symbol="sUSDC", pool_id=1):
        self.client = client
        self.deployment = deployment
        self.state = ChainState(client, deployment)
        self.handler = ChainHandler(client, self.state, price_source)
        self.account_mgr = account_mgr or AccountMgr()

        self.identity = self.account_mgr.new_identity("wallet")
        self.account_id = self.account_mgr.gen_account_id()

        self.pool_id = pool_id
        self.collateral_symbol = collateral_symbol
        self.payout_symbol = payout_symbol
        self.distributor = deployment.address(distributor_name)
        self.payout_token = deployment.token_address(payout_symbol)
        self.collateral_type = deployment.token_address(collateral_symbol)
        self.account_mgr.add_name(self.distributor, "distributor")
        self.account_mgr.add_name(self.payout_token, payout_symbol)
        self.account_mgr.add_name(self.collateral_type, collateral_symbol)

        # market id => chain timestamp of the latest attestation pushed by this run
        self.price_attestations = {}
        # facts provided by the steps executed so far
        self.facts = set()
        self.baselines = {}
        self.distribution = None

    @property
    def address(self):
        return self.identity.address

    def capture_baselines(self):
        state = self.state
        self.baselines = {
            "wallet_eth_balance": state.get_eth_balance(self.address),
            "wallet_payout_balance": state.get_token_balance(self.address, self.payout_token),
            "account_owner": state.get_account_owner(self.account_id),
            "distributor_balance": state.get_token_balance(self.distributor, self.payout_token),
            "distributor_rewards_amount": state.get_distributor_rewards_amount(self.distributor),
        }
        return self.baselines

    def record_price_attestation(self, market_id, timestamp):
        self.price_attestations[market_id] = timestamp

    def require_fresh_prices(self, now):
        if not self.price_attestations:
            raise PreconditionViolation("price_attestations", "at least one", "none")

        for market_id, timestamp in self.price_attestations.items():
            age = now - timestamp
            if age > PRICE_FRESHNESS_WINDOW:
                raise PreconditionViolation(
                    f"market_{market_id}_price_age", f"<= {PRICE_FRESHNESS_WINDOW}", age
                )
