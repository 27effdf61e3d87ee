from .errors import PostconditionMismatch, PreconditionViolation

# DistributorInfo fields holding addresses, compared case-insensitively
ADDRESS_FIELDS = ("collateral_type", "payout_token", "token", "reward_manager")


def assert_result(key, expected, actual):
    if expected != actual:
        raise PostconditionMismatch(key, expected, actual)


def assert_precondition(key, expected, actual, message=None):
    if expected != actual:
        raise PreconditionViolation(key, expected, actual, message)


class ChainChecker:
    """Compares expected values against fresh reads from the chain.

    `pre=True` turns a mismatch into a PreconditionViolation, i.e. the chain was
    not in the state the step assumes before it even ran.
    """

    def __init__(self, context):
        self.context = context
        self.state = context.state

    def name(self, addr):
        return self.context.account_mgr.addr_to_name(addr)

    def _assert(self, key, expected, actual, pre=False, message=None):
        if pre:
            assert_precondition(key, expected, actual, message)
        elif expected != actual:
            raise PostconditionMismatch(key, expected, actual, message)

    def check_eth_balance(self, address, expected, pre=False, message=None):
        actual = self.state.get_eth_balance(address)
        self._assert(f"{self.name(address)}_eth_balance", expected, actual, pre, message)

    def check_token_balance(self, address, token, expected, pre=False, message=None):
        actual = self.state.get_token_balance(address, token)
        self._assert(f"{self.name(address)}_{self.name(token)}_balance", expected, actual, pre, message)
        return actual

    def check_collateral_balance(self, address, symbol, expected, pre=False, message=None):
        actual = self.state.get_collateral_balance(address, symbol)
        self._assert(f"{self.name(address)}_{symbol}_balance", expected, actual, pre, message)

    def check_account_owner(self, account_id, expected, pre=False, message=None):
        actual = self.state.get_account_owner(account_id)
        self._assert(f"account_{account_id}_owner", expected.lower(), actual.lower(), pre, message)

    def check_account_collateral(self, account_id, symbol, expected, pre=False, message=None):
        actual = self.state.get_account_collateral(account_id, symbol)
        for field in expected._fields:
            self._assert(
                f"account_{account_id}_{symbol}_{field}", getattr(expected, field), getattr(actual, field), pre, message
            )
        return actual

    def check_collateral_approved(self, address, symbol, spender, expected, pre=False, message=None):
        actual = self.state.is_collateral_approved(address, symbol, spender)
        self._assert(f"{self.name(address)}_{symbol}_approved_for_{self.name(spender)}", expected, actual, pre, message)

    def check_distributor_info(self, distributor, expected):
        info = self.state.get_distributor_info(distributor)
        for field, value in expected.items():
            actual = getattr(info, field)
            if field in ADDRESS_FIELDS:
                value, actual = value.lower(), actual.lower()
            assert_result(f"distributor_{field}", value, actual)
        return info

    def check_rewards_amount(self, distributor, expected, message=None):
        actual = self.state.get_distributor_rewards_amount(distributor)
        self._assert(f"{self.name(distributor)}_rewards_amount", expected, actual, message=message)
        return actual

    def check_restored(self, baselines):
        """Re-read every baseline value captured right after the snapshot was taken."""
        context = self.context
        reads = {
            "wallet_eth_balance": lambda: self.state.get_eth_balance(context.address),
            "wallet_payout_balance": lambda: self.state.get_token_balance(context.address, context.payout_token),
            "account_owner": lambda: self.state.get_account_owner(context.account_id),
            "distributor_balance": lambda: self.state.get_token_balance(context.distributor, context.payout_token),
            "distributor_rewards_amount": lambda: self.state.get_distributor_rewards_amount(context.distributor),
        }
        for key, expected in baselines.items():
            assert_result(f"restored_{key}", expected, reads[key]())
