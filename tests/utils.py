from eth_account import Account
from web3 import Web3


def random_address():
    return Web3.to_checksum_address(Account.create().address)


class BalanceTracker:
    """Token balance of one holder, `delta()` is the change since the previous read."""

    def __init__(self, state, holder, token):
        self.state = state
        self.holder = holder
        self.token = token
        self.last = state.get_token_balance(holder, token)

    def balance(self):
        self.last = self.state.get_token_balance(self.holder, self.token)
        return self.last

    def delta(self):
        previous = self.last
        return self.balance() - previous


def get_tracker(state, holder, token) -> BalanceTracker:
    return BalanceTracker(state, holder, token)


def assert_trackers(trackers, expect):
    if isinstance(trackers, list):
        for index, tracker in enumerate(trackers):
            delta = tracker.delta()
            assert delta == expect[index], f'assert_trackers error address: {tracker.holder}: delta {delta}, expect {expect[index]}'
    else:
        assert trackers.delta() == expect


def expect_rejected(exc_info, fragment):
    assert fragment in exc_info.value.reason, f"{exc_info.value.reason!r} does not mention {fragment!r}"
