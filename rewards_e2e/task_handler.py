import logging
from abc import ABC

from .amount import Amount
from .chain_checker import ChainChecker, assert_result
from .chain_state import CollateralPosition
from .constants import ZERO_ADDRESS
from .errors import PostconditionMismatch, PreconditionViolation

logger = logging.getLogger(__name__)


class TaskHandler(ABC):
    """Reads the chain around a task: baselines and preconditions in
    `on_task_ready`, postconditions in `on_task_finish`."""

    def set_context(self, context):
        self.context = context

    def set_task(self, task):
        self.task = task

    def init_checker(self):
        assert self.context is not None
        assert self.task is not None
        self.checker = ChainChecker(self.context)
        self.state = self.context.state

    def on_task_ready(self):
        logger.debug("on_task_ready %s", self.task.__class__.__name__)

    def on_task_finish(self):
        logger.debug("on_task_finish %s", self.task.__class__.__name__)


class SyncTime(TaskHandler):
    def on_task_finish(self):
        super().on_task_finish()
        now = self.state.get_block_timestamp()
        if now < self.task.synced_to:
            raise PostconditionMismatch("block_timestamp", f">= {self.task.synced_to}", now)


class CheckDistributorInfo(TaskHandler):
    def on_task_finish(self):
        super().on_task_finish()
        context = self.context
        self.checker.check_distributor_info(context.distributor, {
            "name": self.task.expected_name,
            "pool_id": self.task.expected_pool_id,
            "collateral_type": context.collateral_type,
            "payout_token": context.payout_token,
            "precision": self.task.expected_precision,
            "token": context.payout_token,
            "reward_manager": context.state.core_proxy,
            "should_fail_payout": False,
        })


class SetEthBalance(TaskHandler):
    def on_task_ready(self):
        super().on_task_ready()
        self.checker.check_eth_balance(
            self.context.address, Amount.zero(), pre=True, message="New wallet has 0 ETH balance"
        )

    def on_task_finish(self):
        super().on_task_finish()
        self.checker.check_eth_balance(self.context.address, self.task.amount)


class CreateAccount(TaskHandler):
    def on_task_ready(self):
        super().on_task_ready()
        self.checker.check_account_owner(
            self.context.account_id, ZERO_ADDRESS, pre=True, message="New wallet should not have an account yet"
        )

    def on_task_finish(self):
        super().on_task_finish()
        self.checker.check_account_owner(self.context.account_id, self.context.address)


class RejectDuplicateAccount(TaskHandler):
    def on_task_ready(self):
        super().on_task_ready()
        self.checker.check_account_owner(self.context.account_id, self.context.address, pre=True)

    def on_task_finish(self):
        super().on_task_finish()
        self.checker.check_account_owner(self.context.account_id, self.context.address)


class SetTokenBalance(TaskHandler):
    def on_task_ready(self):
        super().on_task_ready()
        self.checker.check_token_balance(
            self.context.address, self.task.token, Amount.zero(), pre=True,
            message=f"New wallet has 0 {self.task.symbol} balance"
        )

    def on_task_finish(self):
        super().on_task_finish()
        self.checker.check_token_balance(self.context.address, self.task.token, self.task.amount)


class ApproveCollateral(TaskHandler):
    def on_task_ready(self):
        super().on_task_ready()
        self.checker.check_collateral_approved(
            self.context.address, self.task.symbol, self.task.spender, False, pre=True,
            message=f"New wallet has not allowed {self.task.symbol} spending"
        )

    def on_task_finish(self):
        super().on_task_finish()
        self.checker.check_collateral_approved(self.context.address, self.task.symbol, self.task.spender, True)


class RaiseCollateralCeilings(TaskHandler):
    pass


class WrapCollateral(TaskHandler):
    def on_task_ready(self):
        super().on_task_ready()
        address = self.context.address
        self.underlying_before = self.state.get_collateral_balance(address, self.task.symbol)
        self.synth_before = self.state.get_collateral_balance(address, self.task.synth_symbol)
        if self.underlying_before < self.task.amount:
            raise PreconditionViolation(
                f"{self.task.symbol}_balance", f">= {self.task.amount}", self.underlying_before
            )

    def on_task_finish(self):
        super().on_task_finish()
        address = self.context.address
        expected_synth = self.synth_before + self.task.amount
        assert_result(f"wrapped_{self.task.synth_symbol}_balance", expected_synth, self.task.synth_balance)
        self.checker.check_collateral_balance(address, self.task.synth_symbol, expected_synth)
        self.checker.check_collateral_balance(address, self.task.symbol, self.underlying_before - self.task.amount)


class DepositCollateral(TaskHandler):
    def on_task_ready(self):
        super().on_task_ready()
        context = self.context
        self.wallet_before = self.state.get_collateral_balance(context.address, self.task.symbol)
        self.position_before = self.state.get_account_collateral(context.account_id, self.task.symbol)
        if self.wallet_before < self.task.amount:
            raise PreconditionViolation(f"{self.task.symbol}_balance", f">= {self.task.amount}", self.wallet_before)

    def on_task_finish(self):
        super().on_task_finish()
        context = self.context
        before = self.position_before
        self.checker.check_collateral_balance(
            context.address, self.task.symbol, self.wallet_before - self.task.amount
        )
        self.checker.check_account_collateral(context.account_id, self.task.symbol, CollateralPosition(
            total_deposited=before.total_deposited + self.task.amount,
            total_assigned=before.total_assigned,
            total_locked=before.total_locked,
        ))


class PriceUpdate(TaskHandler):
    def on_task_finish(self):
        super().on_task_finish()
        self.context.require_fresh_prices(self.state.get_block_timestamp())


class DelegateCollateral(TaskHandler):
    def on_task_ready(self):
        super().on_task_ready()
        context = self.context
        context.require_fresh_prices(self.state.get_block_timestamp())

        self.before = self.state.get_account_collateral(context.account_id, self.task.symbol)
        available = self.before.total_deposited - self.before.total_assigned
        if available < self.task.amount:
            raise PreconditionViolation(f"{self.task.symbol}_undelegated", f">= {self.task.amount}", available)

    def on_task_finish(self):
        super().on_task_finish()
        before = self.before
        self.checker.check_account_collateral(self.context.account_id, self.task.symbol, CollateralPosition(
            total_deposited=before.total_deposited,
            total_assigned=before.total_assigned + self.task.amount,
            total_locked=before.total_locked,
        ))


class FundDistributor(TaskHandler):
    def on_task_ready(self):
        super().on_task_ready()
        context = self.context
        self.distributor_before = self.state.get_token_balance(context.distributor, context.payout_token)

    def on_task_finish(self):
        super().on_task_finish()
        context = self.context
        self.checker.check_token_balance(
            context.distributor, context.payout_token, self.distributor_before + self.task.amount,
            message=f"Rewards Distributor has {self.task.amount} extra {context.payout_symbol} on its balance"
        )
        self.checker.check_token_balance(context.address, context.payout_token, Amount.zero())


class DistributeRewards(TaskHandler):
    def on_task_ready(self):
        super().on_task_ready()
        context = self.context
        context.require_fresh_prices(self.state.get_block_timestamp())
        self.rewards_before = self.state.get_distributor_rewards_amount(context.distributor)

    def on_task_finish(self):
        super().on_task_finish()
        self.checker.check_rewards_amount(
            self.context.distributor, self.rewards_before + self.task.amount,
            message=f"should have {self.task.amount} extra tokens in rewards"
        )


class RejectUnauthorizedDistribution(TaskHandler):
    def on_task_ready(self):
        super().on_task_ready()
        self.rewards_before = self.state.get_distributor_rewards_amount(self.context.distributor)

    def on_task_finish(self):
        super().on_task_finish()
        self.checker.check_rewards_amount(self.context.distributor, self.rewards_before)


class AdvanceTime(TaskHandler):
    def on_task_ready(self):
        super().on_task_ready()
        self.timestamp_before = self.state.get_block_timestamp()

    def on_task_finish(self):
        super().on_task_finish()
        expected = self.timestamp_before + self.task.seconds
        now = self.state.get_block_timestamp()
        if now < expected:
            raise PostconditionMismatch("block_timestamp", f">= {expected}", now)


class ClaimRewards(TaskHandler):
    def on_task_ready(self):
        super().on_task_ready()
        context = self.context

        self.available_before = self.state.get_available_rewards(
            context.account_id, context.pool_id, context.collateral_type, context.distributor
        )
        if self.available_before.is_zero():
            raise PreconditionViolation(
                "available_rewards", "> 0", self.available_before, "should have some rewards to claim"
            )

        self.wallet_before = self.checker.check_token_balance(
            context.address, context.payout_token, Amount.zero(), pre=True,
            message=f"Wallet has 0 {context.payout_symbol} balance BEFORE claim"
        )
        self.rewards_before = self.state.get_distributor_rewards_amount(context.distributor)

    def on_task_finish(self):
        super().on_task_finish()
        context = self.context

        wallet_after = self.state.get_token_balance(context.address, context.payout_token)
        claimed = wallet_after - self.wallet_before
        if claimed.is_zero():
            raise PostconditionMismatch(
                f"{context.payout_symbol}_claimed", "> 0", claimed, "Wallet has some non-zero balance AFTER claim"
            )
        # emission only grows between the read and the claim
        if claimed < self.available_before:
            raise PostconditionMismatch(f"{context.payout_symbol}_claimed", f">= {self.available_before}", claimed)

        self.checker.check_rewards_amount(
            context.distributor, self.rewards_before - claimed,
            message="should deduct claimed token amount from total distributor rewards amount"
        )

        available_after = self.state.get_available_rewards(
            context.account_id, context.pool_id, context.collateral_type, context.distributor
        )
        if not available_after < self.available_before:
            raise PostconditionMismatch("available_rewards_after_claim", f"< {self.available_before}", available_after)
        self.claimed = claimed
        logger.info("Claimed %s %s", claimed, context.payout_symbol)
