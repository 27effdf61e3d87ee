import logging
from abc import ABC, abstractmethod

from .amount import Amount
from .constants import D18, ETH_DECIMALS, IMPERSONATED_ETH_BALANCE, Whale
from .errors import MutationRejected, PostconditionMismatch
from .impersonation import Impersonation
from . import task_handler

logger = logging.getLogger(__name__)


class Task(ABC):
    """One scenario step.

    `requires` / `provides` are the facts a step depends on and establishes.
    The scenario checks them for the whole step list before touching the chain.
    """

    requires = ()
    provides = ()

    @classmethod
    def requires_for(cls, params):
        return tuple(cls.requires)

    @classmethod
    def provides_for(cls, params):
        return tuple(cls.provides)

    def set_context(self, context):
        self.context = context

    @abstractmethod
    def pre_execute(self, params):
        assert self.context is not None
        self.params = params
        self.init_task_handler()

    @abstractmethod
    def execute(self):
        logger.info("Execute task %s (%s)", self.__class__.__name__, self.params)

    def post_execute(self):
        self.context.facts.update(self.provides_for(self.params))

    def init_task_handler(self):
        HandlerClass = getattr(task_handler, self.__class__.__name__)
        self.handler = HandlerClass()
        self.handler.set_context(self.context)
        self.handler.set_task(self)
        self.handler.init_checker()

    def notify_task_ready(self):
        self.handler.on_task_ready()

    def notify_task_finish(self):
        self.handler.on_task_finish()


class SyncTime(Task):
    provides = ("synced_time",)

    def pre_execute(self, params):
        super().pre_execute(params)
        assert len(params) == 0, "Invalid params"

    def execute(self):
        super().execute()
        self.notify_task_ready()
        self.synced_to = self.context.handler.sync_time()
        self.notify_task_finish()


class CheckDistributorInfo(Task):
    def pre_execute(self, params):
        super().pre_execute(params)

        assert len(params) == 3, "Invalid params"
        self.expected_name = params[0]
        self.expected_pool_id = int(params[1])
        self.expected_precision = int(params[2])

    def execute(self):
        super().execute()
        self.notify_task_ready()
        self.notify_task_finish()


class SetEthBalance(Task):
    provides = ("gas",)

    def pre_execute(self, params):
        super().pre_execute(params)

        assert len(params) == 1, "Invalid params"
        self.amount = Amount.of(params[0], ETH_DECIMALS)

    def execute(self):
        super().execute()
        self.notify_task_ready()
        self.context.handler.set_eth_balance(self.context.address, self.amount)
        self.notify_task_finish()


class CreateAccount(Task):
    requires = ("gas",)
    provides = ("account",)

    def pre_execute(self, params):
        super().pre_execute(params)
        assert len(params) == 0, "Invalid params"

    def execute(self):
        super().execute()
        self.notify_task_ready()
        self.context.handler.create_account(self.context.identity, self.context.account_id)
        self.notify_task_finish()


class RejectDuplicateAccount(Task):
    requires = ("account",)

    def pre_execute(self, params):
        super().pre_execute(params)
        assert len(params) == 0, "Invalid params"

    def execute(self):
        super().execute()
        self.notify_task_ready()

        try:
            self.context.handler.create_account(self.context.identity, self.context.account_id)
        except MutationRejected as exc:
            logger.info("Duplicate account creation rejected: %s", exc.reason)
        else:
            raise PostconditionMismatch(f"account_{self.context.account_id}_second_creation", "rejected", "accepted")

        self.notify_task_finish()


class SetTokenBalance(Task):
    requires = ("gas",)

    @classmethod
    def provides_for(cls, params):
        return (f"balance:{params[0]}",)

    def pre_execute(self, params):
        super().pre_execute(params)

        assert len(params) in (2, 3), "Invalid params"
        self.symbol = params[0]
        self.amount = Amount.of(params[1], D18)
        self.whale = params[2] if len(params) == 3 else getattr(Whale, self.symbol.upper())
        self.token = self.context.state.get_token_address(self.symbol)

    def execute(self):
        super().execute()
        self.notify_task_ready()
        self.context.handler.set_token_balance(self.context.identity, self.token, self.amount, self.whale)
        self.notify_task_finish()


class ApproveCollateral(Task):
    requires = ("gas",)

    @classmethod
    def provides_for(cls, params):
        return (f"approval:{params[0]}:{params[1]}",)

    def pre_execute(self, params):
        super().pre_execute(params)

        assert len(params) == 2, "Invalid params"
        self.symbol = params[0]
        self.spender = self.context.deployment.address(params[1])
        self.context.account_mgr.add_name(self.spender, params[1])

    def execute(self):
        super().execute()
        self.notify_task_ready()
        self.context.handler.approve_collateral(self.context.identity, self.symbol, self.spender)
        self.notify_task_finish()


class RaiseCollateralCeilings(Task):
    @classmethod
    def provides_for(cls, params):
        return (f"ceiling:{params[1]}",)

    def pre_execute(self, params):
        super().pre_execute(params)

        assert len(params) == 3, "Invalid params"
        self.market_id = self.context.deployment.extra_int(params[0])
        self.symbol = params[1]
        self.amount = Amount.of(params[2], D18)

    def execute(self):
        super().execute()
        self.notify_task_ready()
        self.context.handler.configure_maximum_market_collateral(self.market_id, self.symbol, self.amount)
        self.context.handler.set_spot_wrapper(self.market_id, self.symbol, self.amount)
        self.notify_task_finish()


class WrapCollateral(Task):
    @classmethod
    def requires_for(cls, params):
        symbol = params[1]
        return ("gas", f"balance:{symbol}", f"approval:{symbol}:SpotMarketProxy", f"ceiling:{symbol}")

    @classmethod
    def provides_for(cls, params):
        return (f"balance:s{params[1]}",)

    def pre_execute(self, params):
        super().pre_execute(params)

        assert len(params) == 3, "Invalid params"
        self.market_id = self.context.deployment.extra_int(params[0])
        self.symbol = params[1]
        self.synth_symbol = f"s{self.symbol}"
        self.amount = Amount.of(params[2], D18)

    def execute(self):
        super().execute()
        self.notify_task_ready()
        self.synth_balance = self.context.handler.wrap_collateral(
            self.context.identity, self.market_id, self.symbol, self.amount, self.synth_symbol
        )
        self.notify_task_finish()


class DepositCollateral(Task):
    @classmethod
    def requires_for(cls, params):
        symbol = params[0]
        return ("account", f"balance:{symbol}", f"approval:{symbol}:CoreProxy")

    @classmethod
    def provides_for(cls, params):
        return (f"deposit:{params[0]}",)

    def pre_execute(self, params):
        super().pre_execute(params)

        assert len(params) == 2, "Invalid params"
        self.symbol = params[0]
        self.amount = Amount.of(params[1], D18)

    def execute(self):
        super().execute()
        self.notify_task_ready()
        self.context.handler.deposit_collateral(self.context.identity, self.context.account_id, self.symbol, self.amount)
        self.notify_task_finish()


class PriceUpdate(Task):
    requires = ("gas", "synced_time")
    provides = ("fresh_price",)

    def pre_execute(self, params):
        super().pre_execute(params)

        assert len(params) > 0, "Invalid params"
        # [[market id, settlement strategy name in extras.json], ...]
        self.markets = []
        for market_id, strategy_name in params:
            self.markets.append((int(market_id), self.context.deployment.extra_int(strategy_name)))

    def execute(self):
        super().execute()
        self.notify_task_ready()

        for market_id, strategy_id in self.markets:
            timestamp = self.context.handler.update_price(self.context.identity, market_id, strategy_id)
            self.context.record_price_attestation(market_id, timestamp)

        self.notify_task_finish()


class DelegateCollateral(Task):
    @classmethod
    def requires_for(cls, params):
        return (f"deposit:{params[0]}", "fresh_price")

    provides = ("delegation",)

    def pre_execute(self, params):
        super().pre_execute(params)

        assert len(params) in (2, 3), "Invalid params"
        self.symbol = params[0]
        self.amount = Amount.of(params[1], D18)
        self.pool_id = int(params[2]) if len(params) == 3 else self.context.pool_id

    def execute(self):
        super().execute()
        self.notify_task_ready()
        # delegateCollateral takes the new total, not a delta
        new_total = self.handler.before.total_assigned + self.amount
        self.context.handler.delegate_collateral(
            self.context.identity, self.context.account_id, self.pool_id, self.symbol, new_total
        )
        self.notify_task_finish()


class FundDistributor(Task):
    requires = ("gas",)
    provides = ("funded_distributor",)

    def pre_execute(self, params):
        super().pre_execute(params)

        assert len(params) in (1, 2), "Invalid params"
        self.amount = Amount.of(params[0], D18)
        self.whale = params[1] if len(params) == 2 else getattr(Whale, self.context.payout_symbol.upper())

    def execute(self):
        super().execute()
        self.notify_task_ready()

        context = self.context
        context.handler.set_token_balance(context.identity, context.payout_token, self.amount, self.whale)
        context.handler.transfer_token(context.identity, context.payout_token, context.distributor, self.amount)

        self.notify_task_finish()


class DistributeRewards(Task):
    requires = ("delegation", "funded_distributor", "fresh_price")
    provides = ("distribution",)

    def pre_execute(self, params):
        super().pre_execute(params)

        assert len(params) == 2, "Invalid params"
        self.amount = Amount.of(params[0], D18)
        self.duration = int(params[1])

    def execute(self):
        super().execute()
        self.notify_task_ready()

        context = self.context
        pool_owner = context.state.get_pool_owner(context.pool_id)
        context.account_mgr.add_name(pool_owner, "pool_owner")
        context.handler.set_eth_balance(pool_owner, Amount.of(IMPERSONATED_ETH_BALANCE, ETH_DECIMALS))

        self.start = context.state.get_block_timestamp()
        with Impersonation(context.client, pool_owner) as signer:
            context.handler.distribute_rewards(
                signer, context.distributor, context.pool_id, context.collateral_type,
                self.amount, self.start, self.duration
            )
        context.distribution = {"amount": self.amount, "start": self.start, "duration": self.duration}

        self.notify_task_finish()


class RejectUnauthorizedDistribution(Task):
    requires = ("funded_distributor",)

    def pre_execute(self, params):
        super().pre_execute(params)

        assert len(params) == 2, "Invalid params"
        self.amount = Amount.of(params[0], D18)
        self.duration = int(params[1])

    def execute(self):
        super().execute()
        self.notify_task_ready()

        context = self.context
        start = context.state.get_block_timestamp()
        try:
            context.handler.distribute_rewards(
                context.identity, context.distributor, context.pool_id, context.collateral_type,
                self.amount, start, self.duration
            )
        except MutationRejected as exc:
            logger.info("Distribution by %s rejected: %s", context.address, exc.reason)
        else:
            raise PostconditionMismatch("distribution_by_non_owner", "rejected", "accepted")

        self.notify_task_finish()


class AdvanceTime(Task):
    def pre_execute(self, params):
        super().pre_execute(params)

        assert len(params) == 1, "Invalid params"
        self.seconds = int(params[0])

    def execute(self):
        super().execute()
        self.notify_task_ready()
        self.context.handler.advance_time(self.seconds)
        self.notify_task_finish()


class ClaimRewards(Task):
    requires = ("account", "distribution")
    provides = ("claim",)

    def pre_execute(self, params):
        super().pre_execute(params)
        assert len(params) == 0, "Invalid params"

    def execute(self):
        super().execute()
        self.notify_task_ready()

        context = self.context
        context.handler.claim_rewards(
            context.identity, context.account_id, context.pool_id, context.collateral_type, context.distributor
        )

        self.notify_task_finish()
