import random

import pytest

from rewards_e2e.account_mgr import AccountMgr
from rewards_e2e.chain_handler import ChainHandler
from rewards_e2e.chain_state import ChainState
from rewards_e2e.config import Deployment
from rewards_e2e.scenario import Scenario

from .constant import CONTRACTS, EXTRAS, WHALE_FUNDS
from .fake_chain import FakeChain, FakePriceSource


@pytest.fixture()
def deployment():
    return Deployment(contracts=dict(CONTRACTS), extras=dict(EXTRAS))


@pytest.fixture()
def chain():
    c = FakeChain(CONTRACTS)
    for (token_name, whale), amount in WHALE_FUNDS.items():
        c.mint(token_name, whale, amount)
    return c


@pytest.fixture()
def price_source():
    return FakePriceSource()


@pytest.fixture()
def state(chain, deployment):
    return ChainState(chain, deployment)


@pytest.fixture()
def handler(chain, state, price_source):
    return ChainHandler(chain, state, price_source)


@pytest.fixture()
def account_mgr():
    return AccountMgr(random.Random(1337))


@pytest.fixture()
def identity(account_mgr):
    return account_mgr.new_identity("wallet")


@pytest.fixture()
def account_id(account_mgr):
    return account_mgr.gen_account_id()


@pytest.fixture()
def distributor(deployment):
    return deployment.address("RewardsDistributorForSpartanCouncilPoolSNX")


@pytest.fixture()
def scenario(chain, deployment, price_source, account_mgr):
    s = Scenario(chain, deployment, price_source, account_mgr)
    s.load()
    return s
