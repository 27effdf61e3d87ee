import pytest

from rewards_e2e.errors import MutationRejected
from rewards_e2e.impersonation import Impersonation

from .constant import Addr


def test_impersonated_address_can_sign(chain):
    owner = chain.core_owner
    chain.set_balance(owner, 10 ** 18)
    with Impersonation(chain, owner) as signer:
        assert signer == owner
        assert owner in chain.impersonated
        chain.transact(signer, Addr.CORE_PROXY, "CoreProxy", "configureMaximumMarketCollateral", [1, Addr.USDC, 5])
    assert owner not in chain.impersonated
    assert chain.db["max_market_collateral"][(1, Addr.USDC)] == 5


def test_address_cannot_sign_without_impersonation(chain):
    chain.set_balance(chain.core_owner, 10 ** 18)
    with pytest.raises(MutationRejected, match="No Signer"):
        chain.transact(chain.core_owner, Addr.CORE_PROXY, "CoreProxy", "configureMaximumMarketCollateral", [1, Addr.USDC, 5])


def test_released_when_call_fails(chain):
    pool_owner = chain.pool_owner
    with pytest.raises(MutationRejected):
        with Impersonation(chain, pool_owner) as signer:
            # no ETH for gas
            chain.transact(signer, Addr.CORE_PROXY, "CoreProxy", "createAccount", [1])
    assert pool_owner not in chain.impersonated
    assert chain.requests[-1][0] == "anvil_stopImpersonatingAccount"


def test_end_without_begin_is_noop(chain):
    Impersonation(chain, chain.pool_owner).end()
    assert chain.requests == []
