import pytest
import requests
from web3.exceptions import BadFunctionCallOutput, ContractLogicError, TimeExhausted, Web3RPCError

from rewards_e2e.abi import ABIS
from rewards_e2e.chain_client import Web3ChainClient
from rewards_e2e.errors import CallReverted, MutationRejected, TransportError

from .constant import Addr
from .fake_chain import FakeChain


class BrokenFunction:
    def __init__(self, exc):
        self.exc = exc

    def __call__(self, *args):
        return self

    def call(self):
        raise self.exc

    def transact(self, params):
        raise self.exc


class BrokenContract:
    def __init__(self, exc):
        self.functions = self
        self.exc = exc

    def __getattr__(self, name):
        return BrokenFunction(self.exc)


@pytest.fixture()
def client():
    return Web3ChainClient("http://127.0.0.1:1")


def break_contract(monkeypatch, client, exc):
    monkeypatch.setattr(client, "contract", lambda address, abi: BrokenContract(exc))


@pytest.mark.parametrize("exc,expected", [
    (ContractLogicError("execution reverted: PermissionDenied"), CallReverted),
    (BadFunctionCallOutput("Could not decode contract function call"), CallReverted),
    (Web3RPCError("header not found"), TransportError),
    (requests.ConnectionError("refused"), TransportError),
])
def test_call_errors_are_mapped(monkeypatch, client, exc, expected):
    break_contract(monkeypatch, client, exc)
    with pytest.raises(expected):
        client.call(Addr.CORE_PROXY, "CoreProxy", "getAccountOwner", [1])


@pytest.mark.parametrize("exc,expected", [
    (ContractLogicError("execution reverted: Unauthorized"), MutationRejected),
    (Web3RPCError("nonce too low"), MutationRejected),
    (TimeExhausted("not in the chain after 120 seconds"), TransportError),
    (requests.ConnectionError("refused"), TransportError),
])
def test_transact_errors_are_mapped(monkeypatch, client, exc, expected):
    break_contract(monkeypatch, client, exc)
    with pytest.raises(expected):
        client.transact(Addr.CORE_PROXY, Addr.SNX_DISTRIBUTOR, "RewardsDistributor", "distributeRewards", [1])


def test_every_abi_function_is_modelled():
    for abi, entries in ABIS.items():
        for entry in entries:
            assert hasattr(FakeChain, f"_{abi}_{entry['name']}"), f"{abi}.{entry['name']} is not modelled"
