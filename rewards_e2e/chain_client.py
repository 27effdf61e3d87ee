import logging
from abc import ABC, abstractmethod

import requests
from web3 import Web3
from web3.exceptions import (
    BadFunctionCallOutput,
    ContractCustomError,
    ContractLogicError,
    TimeExhausted,
    Web3RPCError,
)

from .abi import ABIS
from .errors import CallReverted, MutationRejected, TransportError

logger = logging.getLogger(__name__)


def sender_address(sender):
    """Signers are either local key pairs or plain (impersonated) addresses."""
    if isinstance(sender, str):
        return Web3.to_checksum_address(sender)
    return sender.address


class ChainClient(ABC):
    """Everything the harness knows about the node.

    Contract access goes through `call` / `transact` keyed by ABI name and
    function name, node extensions of the forked simulator through `request`.
    """

    @abstractmethod
    def request(self, method, params):
        """Raw JSON-RPC request, returns the ``result`` member."""

    @abstractmethod
    def get_balance(self, address):
        pass

    @abstractmethod
    def get_block_timestamp(self):
        pass

    @abstractmethod
    def call(self, address, abi, fn_name, args=()):
        pass

    @abstractmethod
    def transact(self, sender, address, abi, fn_name, args=(), value=0):
        """Send a transaction and wait until it is mined.

        Raises MutationRejected when the node refuses it or it reverts.
        """

    ################## simulator extensions #######################
    def snapshot(self):
        return self.request("evm_snapshot", [])

    def revert(self, snapshot_id):
        return self.request("evm_revert", [snapshot_id])

    def impersonate(self, address):
        self.request("anvil_impersonateAccount", [sender_address(address)])

    def stop_impersonating(self, address):
        self.request("anvil_stopImpersonatingAccount", [sender_address(address)])

    def set_balance(self, address, wei):
        self.request("anvil_setBalance", [sender_address(address), hex(wei)])

    def set_next_block_timestamp(self, timestamp):
        self.request("evm_setNextBlockTimestamp", [timestamp])

    def increase_time(self, seconds):
        self.request("evm_increaseTime", [seconds])

    def mine(self):
        self.request("evm_mine", [])


class Web3ChainClient(ChainClient):
    def __init__(self, rpc_url, request_kwargs=None):
        self.rpc_url = rpc_url
        self.w3 = Web3(Web3.HTTPProvider(rpc_url, request_kwargs=request_kwargs))

    def is_connected(self):
        try:
            return self.w3.is_connected()
        except requests.RequestException:
            return False

    def request(self, method, params):
        try:
            response = self.w3.provider.make_request(method, params)
        except requests.RequestException as exc:
            raise TransportError(f"{method} failed: {exc}") from exc

        if response.get("error"):
            raise TransportError(f"{method} error: {response['error']}")
        return response.get("result")

    def get_balance(self, address):
        try:
            return self.w3.eth.get_balance(sender_address(address))
        except requests.RequestException as exc:
            raise TransportError(f"eth_getBalance failed: {exc}") from exc

    def get_block_timestamp(self):
        try:
            return self.w3.eth.get_block("latest")["timestamp"]
        except requests.RequestException as exc:
            raise TransportError(f"eth_getBlockByNumber failed: {exc}") from exc

    def contract(self, address, abi):
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=ABIS[abi])

    def call(self, address, abi, fn_name, args=()):
        fn = getattr(self.contract(address, abi).functions, fn_name)
        try:
            return fn(*args).call()
        except (ContractLogicError, ContractCustomError) as exc:
            raise CallReverted(f"{abi}.{fn_name}", getattr(exc, "message", None) or str(exc)) from exc
        except BadFunctionCallOutput as exc:
            # empty return data, usually no contract at `address`
            raise CallReverted(f"{abi}.{fn_name}", str(exc)) from exc
        except Web3RPCError as exc:
            raise TransportError(f"{abi}.{fn_name} error: {exc}") from exc
        except requests.RequestException as exc:
            raise TransportError(f"{abi}.{fn_name} failed: {exc}") from exc

    def transact(self, sender, address, abi, fn_name, args=(), value=0):
        fn = getattr(self.contract(address, abi).functions, fn_name)(*args)
        operation = f"{abi}.{fn_name}"
        from_addr = sender_address(sender)

        try:
            if isinstance(sender, str):
                # impersonated account, the node signs for us
                tx_hash = fn.transact({"from": from_addr, "value": value})
            else:
                tx = fn.build_transaction({
                    "from": from_addr,
                    "value": value,
                    "nonce": self.w3.eth.get_transaction_count(from_addr, "pending"),
                })
                signed = sender.sign_transaction(tx)
                tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
            receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash)
        except (ContractLogicError, ContractCustomError) as exc:
            raise MutationRejected(operation, getattr(exc, "message", None) or str(exc)) from exc
        except Web3RPCError as exc:
            raise MutationRejected(operation, str(exc)) from exc
        except TimeExhausted as exc:
            raise TransportError(f"{operation} not mined: {exc}") from exc
        except requests.RequestException as exc:
            raise TransportError(f"{operation} failed: {exc}") from exc

        if receipt["status"] != 1:
            raise MutationRejected(operation, f"reverted in tx {receipt['transactionHash'].hex()}")

        logger.debug("%s mined in block %s", operation, receipt["blockNumber"])
        return receipt
