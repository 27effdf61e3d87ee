import random

from eth_account import Account

from .constants import ACCOUNT_ID_PREFIX, ACCOUNT_ID_SUFFIX_RANGE


class AccountMgr:
    """Ephemeral identities and account ids for one run, plus readable names for logs."""

    def __init__(self, rng=None):
        self.rng = rng or random.Random()
        # name => LocalAccount
        self.__identities = {}
        # addr (lowercase) => name
        self.__addr_to_name_table = {}

    def new_identity(self, name="wallet"):
        assert name not in self.__identities, f"identity {name} already exists"
        identity = Account.create()
        self.__identities[name] = identity
        self.add_name(identity.address, name)
        return identity

    def get_identity(self, name="wallet"):
        return self.__identities[name]

    def gen_account_id(self):
        return int(f"{ACCOUNT_ID_PREFIX}{self.rng.randrange(ACCOUNT_ID_SUFFIX_RANGE)}")

    def add_name(self, addr, name):
        if not isinstance(addr, str):
            addr = addr.address
        self.__addr_to_name_table[addr.lower()] = name

    def addr_to_name(self, addr):
        if not isinstance(addr, str):
            addr = addr.address
        return self.__addr_to_name_table.get(addr.lower(), addr)
