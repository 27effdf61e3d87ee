import logging

logger = logging.getLogger(__name__)


class Impersonation:
    """Signs as `address` on the forked node without holding its key.

    Scope it tightly around the privileged call:

        with Impersonation(client, pool_owner) as signer:
            handler.distribute_rewards(signer, ...)
    """

    def __init__(self, client, address):
        self.client = client
        self.address = address
        self.active = False

    def begin(self):
        self.client.impersonate(self.address)
        self.active = True
        logger.info("Impersonate %s", self.address)
        return self.address

    def end(self):
        if not self.active:
            return
        self.active = False
        self.client.stop_impersonating(self.address)
        logger.info("Stop impersonating %s", self.address)

    def __enter__(self):
        return self.begin()

    def __exit__(self, exc_type, exc, tb):
        self.end()
        return False
