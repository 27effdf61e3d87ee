import logging

from .errors import CleanupError, HarnessError, SetupError

logger = logging.getLogger(__name__)


class SnapshotController:
    """Brackets one scenario run between evm_snapshot and evm_revert.

    Used as a context manager the revert always runs. A failed revert is only
    raised when the body itself succeeded, otherwise it is logged and the
    body's exception propagates.
    """

    def __init__(self, client):
        self.client = client
        self.snapshot_id = None

    def create(self):
        assert self.snapshot_id is None, f"snapshot {self.snapshot_id} is still active"
        try:
            snapshot_id = self.client.snapshot()
        except HarnessError as exc:
            raise SetupError(f"Create snapshot failed: {exc}") from exc

        if snapshot_id is None:
            raise SetupError("Create snapshot failed: node returned no snapshot id")

        self.snapshot_id = snapshot_id
        logger.info("Create snapshot %s", snapshot_id)
        return snapshot_id

    def revert(self, snapshot_id=None):
        if snapshot_id is None:
            snapshot_id = self.snapshot_id
        assert snapshot_id is not None, "no active snapshot"

        logger.info("Restore snapshot %s", snapshot_id)
        try:
            reverted = self.client.revert(snapshot_id)
        except HarnessError as exc:
            raise CleanupError(f"Restore snapshot {snapshot_id} failed: {exc}") from exc
        finally:
            if snapshot_id == self.snapshot_id:
                self.snapshot_id = None

        if not reverted:
            raise CleanupError(f"Restore snapshot {snapshot_id} rejected by node")

    def is_active(self):
        return self.snapshot_id is not None

    def __enter__(self):
        self.create()
        return self

    def __exit__(self, exc_type, exc, tb):
        if not self.is_active():
            return False

        try:
            self.revert()
        except CleanupError:
            if exc_type is None:
                raise
            logger.exception("Restore snapshot failed while handling %s", exc_type.__name__)
        return False
