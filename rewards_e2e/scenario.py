import json
import logging
import os

from . import task as task_module
from .chain_checker import ChainChecker
from .context import ScenarioContext
from .errors import CleanupError, ConfigError, HarnessError, SetupError, StepOrderError
from .snapshot import SnapshotController

logger = logging.getLogger(__name__)

PASSED = "passed"
FAILED = "failed"
SKIPPED = "skipped"

DEFAULT_SCENARIO_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "scenarios", "rewards_snx.json")

# keys of a scenario file other than "steps", forwarded to ScenarioContext
SETTINGS = ("distributor_name", "payout_symbol", "collateral_symbol", "pool_id")


class StepResult:
    def __init__(self, index, name, params, status, message="", error=None):
        self.index = index
        self.name = name
        self.params = params
        self.status = status
        self.message = message
        self.error = error

    def __repr__(self):
        return f"StepResult({self.index}:{self.name}, {self.status}, {self.message!r})"


class ScenarioReport:
    def __init__(self):
        self.results = []
        self.restore_result = None
        self.cleanup_error = None

    def add(self, result):
        self.results.append(result)
        return result

    @property
    def failures(self):
        failed = [r for r in self.results if r.status == FAILED]
        if self.restore_result is not None and self.restore_result.status == FAILED:
            failed.append(self.restore_result)
        return failed

    @property
    def passed(self):
        return not self.failures and self.cleanup_error is None

    def raise_for_failure(self):
        for result in self.failures:
            raise result.error
        if self.cleanup_error is not None:
            raise self.cleanup_error

    def summary(self):
        lines = [f"{r.index:>2} {r.name:<32} {r.status.upper()} {r.message}".rstrip() for r in self.results]
        if self.restore_result is not None:
            lines.append(f"   {'RestoreSnapshot':<32} {self.restore_result.status.upper()} {self.restore_result.message}".rstrip())
        return "\n".join(lines)


class Scenario:
    """Runs a list of tasks against one snapshot of the fork.

    Steps run strictly in order. The first failing step aborts the rest
    (reported as skipped), the snapshot is reverted in every case and the
    restored state is compared with the baselines read right after the
    snapshot was taken.
    """

    def __init__(self, client, deployment, price_source=None, account_mgr=None):
        self.client = client
        self.deployment = deployment
        self.price_source = price_source
        self.account_mgr = account_mgr
        self.steps = []
        self.settings = {}
        self.context = None
        self.snapshot = SnapshotController(client)
        self.report = ScenarioReport()
        self.aborted = False

    def load(self, json_file=DEFAULT_SCENARIO_FILE):
        try:
            with open(json_file, "r") as file:
                data = json.load(file)
        except FileNotFoundError as exc:
            raise ConfigError(f"Scenario file {json_file} not found") from exc
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Failed to decode JSON in {json_file}, {exc}") from exc

        if not isinstance(data.get("steps"), list) or not data["steps"]:
            raise ConfigError(f"Scenario file {json_file} has no steps")

        self.set_steps(data["steps"])
        self.settings = {k: data[k] for k in SETTINGS if k in data}

    def dump(self, write_file):
        assert len(self.steps) > 0

        json_data = dict(self.settings)
        json_data["steps"] = self.steps
        with open(write_file, "w") as json_file:
            json.dump(json_data, json_file, indent=4)

    def set_steps(self, steps):
        # step = [TaskName, *params]
        self.steps = [list(step) for step in steps]

    def get_task_count(self):
        return len(self.steps)

    def get_step_name(self, index):
        return self.steps[index][0]

    def validate(self):
        """Walk the step list and make sure every requirement is provided by an earlier step."""
        provided = set()
        for index, step in enumerate(self.steps):
            assert len(step) > 0, f"Empty step at {index}"
            TaskClass = self.__get_task_class(step[0])
            params = step[1:]

            missing = [fact for fact in TaskClass.requires_for(params) if fact not in provided]
            if missing:
                raise StepOrderError(f"{index}:{step[0]}", missing)
            provided.update(TaskClass.provides_for(params))

    def begin(self):
        """Take the snapshot and read the baselines. Any failure here is fatal."""
        self.context = ScenarioContext(
            self.client, self.deployment, self.price_source, self.account_mgr, **self.settings
        )
        self.snapshot.create()
        try:
            self.context.capture_baselines()
        except Exception as exc:
            self.finish(raise_cleanup=False)
            raise SetupError(f"Reading baselines failed: {exc}") from exc
        except BaseException:
            self.finish(raise_cleanup=False)
            raise
        logger.info("Baselines %s", self.context.baselines)

    def execute_step(self, index):
        name = self.get_step_name(index)
        params = self.steps[index][1:]

        if self.aborted:
            result = StepResult(index, name, params, SKIPPED, "previous step failed")
            logger.info("Step %s %s SKIPPED", index, name)
            return self.report.add(result)

        try:
            self.__execute_task(name, params)
        except (HarnessError, AssertionError) as exc:
            self.aborted = True
            logger.error("Step %s %s FAILED: %s", index, name, exc)
            return self.report.add(StepResult(index, name, params, FAILED, str(exc), exc))
        except Exception as exc:
            self.aborted = True
            logger.exception("Step %s %s crashed", index, name)
            message = f"{type(exc).__name__}: {exc}"
            return self.report.add(StepResult(index, name, params, FAILED, message, exc))

        logger.info("Step %s %s PASSED", index, name)
        return self.report.add(StepResult(index, name, params, PASSED))

    def finish(self, raise_cleanup=True):
        if not self.snapshot.is_active():
            return self.report

        try:
            self.snapshot.revert()
        except CleanupError as exc:
            logger.error("Cleanup failed: %s", exc)
            self.report.cleanup_error = exc
            if raise_cleanup and not self.report.failures:
                raise
            return self.report

        self.verify_restored()
        return self.report

    def verify_restored(self):
        if not self.context.baselines:
            return None

        try:
            ChainChecker(self.context).check_restored(self.context.baselines)
        except Exception as exc:
            logger.error("Restored state differs from baseline: %s", exc)
            self.report.restore_result = StepResult(-1, "RestoreSnapshot", [], FAILED, str(exc), exc)
        else:
            self.report.restore_result = StepResult(-1, "RestoreSnapshot", [], PASSED)
        return self.report.restore_result

    def execute(self):
        self.validate()
        self.begin()
        try:
            for index in range(self.get_task_count()):
                self.execute_step(index)
        except BaseException:
            self.finish(raise_cleanup=False)
            raise
        self.finish()

        logger.info("Scenario report\n%s", self.report.summary())
        return self.report

    def __get_task_class(self, task_name):
        TaskClass = getattr(task_module, task_name, None)
        if not (isinstance(TaskClass, type) and issubclass(TaskClass, task_module.Task)) or TaskClass is task_module.Task:
            raise ConfigError(f"Unknown task {task_name}")
        return TaskClass

    def __execute_task(self, task_name, task_params):
        TaskClass = self.__get_task_class(task_name)
        task_inst = TaskClass()

        missing = [f for f in TaskClass.requires_for(task_params) if f not in self.context.facts]
        if missing:
            raise StepOrderError(task_name, missing)

        task_inst.set_context(self.context)
        task_inst.pre_execute(task_params)
        task_inst.execute()
        task_inst.post_execute()
