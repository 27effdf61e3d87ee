import json

import pytest

from rewards_e2e.chain_client import Web3ChainClient
from rewards_e2e.config import HarnessConfig
from rewards_e2e.errors import ConfigError
from rewards_e2e.pyth import HermesClient
from rewards_e2e.scenario import DEFAULT_SCENARIO_FILE, FAILED, SKIPPED, Scenario

with open(DEFAULT_SCENARIO_FILE, "r") as file:
    STEPS = json.load(file)["steps"]


@pytest.fixture(scope="module")
def live_scenario():
    config = HarnessConfig.from_env()
    try:
        deployment = config.load_deployment()
    except ConfigError as exc:
        pytest.skip(f"deployment manifests unavailable: {exc}")

    client = Web3ChainClient(config.rpc_url)
    if not client.is_connected():
        pytest.skip(f"no fork node at {config.rpc_url}")

    scenario = Scenario(client, deployment, HermesClient(config.hermes_url))
    scenario.load()
    scenario.validate()
    scenario.begin()
    yield scenario
    report = scenario.finish(raise_cleanup=False)
    print(report.summary())


@pytest.mark.parametrize("index", range(len(STEPS)), ids=[f"{i}-{step[0]}" for i, step in enumerate(STEPS)])
def test_step(live_scenario, index):
    result = live_scenario.execute_step(index)
    if result.status == SKIPPED:
        pytest.skip(result.message)
    if result.status == FAILED:
        pytest.fail(result.message)


def test_snapshot_restored(live_scenario):
    report = live_scenario.finish(raise_cleanup=False)
    if report.cleanup_error is not None:
        pytest.fail(str(report.cleanup_error))
    assert report.restore_result is not None
    assert report.restore_result.status != FAILED, report.restore_result.message
