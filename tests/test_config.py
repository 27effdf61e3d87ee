import json
from pathlib import Path

import pytest

from rewards_e2e.config import Deployment, HarnessConfig
from rewards_e2e.constants import DEFAULT_HERMES_URL, DEFAULT_RPC_URL
from rewards_e2e.errors import ConfigError

from .constant import Addr, CONTRACTS, EXTRAS


def write_json(path, data):
    path.write_text(json.dumps(data))


@pytest.fixture()
def deployments_dir(tmp_path):
    contracts = dict(CONTRACTS)
    core_proxy = contracts.pop("CoreProxy")
    write_json(tmp_path / "meta.json", {"contracts": contracts})
    write_json(tmp_path / "CoreProxy.json", {"address": core_proxy, "abi": []})
    write_json(tmp_path / "extras.json", EXTRAS)
    return tmp_path


def test_load_reads_meta_artifacts_and_extras(deployments_dir):
    deployment = Deployment.load(deployments_dir)
    assert deployment.address("CoreProxy").lower() == Addr.CORE_PROXY
    assert deployment.token_address("sUSDC").lower() == Addr.SUSDC
    assert deployment.extra_int("synth_usdc_market_id") == 1


def test_meta_wins_over_artifact(deployments_dir):
    write_json(deployments_dir / "SNXToken.json", {"address": Addr.USDC})
    deployment = Deployment.load(deployments_dir)
    assert deployment.address("SNXToken").lower() == Addr.SNX


def test_addresses_are_checksummed(deployments_dir):
    address = Deployment.load(deployments_dir).address("SpotMarketProxy")
    assert address != address.lower()


def test_missing_meta_raises(tmp_path):
    with pytest.raises(ConfigError, match="meta.json"):
        Deployment.load(tmp_path)


def test_broken_json_raises(tmp_path):
    (tmp_path / "meta.json").write_text("{not json")
    with pytest.raises(ConfigError, match="decode"):
        Deployment.load(tmp_path)


def test_extras_are_optional(deployments_dir):
    (deployments_dir / "extras.json").unlink()
    deployment = Deployment.load(deployments_dir)
    with pytest.raises(ConfigError):
        deployment.extra("synth_usdc_market_id")


def test_unknown_names_raise():
    deployment = Deployment(contracts={"CoreProxy": "0x1234"}, extras={"market": "abc"})
    with pytest.raises(ConfigError, match="not in the deployment manifest"):
        deployment.address("SpotMarketProxy")
    with pytest.raises(ConfigError, match="invalid address"):
        deployment.address("CoreProxy")
    with pytest.raises(ConfigError, match="Unknown token"):
        deployment.token_address("DAI")
    with pytest.raises(ConfigError, match="not an integer"):
        deployment.extra_int("market")


def test_from_env_defaults():
    config = HarnessConfig.from_env({})
    assert config.rpc_url == DEFAULT_RPC_URL
    assert config.hermes_url == DEFAULT_HERMES_URL.rstrip("/")
    assert config.deployments_dir == Path("deployments")


def test_from_env_overrides(deployments_dir):
    config = HarnessConfig.from_env({
        "RPC_URL": "http://fork:8545",
        "E2E_DEPLOYMENTS_DIR": str(deployments_dir),
        "PYTH_HERMES_URL": "https://hermes.example/",
    })
    assert config.rpc_url == "http://fork:8545"
    assert config.hermes_url == "https://hermes.example"
    assert config.load_deployment().address("CoreProxy").lower() == Addr.CORE_PROXY
