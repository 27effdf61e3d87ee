"""Configuration for the rewards e2e harness.

Environment variables (a local `.env` is honoured, the real environment wins):

* ``RPC_URL`` - JSON-RPC endpoint of the forked node
* ``E2E_DEPLOYMENTS_DIR`` - directory holding ``meta.json`` and ``extras.json``
* ``PYTH_HERMES_URL`` - Pyth price service used for oracle attestations
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from dotenv import load_dotenv
from eth_utils import is_address, to_checksum_address

from .constants import DEFAULT_HERMES_URL, DEFAULT_RPC_URL, TOKEN_CONTRACTS
from .errors import ConfigError

load_dotenv(override=False)

RPC_URL_ENV = "RPC_URL"
DEPLOYMENTS_DIR_ENV = "E2E_DEPLOYMENTS_DIR"
HERMES_URL_ENV = "PYTH_HERMES_URL"

DEFAULT_DEPLOYMENTS_DIR = Path("deployments")
META_FILE = "meta.json"
EXTRAS_FILE = "extras.json"


def _read_json(path: Path) -> Any:
    try:
        with path.open("r") as fh:
            return json.load(fh)
    except FileNotFoundError as exc:
        raise ConfigError(f"Missing deployment file {path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Failed to decode JSON in {path}: {exc}") from exc


@dataclass(frozen=True)
class Deployment:
    """Read-only view over the deployment manifest and its extras."""

    contracts: Mapping[str, str]
    extras: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def load(cls, directory: Path | str) -> "Deployment":
        directory = Path(directory)
        meta = _read_json(directory / META_FILE)
        contracts = dict(meta.get("contracts", {}))

        # per-contract artifacts ({"address": ...}) fill names missing from meta.json
        for artifact in sorted(directory.glob("*.json")):
            if artifact.name in (META_FILE, EXTRAS_FILE) or artifact.stem in contracts:
                continue
            data = _read_json(artifact)
            if isinstance(data, dict) and "address" in data:
                contracts[artifact.stem] = data["address"]

        extras_path = directory / EXTRAS_FILE
        extras = _read_json(extras_path) if extras_path.exists() else {}
        return cls(contracts=contracts, extras=extras)

    def address(self, name: str) -> str:
        try:
            value = self.contracts[name]
        except KeyError as exc:
            raise ConfigError(f"Contract {name} is not in the deployment manifest") from exc
        if not is_address(value):
            raise ConfigError(f"Contract {name} has invalid address {value!r}")
        return to_checksum_address(value)

    def token_address(self, symbol: str) -> str:
        try:
            name = TOKEN_CONTRACTS[symbol]
        except KeyError as exc:
            raise ConfigError(f"Unknown token symbol {symbol}") from exc
        return self.address(name)

    def extra(self, name: str) -> Any:
        try:
            return self.extras[name]
        except KeyError as exc:
            raise ConfigError(f"{name} is not in {EXTRAS_FILE}") from exc

    def extra_int(self, name: str) -> int:
        value = self.extra(name)
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"{name}={value!r} is not an integer") from exc


@dataclass(frozen=True)
class HarnessConfig:
    rpc_url: str = DEFAULT_RPC_URL
    deployments_dir: Path = DEFAULT_DEPLOYMENTS_DIR
    hermes_url: str = DEFAULT_HERMES_URL

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "HarnessConfig":
        env = os.environ if environ is None else environ
        return cls(
            rpc_url=env.get(RPC_URL_ENV) or DEFAULT_RPC_URL,
            deployments_dir=Path(env.get(DEPLOYMENTS_DIR_ENV) or DEFAULT_DEPLOYMENTS_DIR),
            hermes_url=(env.get(HERMES_URL_ENV) or DEFAULT_HERMES_URL).rstrip("/"),
        )

    def load_deployment(self) -> Deployment:
        return Deployment.load(self.deployments_dir)
