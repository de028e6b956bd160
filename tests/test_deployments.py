import json
from pathlib import Path

import pytest
from eth_utils import to_checksum_address

from app.core.deployments import OWNABLE_PATHS, DeploymentConfig, load_config
from errors import InvalidArgument

CONFIGS = Path(__file__).resolve().parents[1] / "configs"


def test_load_bundled_config():
    cfg = load_config(42161, CONFIGS)
    assert cfg.safe == to_checksum_address("0x6409ba830719cd0fe27ccb3051df1b399c90df4a")
    contracts = cfg.ownable_contracts()
    assert len(contracts) == len(OWNABLE_PATHS)
    assert contracts[0] == cfg.require("storages.config")
    assert contracts[-1] == cfg.require("rewardDistributor")


def test_missing_entries_are_skipped_or_rejected():
    cfg = DeploymentConfig(1, {"safe": "0x" + "11" * 20, "storages": {"config": "0x" + "22" * 20}})
    assert cfg.ownable_contracts() == ["0x" + "22" * 20]
    assert cfg.get("storages") is None
    assert cfg.get("oracles.middleware") is None
    with pytest.raises(InvalidArgument):
        cfg.require("oracles.middleware")


def test_malformed_address_in_config():
    cfg = DeploymentConfig(1, {"safe": "0xNEW"})
    with pytest.raises(InvalidArgument):
        cfg.safe


def test_missing_or_broken_file(tmp_path):
    with pytest.raises(InvalidArgument):
        load_config(10, tmp_path)
    (tmp_path / "10.json").write_text("{not json")
    with pytest.raises(InvalidArgument):
        load_config(10, tmp_path)
    (tmp_path / "10.json").write_text(json.dumps({"safe": "0x" + "11" * 20}))
    assert load_config(10, tmp_path).chain_id == 10
