import os
import sys

import pytest

# Add project root to path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from signing.env_private_key import EnvPrivateKeySigner

# Well-known throwaway key (eth-account docs); never funded.
TEST_PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"

SAFE_ADDRESS = "0x6409ba830719cd0fe27ccb3051df1b399c90df4a"
CONTRACT_A = "0xf4f7123ffe42c4c90a4bcdd2317d397e0b7d7cc0"
CONTRACT_B = "0x97e94bda44a2df784ab6535aae2d62efc6d2e303"
CONTRACT_C = "0x56cc5a9c0788e674f17f7555dc8d3e2f1c0313c0"
NEW_OWNER = "0x1111111111111111111111111111111111111111"


@pytest.fixture
def local_signer(monkeypatch):
    monkeypatch.setenv("PRIVATE_KEY", TEST_PRIVATE_KEY)
    return EnvPrivateKeySigner()


@pytest.fixture(autouse=True)
def _no_signer_policy(monkeypatch):
    for k in list(os.environ.keys()):
        if k.startswith("SIGNER_"):
            monkeypatch.delenv(k, raising=False)
