import dataclasses

import pytest
from eth_utils import to_checksum_address

from errors import InvalidArgument
from safe.proposal import build_proposal
from tests.conftest import CONTRACT_A


def test_build_proposal_checksums_destination_and_decodes_hex():
    p = build_proposal(CONTRACT_A, 0, "0xdeadbeef", 3)
    assert p.destination == to_checksum_address(CONTRACT_A)
    assert p.data == bytes.fromhex("deadbeef")
    assert p.nonce == 3
    assert p.to_dict()["value"] == "0"


def test_build_proposal_accepts_bytes_and_empty_data():
    assert build_proposal(CONTRACT_A, 1, b"\x01\x02", 0).data == b"\x01\x02"
    assert build_proposal(CONTRACT_A, 1, "0x", 0).data == b""


@pytest.mark.parametrize("destination", ["0xNEW", "0x1234", "", "not-an-address", None])
def test_build_proposal_rejects_malformed_destination(destination):
    with pytest.raises(InvalidArgument) as e:
        build_proposal(destination, 0, b"", 0)
    assert e.value.code == "invalid_argument"


def test_build_proposal_rejects_bad_checksum():
    bad = to_checksum_address(CONTRACT_A)
    # flip the case of one letter to break EIP-55
    i = next(i for i, c in enumerate(bad) if c.isalpha() and i > 1)
    broken = bad[:i] + bad[i].swapcase() + bad[i + 1:]
    with pytest.raises(InvalidArgument):
        build_proposal(broken, 0, b"", 0)


def test_build_proposal_rejects_negative_value_and_nonce():
    with pytest.raises(InvalidArgument):
        build_proposal(CONTRACT_A, -1, b"", 0)
    with pytest.raises(InvalidArgument):
        build_proposal(CONTRACT_A, 0, b"", -5)
    with pytest.raises(InvalidArgument):
        build_proposal(CONTRACT_A, 0, b"", True)


def test_build_proposal_rejects_non_hex_data():
    with pytest.raises(InvalidArgument):
        build_proposal(CONTRACT_A, 0, "0xzz", 0)


def test_proposal_is_immutable():
    p = build_proposal(CONTRACT_A, 0, b"", 0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        p.nonce = 1
