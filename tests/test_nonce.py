from unittest.mock import MagicMock

import pytest

from errors import InvalidArgument, ServiceUnavailable
from safe.nonce import NonceCursor, NonceResolver
from tests.conftest import SAFE_ADDRESS


@pytest.mark.asyncio
async def test_explicit_nonce_skips_service():
    service = MagicMock()
    resolver = NonceResolver(service, SAFE_ADDRESS)
    assert await resolver.resolve(17) == 17
    assert await resolver.resolve(0) == 0
    service.get_next_nonce.assert_not_called()


@pytest.mark.asyncio
async def test_missing_nonce_is_fetched_from_service():
    service = MagicMock()
    service.get_next_nonce.return_value = 42
    resolver = NonceResolver(service, SAFE_ADDRESS)
    assert await resolver.resolve() == 42
    service.get_next_nonce.assert_called_once_with(SAFE_ADDRESS)


@pytest.mark.asyncio
async def test_service_failure_propagates_without_retry():
    service = MagicMock()
    service.get_next_nonce.side_effect = ServiceUnavailable("down")
    resolver = NonceResolver(service, SAFE_ADDRESS)
    with pytest.raises(ServiceUnavailable):
        await resolver.resolve()
    assert service.get_next_nonce.call_count == 1


@pytest.mark.asyncio
async def test_negative_explicit_nonce_rejected():
    resolver = NonceResolver(MagicMock(), SAFE_ADDRESS)
    with pytest.raises(InvalidArgument):
        await resolver.resolve(-1)


def test_cursor_issues_strictly_increasing_values():
    c = NonceCursor(7)
    assert [c.take() for _ in range(4)] == [7, 8, 9, 10]
    assert c.issued == [7, 8, 9, 10]
    assert c.next_value == 11


def test_cursor_rejects_bad_start():
    with pytest.raises(InvalidArgument):
        NonceCursor(-1)
