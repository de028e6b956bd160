from __future__ import annotations

import asyncio
from typing import List, Optional, Protocol

from errors import InvalidArgument


class NextNonceSource(Protocol):
    def get_next_nonce(self, safe_address: str) -> int: ...


class NonceCursor:
    """
    Hands out consecutive nonces for exactly one batch.

    The cursor is the single writer of nonces inside a batch; two batches against
    the same account must be serialized by the caller.
    """

    def __init__(self, start: int) -> None:
        if isinstance(start, bool) or not isinstance(start, int) or start < 0:
            raise InvalidArgument("Starting nonce must be a non-negative integer", {"start": start})
        self._next = start
        self.issued: List[int] = []

    @property
    def next_value(self) -> int:
        return self._next

    def take(self) -> int:
        n = self._next
        self._next += 1
        self.issued.append(n)
        return n


class NonceResolver:
    def __init__(self, service: NextNonceSource, safe_address: str) -> None:
        self._service = service
        self._safe_address = safe_address

    async def resolve(self, explicit_nonce: Optional[int] = None) -> int:
        """
        An explicit nonce (0 included) is returned as-is and the service is never asked.
        Otherwise the service's next nonce is fetched; failures propagate unretried.
        """
        if explicit_nonce is not None:
            if isinstance(explicit_nonce, bool) or not isinstance(explicit_nonce, int) or explicit_nonce < 0:
                raise InvalidArgument("Explicit nonce must be a non-negative integer", {"nonce": explicit_nonce})
            return explicit_nonce
        return await asyncio.to_thread(self._service.get_next_nonce, self._safe_address)
