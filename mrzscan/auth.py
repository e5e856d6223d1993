"""
Time-bounded cache for vendor access tokens.

An HTTP client that needs a bearer token owns one TokenCache and calls
get() before each request. The cache refreshes through the supplied fetch
callable when the token is missing or about to expire.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

logger = logging.getLogger(__name__)

# Expiry timestamps above this are epoch milliseconds.
_MILLIS_THRESHOLD = 10 ** 12


@dataclass(frozen=True)
class CachedToken:
	value: str
	expires_at: float


class TokenCache:
	def __init__(
		self,
		fetch: Callable[[], Tuple[str, float]],
		clock: Callable[[], float] = time.time,
		leeway: float = 30,
	):
		self._fetch = fetch
		self._clock = clock
		self._leeway = leeway
		self._token: Optional[CachedToken] = None

	@property
	def token(self) -> Optional[CachedToken]:
		return self._token

	def _valid(self) -> bool:
		return self._token is not None and self._token.expires_at - self._leeway > self._clock()

	def get(self) -> str:
		"""Return a live token, fetching a new one on miss or expiry."""
		if self._valid():
			return self._token.value

		logger.info("Fetching new access token")
		value, expires_at = self._fetch()
		if not value:
			raise ValueError("Token fetch returned an empty access token")
		if expires_at > _MILLIS_THRESHOLD:
			expires_at = expires_at / 1000
		self._token = CachedToken(value=value, expires_at=float(expires_at))
		logger.debug("Access token valid until %s", self._token.expires_at)
		return value

	def invalidate(self) -> None:
		self._token = None
