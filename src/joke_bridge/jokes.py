"""Client for the public random-joke API."""

from __future__ import annotations

import logging

import requests

from .exceptions import NetworkError, ValidationError
from .types import JokePayload

logger = logging.getLogger(__name__)


class JokeSource:
    def __init__(self, url: str, session: requests.Session, *, request_timeout: float) -> None:
        self._url = url
        self._session = session
        self._request_timeout = request_timeout

    def fetch(self) -> JokePayload:
        try:
            response = self._session.get(self._url, timeout=self._request_timeout)
            response.raise_for_status()
            data = response.json()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            raise NetworkError(
                "Joke API returned an error", endpoint=self._url, status_code=status
            ) from exc
        except (requests.RequestException, ValueError) as exc:
            raise NetworkError(
                "Failed to fetch joke", endpoint=self._url, details={"error": str(exc)}
            ) from exc

        if not isinstance(data, dict) or not data.get("setup") or not data.get("punchline"):
            raise ValidationError("Joke API response is missing setup or punchline", value=data)

        joke = JokePayload.from_dict(data)
        logger.debug("Fetched joke: %s", joke.setup)
        return joke
