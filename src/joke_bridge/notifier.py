"""Out-of-band notification sent after an NFT has been bridged and burned."""

from __future__ import annotations

import logging

import requests

from .evm.config import NotifierConfig
from .types import JokePayload

logger = logging.getLogger(__name__)

# Characters that keep their meaning inside a double-quoted shell word.
_SHELL_DQUOTE_SPECIAL = ("\\", '"', "$", "`")


def escape_double_quoted(text: str) -> str:
    for char in _SHELL_DQUOTE_SPECIAL:
        text = text.replace(char, "\\" + char)
    return text


class CommandNotifier:
    """POST the burned joke to the command-execution endpoint."""

    def __init__(
        self,
        config: NotifierConfig,
        session: requests.Session,
        *,
        request_timeout: float,
    ) -> None:
        self._config = config
        self._session = session
        self._request_timeout = request_timeout

    def build_command(self, joke: JokePayload) -> str:
        return self._config.command_template.format(text=escape_double_quoted(joke.text))

    def notify(self, joke: JokePayload) -> bool:
        if not self._config.enabled:
            logger.debug("Notification disabled; skipping")
            return False

        command = self.build_command(joke)
        try:
            response = self._session.post(
                self._config.endpoint,
                json={"command": command},
                timeout=self._request_timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Notification to %s failed: %s", self._config.endpoint, exc)
            return False

        logger.info("Notification dispatched to %s", self._config.endpoint)
        return True
