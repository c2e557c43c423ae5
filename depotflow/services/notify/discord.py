"""Discord webhook notifications for publish outcomes."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

import requests
from requests.exceptions import RequestException

from depotflow.core.logger import get_logger
from depotflow.services.steam.models import InvocationResult

LOGGER = get_logger()

DEFAULT_AUTHOR = "Steam Builder"
DEFAULT_TIMEOUT = 10.0
USER_AGENT = "depotflow/1.0"
BUILDS_PAGE_URL = "https://partner.steamgames.com/apps/builds/{app_id}"

COLOR_SUCCESS = 0x00FF00
COLOR_FAILURE = 0xFF0000

TITLE_SUCCESS = "Build uploaded to steam!"
TITLE_FAILURE = "Build failed to upload!"

Field = tuple[str, str]


def builds_page_url(app_id: int) -> str:
    return BUILDS_PAGE_URL.format(app_id=app_id)


def format_discord_timestamp(moment: datetime, style: str = "d") -> str:
    """Return Discord timestamp markup (``<t:unix:style>``) for ``moment``."""

    return f"<t:{int(moment.timestamp())}:{style}>"


def build_outcome_fields(result: InvocationResult, when: datetime) -> list[Field]:
    """Return the ordered labelled values describing an upload outcome."""

    target = result.target
    fields: list[Field] = [
        ("Build Target", result.build_target_key),
        ("App ID", str(target.app_id)),
        ("Depot ID", str(target.depot_id)),
        ("Branch", target.branch),
        ("Set Live", "Yes" if target.set_live else "No"),
    ]
    if not result.succeeded:
        fields.append(("Exit Code", str(result.exit_code)))
    fields.extend(
        [
            ("Duration", f"{result.duration_seconds:.2f} seconds"),
            ("Date", format_discord_timestamp(when)),
        ]
    )
    return fields


def format_fields(fields: Sequence[Field]) -> str:
    return "\n".join(f"**{label}:** {value}" for label, value in fields)


class DiscordWebhook:
    """Minimal Discord webhook transport."""

    def __init__(
        self,
        webhook_url: str,
        *,
        session: requests.Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        author: str = DEFAULT_AUTHOR,
        logger: logging.Logger | None = None,
    ) -> None:
        self.webhook_url = webhook_url
        self.author = author
        self._session = session or requests.Session()
        self._session.headers.setdefault("User-Agent", USER_AGENT)
        self._timeout = timeout
        self._logger = logger or LOGGER

    def build_payload(self, title: str, body: str, color: int, url: str | None) -> dict[str, object]:
        embed: dict[str, object] = {
            "author": {"name": self.author},
            "title": title,
            "description": body,
            "color": color,
        }
        if url:
            embed["url"] = url
        return {"embeds": [embed]}

    def send(self, title: str, body: str, color: int, url: str | None = None) -> bool:
        """POST a single embed. Returns False on transport errors or non-2xx replies."""

        payload = self.build_payload(title, body, color, url)
        try:
            response = self._session.post(self.webhook_url, json=payload, timeout=self._timeout)
        except RequestException as exc:
            self._logger.error(
                "discord.webhook request_failed error=%s message=%s",
                type(exc).__name__,
                exc,
            )
            return False
        if not 200 <= response.status_code < 300:
            self._logger.error(
                "discord.webhook rejected status=%d body=%s",
                response.status_code,
                _truncate(response.text),
            )
            return False
        return True

    def close(self) -> None:
        self._session.close()


class NotificationDispatcher:
    """Format outcome messages and hand them to the webhook transport.

    ``notify`` never raises: a missing destination, network errors and
    rejected requests are logged and dropped.
    """

    def __init__(self, webhook_url: str | None, *, client: DiscordWebhook | None = None) -> None:
        self.webhook_url = webhook_url
        self._client = client

    def notify(
        self,
        title: str,
        fields: Sequence[Field],
        link_url: str | None = None,
        color: int = COLOR_SUCCESS,
    ) -> None:
        if not self.webhook_url:
            LOGGER.warning("Discord webhook URL is not set. Skipping Discord notification.")
            return
        body = format_fields(fields)
        client = self._client or DiscordWebhook(self.webhook_url)
        try:
            delivered = client.send(title, body, color, link_url)
        except Exception as exc:  # noqa: BLE001
            LOGGER.error("Failed to send Discord notification: %s", exc, exc_info=True)
            return
        finally:
            if client is not self._client:
                client.close()
        if delivered:
            LOGGER.info("Sent Discord notification.")
        else:
            LOGGER.error("Failed to send Discord notification.")

    def notify_result(self, result: InvocationResult, when: datetime) -> None:
        """Send the success or failure message for an upload result."""

        fields = build_outcome_fields(result, when)
        if result.succeeded:
            self.notify(TITLE_SUCCESS, fields, builds_page_url(result.target.app_id), COLOR_SUCCESS)
        else:
            self.notify(TITLE_FAILURE, fields, None, COLOR_FAILURE)


def _truncate(text: str, limit: int = 200) -> str:
    if len(text) > limit:
        return text[:limit] + "..."
    return text


__all__ = [
    "COLOR_FAILURE",
    "COLOR_SUCCESS",
    "DiscordWebhook",
    "NotificationDispatcher",
    "TITLE_FAILURE",
    "TITLE_SUCCESS",
    "build_outcome_fields",
    "builds_page_url",
    "format_discord_timestamp",
    "format_fields",
]
