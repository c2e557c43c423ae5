"""Chat notifications for publish outcomes."""

from .discord import (
    COLOR_FAILURE,
    COLOR_SUCCESS,
    DiscordWebhook,
    NotificationDispatcher,
    build_outcome_fields,
)


__all__ = [
    "COLOR_FAILURE",
    "COLOR_SUCCESS",
    "DiscordWebhook",
    "NotificationDispatcher",
    "build_outcome_fields",
]
