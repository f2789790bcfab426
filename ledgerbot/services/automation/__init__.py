"""External automation integration."""

from ledgerbot.services.automation.gateway import ReplyGateway
from ledgerbot.services.automation.webhook import AutomationWebhook

__all__ = ["AutomationWebhook", "ReplyGateway"]
