"""Slack-compatible webhook client for sending alerts."""

import httpx
import structlog

log = structlog.get_logger()


class SlackClient:
    """Simple incoming-webhook client.

    Posts ``{"text": body}``, which Slack, Mattermost and Rocket.Chat
    incoming webhooks all accept.
    """

    name = "slack"

    def __init__(self, webhook_url: str, timeout: float = 10.0):
        self.webhook_url = webhook_url
        self.timeout = timeout

    def send(self, subject: str, body: str) -> bool:
        """Send an alert body to the webhook.

        Args:
            subject: Unused, chat messages carry the body only
            body: Message text

        Returns:
            True if successful, False otherwise
        """
        try:
            response = httpx.post(
                self.webhook_url,
                json={"text": body},
                timeout=self.timeout,
            )
            response.raise_for_status()
            log.info("Slack notification sent")
            return True
        except httpx.HTTPStatusError as e:
            log.error("Slack webhook error", status=e.response.status_code)
            return False
        except httpx.RequestError as e:
            log.error("Slack request failed", error=str(e))
            return False
