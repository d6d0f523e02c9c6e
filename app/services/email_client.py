# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Service: Email transport clients.

send() is best-effort: it returns True when the provider accepted the
message and False otherwise. Failures are logged but never raised.
"""

from typing import Protocol

import httpx

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)


class EmailTransport(Protocol):
    def send(self, recipient: str, subject: str, html: str) -> bool: ...


class HttpEmailClient:
    """Posts messages to a JSON email API (`from`, `to`, `subject`, `html`)."""

    def __init__(
        self,
        api_url: str,
        api_key: str = "",
        sender: str = settings.EMAIL_FROM,
        timeout: float = settings.EMAIL_TIMEOUT,
    ) -> None:
        self._api_url = api_url
        self._api_key = api_key
        self._sender = sender
        self._timeout = timeout

    def send(self, recipient: str, subject: str, html: str) -> bool:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"
        try:
            with httpx.Client(timeout=self._timeout) as client:
                resp = client.post(
                    self._api_url,
                    headers=headers,
                    json={
                        "from": self._sender,
                        "to": [recipient],
                        "subject": subject,
                        "html": html,
                    },
                )
            if resp.status_code < 300:
                logger.info("Email accepted for %s (status=%s)", recipient, resp.status_code)
                return True
            logger.warning(
                "Email API returned %s for %s: %s",
                resp.status_code, recipient, resp.text[:200],
            )
        except Exception as exc:
            logger.warning("Email delivery to %s failed: %s", recipient, exc)
        return False


class LogEmailClient:
    """Mock transport — logs the message instead of sending it."""

    def __init__(self, max_size: int = 1000) -> None:
        self.sent: list[dict[str, str]] = []
        self._max_size = max_size

    def send(self, recipient: str, subject: str, html: str) -> bool:
        logger.info("[MOCK EMAIL] To: %s | Subject: %s", recipient, subject)
        self.sent.append({"recipient": recipient, "subject": subject, "html": html})
        if len(self.sent) > self._max_size:
            del self.sent[: len(self.sent) - self._max_size]
        return True


def build_email_transport() -> EmailTransport:
    if settings.EMAIL_API_URL:
        return HttpEmailClient(
            settings.EMAIL_API_URL,
            api_key=settings.EMAIL_API_KEY,
            sender=settings.EMAIL_FROM,
            timeout=settings.EMAIL_TIMEOUT,
        )
    logger.info("EMAIL_API_URL not set — reminders go to the mock email channel")
    return LogEmailClient()
