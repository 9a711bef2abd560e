"""
Notification Dispatcher

Delivers a finished episode to its recipient through exactly one channel:

1. Push (LINE Messaging API) when the recipient has a linked push account
   and the push credential is configured. Email is then never looked up.
2. Email (Resend-compatible API) when an address and the email credential exist.
3. Otherwise the delivery is reported as MissingRecipientChannel.

The dispatcher never raises. Directory and transport failures come back as
DeliveryResult(success=False, error=...). Every dispatch attempt gets a fresh
UUID4 idempotency token.
"""

import asyncio
import html
import logging
import uuid
from typing import Any, Dict, Optional

import aiohttp

from episode_studio.config.limits import (
    PUSH_PREVIEW_LENGTH,
    EMAIL_PREVIEW_LENGTH,
    PREVIEW_ELLIPSIS,
    PUSH_TITLE_MAX_LENGTH,
)
from episode_studio.models import DeliveryResult
from episode_studio.services.directory import RecipientDirectory
from episode_studio.services.errors import ExternalDependencyError, MISSING_RECIPIENT_CHANNEL

logger = logging.getLogger(__name__)

NOTIFICATION_TITLE = "A new episode has arrived"
DEEP_LINK_LABEL = "Read the episode"


def make_preview(content: str, length: int) -> str:
    """First `length` characters of content followed by an ellipsis."""
    return content[:length] + PREVIEW_ELLIPSIS


def content_to_html(content: str) -> str:
    """Escape content for embedding in HTML, newlines become <br>."""
    return html.escape(content).replace("\r\n", "\n").replace("\n", "<br>")


async def _post_json(
    dependency: str,
    url: str,
    payload: Dict[str, Any],
    headers: Dict[str, str],
    timeout_seconds: int
) -> Dict[str, Any]:
    """POST JSON and return the decoded body, raising ExternalDependencyError on failure."""
    try:
        async with aiohttp.ClientSession() as session:
            async with session.post(
                url,
                json=payload,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=timeout_seconds)
            ) as response:
                if response.status >= 400:
                    body = await response.text()
                    raise ExternalDependencyError(
                        dependency, f"HTTP {response.status}: {body[:200]}", status_code=response.status
                    )
                try:
                    return await response.json(content_type=None) or {}
                except ValueError:
                    return {}
    except aiohttp.ClientError as e:
        raise ExternalDependencyError(dependency, f"request failed: {e}") from e
    except asyncio.TimeoutError as e:
        raise ExternalDependencyError(dependency, "request timed out") from e


class PushMessageTransport:
    """LINE Messaging API push with a buttons template card"""

    name = "push_transport"

    def __init__(
        self,
        access_token: str,
        endpoint: str,
        deep_link_url: str,
        timeout_seconds: int = 30
    ):
        self.access_token = access_token
        self.endpoint = endpoint
        self.deep_link_url = deep_link_url
        self.timeout_seconds = timeout_seconds

    def build_payload(self, push_account_id: str, content: str) -> Dict[str, Any]:
        preview = make_preview(content, PUSH_PREVIEW_LENGTH)
        return {
            "to": push_account_id,
            "messages": [
                {
                    "type": "template",
                    "altText": preview,
                    "template": {
                        "type": "buttons",
                        "title": NOTIFICATION_TITLE[:PUSH_TITLE_MAX_LENGTH],
                        "text": preview,
                        "actions": [
                            {
                                "type": "uri",
                                "label": DEEP_LINK_LABEL,
                                "uri": self.deep_link_url,
                            }
                        ],
                    },
                }
            ],
        }

    async def send(self, push_account_id: str, content: str, idempotency_key: str) -> Optional[str]:
        """
        Push the card. Returns the request id reported by the API, if any.

        Raises:
            ExternalDependencyError: on HTTP or network failure
        """
        body = await _post_json(
            self.name,
            self.endpoint,
            self.build_payload(push_account_id, content),
            headers={
                "Authorization": f"Bearer {self.access_token}",
                "X-Line-Retry-Key": idempotency_key,
            },
            timeout_seconds=self.timeout_seconds,
        )
        sent = body.get("sentMessages") or []
        if sent and isinstance(sent[0], dict) and sent[0].get("id"):
            return str(sent[0]["id"])
        return idempotency_key


class EmailTransport:
    """Resend-compatible HTTP email API"""

    name = "email_transport"

    def __init__(
        self,
        api_key: str,
        endpoint: str,
        from_address: str,
        timeout_seconds: int = 30
    ):
        self.api_key = api_key
        self.endpoint = endpoint
        self.from_address = from_address
        self.timeout_seconds = timeout_seconds

    def build_payload(self, email_address: str, content: str) -> Dict[str, Any]:
        preview = make_preview(content, EMAIL_PREVIEW_LENGTH)
        html_body = (
            f"<h2>{html.escape(NOTIFICATION_TITLE)}</h2>"
            f"<p>{html.escape(preview)}</p>"
            f"<hr>"
            f"<div>{content_to_html(content)}</div>"
        )
        return {
            "from": self.from_address,
            "to": [email_address],
            "subject": NOTIFICATION_TITLE,
            "html": html_body,
        }

    async def send(self, email_address: str, content: str, idempotency_key: str) -> Optional[str]:
        """
        Send the email. Returns the message id reported by the API, if any.

        Raises:
            ExternalDependencyError: on HTTP or network failure
        """
        body = await _post_json(
            self.name,
            self.endpoint,
            self.build_payload(email_address, content),
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Idempotency-Key": idempotency_key,
            },
            timeout_seconds=self.timeout_seconds,
        )
        return body.get("id")


class NotificationDispatcher:
    """Chooses a channel for the recipient and delivers through it"""

    def __init__(
        self,
        directory: Optional[RecipientDirectory],
        push_transport: Optional[PushMessageTransport] = None,
        email_transport: Optional[EmailTransport] = None
    ):
        """
        Args:
            directory: Recipient lookups; None means no recipient can be resolved
            push_transport: None when the push credential is not configured
            email_transport: None when the email credential is not configured
        """
        self.directory = directory
        self.push_transport = push_transport
        self.email_transport = email_transport

    @classmethod
    def from_settings(cls, settings) -> "NotificationDispatcher":
        push_transport = None
        if settings.line_channel_access_token:
            push_transport = PushMessageTransport(
                access_token=settings.line_channel_access_token,
                endpoint=settings.line_push_endpoint,
                deep_link_url=settings.episode_deep_link_url,
                timeout_seconds=settings.notification_timeout_seconds,
            )

        email_transport = None
        if settings.email_api_key:
            email_transport = EmailTransport(
                api_key=settings.email_api_key,
                endpoint=settings.email_endpoint,
                from_address=settings.email_from_address,
                timeout_seconds=settings.notification_timeout_seconds,
            )

        return cls(
            directory=RecipientDirectory.from_settings(settings),
            push_transport=push_transport,
            email_transport=email_transport,
        )

    def close(self):
        if self.directory is not None:
            self.directory.close()

    async def notify(self, content: str, recipient_id: str) -> DeliveryResult:
        """
        Deliver content to a recipient.

        Args:
            content: Final episode text
            recipient_id: Recipient key in the directory

        Returns:
            DeliveryResult; failures are reported, never raised
        """
        idempotency_key = str(uuid.uuid4())

        if self.directory is None:
            logger.warning("📭 Recipient directory not configured")
            return DeliveryResult(success=False, error=MISSING_RECIPIENT_CHANNEL)

        channel = None
        try:
            if self.push_transport is not None:
                push_account_id = await self.directory.get_push_account_id(recipient_id)
                if push_account_id:
                    channel = "push"
                    message_id = await self.push_transport.send(push_account_id, content, idempotency_key)
                    logger.info(f"📨 Push delivered to {recipient_id}")
                    return DeliveryResult(success=True, channel=channel, message_id=message_id)

            if self.email_transport is not None:
                email_address = await self.directory.get_email_address(recipient_id)
                if email_address:
                    channel = "email"
                    message_id = await self.email_transport.send(email_address, content, idempotency_key)
                    logger.info(f"📧 Email delivered to {recipient_id}")
                    return DeliveryResult(success=True, channel=channel, message_id=message_id)

        except ExternalDependencyError as e:
            logger.error(f"❌ Delivery to {recipient_id} failed: {e}")
            return DeliveryResult(success=False, channel=channel, error=str(e))
        except Exception as e:
            logger.error(f"❌ Unexpected delivery error for {recipient_id}: {type(e).__name__}: {e}")
            return DeliveryResult(success=False, channel=channel, error=f"{type(e).__name__}: {e}")

        logger.warning(f"📭 No delivery channel for {recipient_id}")
        return DeliveryResult(success=False, error=MISSING_RECIPIENT_CHANNEL)
