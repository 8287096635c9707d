"""
Channel senders used by the outbox dispatcher.

Each sender takes a Notification row and either returns normally (delivered)
or raises (the dispatcher records the error and schedules a retry).
"""

import logging

import httpx

from ... import config
from ...email_service import send_email
from ...models import Notification

logger = logging.getLogger(__name__)

TWILIO_MESSAGES_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"


class DeliveryError(Exception):
    """Provider rejected or could not be reached"""


async def send_email_notification(notification: Notification) -> None:
    await send_email(
        to=notification.recipient,
        subject=notification.subject or "AminiUs notification",
        html_content=notification.body,
    )


async def _send_twilio_message(to: str, from_: str, body: str) -> str:
    account_sid = config.TWILIO_ACCOUNT_SID
    auth_token = config.TWILIO_AUTH_TOKEN
    if not account_sid or not auth_token or not from_:
        raise DeliveryError("Twilio credentials are not configured")

    async with httpx.AsyncClient() as client:
        response = await client.post(
            TWILIO_MESSAGES_URL.format(sid=account_sid),
            auth=(account_sid, auth_token),
            data={"To": to, "From": from_, "Body": body},
            timeout=10.0,
        )

    logger.info(f"📡 Twilio API response status: {response.status_code}")
    if response.status_code not in (200, 201):
        raise DeliveryError(f"Twilio error {response.status_code}: {response.text[:200]}")
    return response.json().get("sid")


async def send_sms_notification(notification: Notification) -> None:
    sid = await _send_twilio_message(
        notification.recipient, config.TWILIO_FROM_NUMBER, notification.body
    )
    logger.info(f"✅ SMS sent to {notification.recipient}: {sid}")


async def send_whatsapp_notification(notification: Notification) -> None:
    to = notification.recipient
    if not to.startswith("whatsapp:"):
        to = f"whatsapp:{to}"
    from_ = config.TWILIO_WHATSAPP_FROM
    if from_ and not from_.startswith("whatsapp:"):
        from_ = f"whatsapp:{from_}"
    sid = await _send_twilio_message(to, from_, notification.body)
    logger.info(f"✅ WhatsApp message sent to {notification.recipient}: {sid}")


async def send_push_notification(notification: Notification) -> None:
    if not config.PUSH_WEBHOOK_URL:
        logger.info(f"🔔 [console] Push to {notification.recipient}: {notification.subject}")
        return

    async with httpx.AsyncClient() as client:
        response = await client.post(
            config.PUSH_WEBHOOK_URL,
            json={
                "recipient": notification.recipient,
                "title": notification.subject,
                "body": notification.body,
                "notificationId": notification.notification_id,
            },
            timeout=10.0,
        )
    if response.status_code >= 400:
        raise DeliveryError(f"Push webhook returned {response.status_code}")


# Channel -> sender. Tests swap entries for in-memory fakes.
SENDERS = {
    "Email": send_email_notification,
    "SMS": send_sms_notification,
    "WhatsApp": send_whatsapp_notification,
    "Push": send_push_notification,
}
