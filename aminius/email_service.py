"""
Email delivery via SMTP, Resend or the console (development)
Templates are MJML, compiled to HTML before they are queued
"""

import logging
import smtplib
import ssl
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Union

import resend
from mjml import mjml_to_html

from . import config

logger = logging.getLogger(__name__)

resend.api_key = config.RESEND_API_KEY


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        # mjml_to_html returns a mapping with 'html' and 'errors' keys
        if hasattr(result, "get"):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        return str(result)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise Exception(f"Failed to compile MJML template: {str(e)}") from e


def _bare_address(address: str) -> str:
    return address.split("<")[-1].rstrip(">").strip()


def send_via_smtp(recipients: list[str], subject: str, html_content: str, from_address: str) -> dict:
    """Send email through the configured SMTP server"""
    if not config.SMTP_HOST:
        raise Exception("SMTP_HOST is not configured")

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = from_address
    msg["To"] = ", ".join(recipients)
    msg.attach(MIMEText(html_content, "html"))

    if config.SMTP_PORT == 465:
        context = ssl.create_default_context()
        server = smtplib.SMTP_SSL(config.SMTP_HOST, config.SMTP_PORT, context=context, timeout=30)
    else:
        server = smtplib.SMTP(config.SMTP_HOST, config.SMTP_PORT, timeout=30)
        if config.SMTP_USE_TLS:
            server.starttls(context=ssl.create_default_context())

    try:
        if config.SMTP_USERNAME:
            server.login(config.SMTP_USERNAME, config.SMTP_PASSWORD)
        server.sendmail(_bare_address(from_address), recipients, msg.as_string())
    finally:
        server.quit()

    logger.info(f"✅ SMTP email sent via {config.SMTP_HOST}")
    return {"id": f"smtp-{datetime.utcnow().timestamp()}", "success": True}


def send_via_resend(recipients: list[str], subject: str, html_content: str, from_address: str) -> dict:
    if not config.RESEND_API_KEY:
        raise Exception("Email service not configured - RESEND_API_KEY missing")

    response = resend.Emails.send(
        {
            "from": from_address,
            "to": recipients,
            "subject": subject,
            "html": html_content,
        }
    )
    logger.info(f"✅ Email sent successfully via Resend: {response}")
    return response


async def send_email(to: Union[str, list[str]], subject: str, html_content: str) -> dict:
    """
    Send an already rendered HTML email with the configured backend.

    Raises:
        Exception: If the backend is misconfigured or the provider rejects the message
    """
    recipients = [to] if isinstance(to, str) else to
    sender = config.EMAIL_FROM_ADDRESS
    backend = config.EMAIL_BACKEND

    if backend == "console":
        logger.info(f"📧 [console] To: {', '.join(recipients)} | Subject: {subject}")
        logger.debug(html_content)
        return {"id": f"console-{datetime.utcnow().timestamp()}", "success": True}

    try:
        logger.info(f"📧 Sending email via {backend} to: {recipients}")
        if backend == "smtp":
            return send_via_smtp(recipients, subject, html_content, sender)
        if backend == "resend":
            return send_via_resend(recipients, subject, html_content, sender)
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise Exception(f"Failed to send email: {str(e)}") from e

    raise Exception(f"Unknown EMAIL_BACKEND: {backend}")
