"""
Email Service
Relays transactional emails through SendGrid or SMTP
"""
import asyncio
import logging
import re
import smtplib
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from typing import Optional, Dict, Any

import httpx

from app.core.config import settings
from app.core.exceptions import EmailDeliveryError, EmailValidationError
from app.schemas.email import SendEmailRequest

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]*>")


def strip_html(html: Optional[str]) -> Optional[str]:
    if html is None:
        return None
    return _TAG_RE.sub("", html)


def validate_email_request(request: SendEmailRequest) -> None:
    if not request.to:
        raise EmailValidationError("Recipient email is required")
    if not request.template_id and not request.subject:
        raise EmailValidationError("Subject is required when not using template")


async def send_email_sendgrid(
    request: SendEmailRequest,
    api_key: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Dict[str, Any]:
    """
    Send email using the SendGrid v3 Mail Send API

    Args:
        request: Recipient, subject and content, or a dynamic template id
        api_key: SendGrid API key (defaults to settings)
        transport: Optional httpx transport override

    Returns:
        Dict with status and recipient
    """
    api_key = api_key or settings.SENDGRID_API_KEY
    if not api_key:
        raise EmailDeliveryError("SendGrid API key is not configured. Please set SENDGRID_API_KEY in settings.")

    personalization: Dict[str, Any] = {"to": [{"email": request.to}]}
    payload: Dict[str, Any] = {
        "from": {"email": settings.SENDGRID_FROM_EMAIL, "name": settings.SENDGRID_FROM_NAME},
        "personalizations": [personalization],
    }

    if request.template_id:
        payload["template_id"] = request.template_id
        personalization["dynamic_template_data"] = request.dynamic_template_data or {}
    else:
        payload["subject"] = request.subject
        content = []
        text = request.text or strip_html(request.html)
        if text:
            content.append({"type": "text/plain", "value": text})
        if request.html:
            content.append({"type": "text/html", "value": request.html})
        if not content:
            raise EmailValidationError("Either text or html content must be provided")
        payload["content"] = content

    async with httpx.AsyncClient(transport=transport, timeout=30.0) as client:
        try:
            response = await client.post(
                settings.SENDGRID_API_URL,
                json=payload,
                headers={"Authorization": f"Bearer {api_key}"},
            )
        except httpx.HTTPError as e:
            logger.error("[EMAIL SERVICE] SendGrid request failed: %s", e)
            raise EmailDeliveryError(f"SendGrid request failed: {e}")

    if response.is_error:
        logger.error("[EMAIL SERVICE] SendGrid error %s: %s", response.status_code, response.text)
        raise EmailDeliveryError(
            f"SendGrid error: {response.status_code}",
            details=response.text,
        )

    logger.info("[EMAIL SERVICE] Successfully sent email to %s via SendGrid", request.to)
    return {
        "message_id": response.headers.get("x-message-id"),
        "status": "sent",
        "to": request.to,
    }


def _send_smtp_message(msg: MIMEMultipart) -> None:
    if settings.SMTP_USE_TLS:
        server = smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT)
        server.starttls()
    else:
        server = smtplib.SMTP_SSL(settings.SMTP_HOST, settings.SMTP_PORT)
    try:
        server.login(settings.SMTP_USER, settings.SMTP_PASSWORD)
        server.send_message(msg)
    finally:
        server.quit()


async def send_email_smtp(request: SendEmailRequest) -> Dict[str, Any]:
    """
    Send email using SMTP

    Dynamic templates are a SendGrid feature and are rejected here.
    """
    if not all([settings.SMTP_HOST, settings.SMTP_PORT, settings.SMTP_USER, settings.SMTP_PASSWORD]):
        raise EmailDeliveryError("SMTP credentials are not configured. Please set SMTP_HOST, SMTP_PORT, SMTP_USER, and SMTP_PASSWORD in settings.")
    if request.template_id:
        raise EmailValidationError("Email templates require the SendGrid provider")

    msg = MIMEMultipart('alternative')
    msg['Subject'] = request.subject
    msg['From'] = f"{settings.SENDGRID_FROM_NAME} <{settings.SENDGRID_FROM_EMAIL}>"
    msg['To'] = request.to

    text = request.text or strip_html(request.html)
    if text:
        msg.attach(MIMEText(text, 'plain'))
    if request.html:
        msg.attach(MIMEText(request.html, 'html'))
    if not text and not request.html:
        raise EmailValidationError("Either text or html content must be provided")

    try:
        await asyncio.to_thread(_send_smtp_message, msg)
    except smtplib.SMTPAuthenticationError as e:
        logger.error("[EMAIL SERVICE] SMTP Authentication failed: %s", e)
        raise EmailDeliveryError("SMTP authentication failed. Please check SMTP credentials.")
    except (smtplib.SMTPException, OSError) as e:
        logger.error("[EMAIL SERVICE] SMTP error: %s", e)
        raise EmailDeliveryError(f"Failed to send email: {e}")

    logger.info("[EMAIL SERVICE] Successfully sent email to %s via SMTP", request.to)
    return {
        "message_id": msg['Message-ID'] if 'Message-ID' in msg else None,
        "status": "sent",
        "to": request.to,
    }


async def send_email(request: SendEmailRequest, transport: Optional[httpx.AsyncBaseTransport] = None) -> Dict[str, Any]:
    validate_email_request(request)
    if settings.EMAIL_PROVIDER == "smtp":
        return await send_email_smtp(request)
    return await send_email_sendgrid(request, transport=transport)
