"""
Unified Email Service using custom SMTP or Resend (fallback)
Provides appointment emails using MJML templates for responsive design
"""

import asyncio
import logging
import smtplib
import ssl
from datetime import datetime, timezone
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import parseaddr
from typing import Optional, Union

import resend
from mjml import mjml2html as mjml_to_html

from .config import (
    ADMIN_EMAIL,
    EMAIL_FROM_ADDRESS,
    RESEND_API_KEY,
    SMTP_HOST,
    SMTP_PASSWORD,
    SMTP_PORT,
    SMTP_USE_TLS,
    SMTP_USERNAME,
)
from .email_templates import (
    appointment_confirmation_template,
    appointment_confirmation_text,
    new_appointment_admin_template,
    new_appointment_admin_text,
)

logger = logging.getLogger(__name__)

# Initialize Resend as fallback
resend.api_key = RESEND_API_KEY


class EmailDeliveryError(Exception):
    """Email could not be handed to any transport"""


def get_operator_email() -> str:
    """Staff inbox for new booking notices"""
    return ADMIN_EMAIL or parseaddr(EMAIL_FROM_ADDRESS)[1]


def send_via_smtp(
    to: list[str],
    subject: str,
    html_content: str,
    text_content: Optional[str],
    from_address: str,
) -> dict:
    """Send email via the configured SMTP server"""
    try:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = from_address
        msg["To"] = ", ".join(to)

        if text_content:
            msg.attach(MIMEText(text_content, "plain"))
        msg.attach(MIMEText(html_content, "html"))

        if SMTP_PORT == 465:
            context = ssl.create_default_context()
            server = smtplib.SMTP_SSL(SMTP_HOST, SMTP_PORT, context=context, timeout=30)
        else:
            server = smtplib.SMTP(SMTP_HOST, SMTP_PORT, timeout=30)
            if SMTP_USE_TLS:
                context = ssl.create_default_context()
                server.starttls(context=context)

        try:
            if SMTP_USERNAME:
                server.login(SMTP_USERNAME, SMTP_PASSWORD or "")
            server.sendmail(parseaddr(from_address)[1], to, msg.as_string())
        finally:
            server.quit()

        logger.info(f"✅ SMTP email sent successfully via {SMTP_HOST}")
        return {"id": f"smtp-{datetime.now(timezone.utc).timestamp()}", "success": True}

    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"❌ SMTP send failed: {e}")
        raise EmailDeliveryError(f"SMTP failed: {str(e)}") from e


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        # mjml_to_html returns a dict-like with 'html' and 'errors' keys
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        html = getattr(result, "html", None)
        if html is not None:
            if getattr(result, "errors", None):
                logger.warning(f"MJML compilation warnings: {result.errors}")
            return html
        return str(result)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise EmailDeliveryError(f"Failed to compile MJML template: {str(e)}") from e


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    text_content: Optional[str] = None,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email using SMTP (if configured) or Resend (fallback)

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        text_content: Optional plain-text alternative
        from_address: Optional custom from address

    Returns:
        Send response dict

    Raises:
        EmailDeliveryError: If no transport is configured or sending fails
    """
    # MJML compile, SMTP and the Resend SDK all block; run them in the thread pool
    html_content = await asyncio.to_thread(compile_mjml_to_html, mjml_content)

    recipients = [to] if isinstance(to, str) else to
    sender = from_address or EMAIL_FROM_ADDRESS

    if SMTP_HOST:
        try:
            logger.info(f"📧 Sending email via SMTP: {SMTP_HOST}")
            return await asyncio.to_thread(
                send_via_smtp, recipients, subject, html_content, text_content, sender
            )
        except EmailDeliveryError as e:
            if not RESEND_API_KEY:
                raise
            logger.warning(f"⚠️ SMTP failed, falling back to Resend: {e}")

    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing and no SMTP_HOST")
        raise EmailDeliveryError("Email service not configured")

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        email_data = {
            "from": sender,
            "to": recipients,
            "subject": subject,
            "html": html_content,
        }
        if text_content:
            email_data["text"] = text_content

        response = await asyncio.to_thread(resend.Emails.send, email_data)
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise EmailDeliveryError(f"Failed to send email: {str(e)}") from e


# ============================================
# Pre-built Email Templates for Appointment Events
# ============================================


async def send_appointment_confirmation(appointment) -> dict:
    """Send booking confirmation to the patient"""
    return await send_email(
        to=appointment.email,
        subject=f"Appointment Confirmation - {appointment.appointment_number}",
        mjml_content=appointment_confirmation_template(appointment),
        text_content=appointment_confirmation_text(appointment),
    )


async def send_appointment_admin_notification(appointment, to: Optional[str] = None) -> dict:
    """Notify clinic staff of a new booking"""
    return await send_email(
        to=to or get_operator_email(),
        subject=f"New Appointment Request - {appointment.appointment_number}",
        mjml_content=new_appointment_admin_template(appointment),
        text_content=new_appointment_admin_text(appointment),
    )
