import logging
import smtplib
from email.mime.text import MIMEText

from jobboard.core.config import get_settings

logger = logging.getLogger(__name__)


def send_email(to_email: str, subject: str, html_body: str) -> None:
    """Send HTML email over SMTP. Without an SMTP host the message is only logged."""
    settings = get_settings()

    if not settings.smtp_host:
        logger.info("SMTP not configured; email to %s: %s\n%s", to_email, subject, html_body)
        return

    msg = MIMEText(html_body, "html")
    msg["Subject"] = subject
    msg["From"] = settings.smtp_from
    msg["To"] = to_email

    with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
        try:
            server.starttls()
        except smtplib.SMTPNotSupportedError:
            logger.debug("SMTP server %s does not support STARTTLS", settings.smtp_host)
        if settings.smtp_username and settings.smtp_password:
            server.login(settings.smtp_username, settings.smtp_password)
        server.sendmail(settings.smtp_from, [to_email], msg.as_string())
    logger.info("Sent email to %s: %s", to_email, subject)


def send_verification_email(to_email: str, token: str) -> None:
    link = f"{get_settings().app_base_url}/api/auth/verify-email?token={token}"
    send_email(
        to_email,
        "Verify your email",
        f"<p>Welcome! Confirm your address to start using your account:</p>"
        f'<p><a href="{link}">{link}</a></p>',
    )


def send_password_reset_email(to_email: str, token: str) -> None:
    link = f"{get_settings().app_base_url}/reset-password?token={token}"
    send_email(
        to_email,
        "Reset your password",
        f"<p>Use this link to choose a new password:</p>"
        f'<p><a href="{link}">{link}</a></p>'
        f"<p>If you did not ask for a reset you can ignore this email.</p>",
    )
