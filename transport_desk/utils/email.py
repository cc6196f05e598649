import html as html_lib
import logging
import smtplib
from email.message import EmailMessage

from transport_desk.config import settings

logger = logging.getLogger(__name__)


def send_email(to_email: str, subject: str, html: str, text: str | None = None) -> bool:
    """
    Fire-and-forget delivery. Always logs the message; when SMTP_HOST is
    configured it is also sent over SMTP. Never raises; callers treat a
    False return as "log and carry on".
    """
    logger.info(f"[EMAIL] To={to_email} | Subject={subject}")
    if not settings.smtp_enabled:
        logger.info(f"[EMAIL] SMTP disabled, body follows\n{text or html}")
        return True

    msg = EmailMessage()
    msg["From"] = settings.SMTP_FROM
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content(text or html)
    msg.add_alternative(html, subtype="html")

    try:
        with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=10) as smtp:
            if settings.SMTP_USERNAME:
                smtp.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD)
            smtp.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"[EMAIL] Delivery to {to_email} failed: {e}")
        return False
    return True


def send_driver_credentials_email(to_email: str, name: str, password: str) -> bool:
    e = html_lib.escape
    subject = "Transport Desk - Your Driver Account is Approved"
    text = (
        f"Congratulations {name}!\n"
        "Your driver application has been approved.\n\n"
        "Your login credentials:\n"
        f"Email: {to_email}\n"
        f"Password: {password}\n\n"
        "Please change your password after your first login.\n"
        f"Driver portal: {settings.APP_URL}\n"
    )
    html = (
        f"<h2>Congratulations {e(name)}!</h2>"
        "<p>Your driver application has been approved.</p>"
        f"<p><strong>Email:</strong> {e(to_email)}<br><strong>Password:</strong> {e(password)}</p>"
        "<p>Please change your password after your first login.</p>"
        f'<p><a href="{e(settings.APP_URL)}">Access Driver Portal</a></p>'
    )
    return send_email(to_email, subject, html, text)


def send_assignment_email(
    to_email: str,
    name: str,
    assignment_id: int,
    vehicle_label: str,
    start_time: str,
    vip_name: str | None = None,
) -> bool:
    subject = f"Transport Desk - New assignment #{assignment_id}"
    lines = [
        f"Hello {name},",
        "You have been given a new transport assignment.",
        f"Vehicle: {vehicle_label}",
        f"Start: {start_time}",
    ]
    if vip_name:
        lines.append(f"VIP: {vip_name}")
    text = "\n".join(lines)
    html = "".join(f"<p>{html_lib.escape(line)}</p>" for line in lines)
    return send_email(to_email, subject, html, text)


def send_otp_email(to_email: str, name: str, otp_code: str) -> bool:
    subject = "Transport Desk - Password reset code"
    text = (
        f"Hello {name},\n"
        f"Your password reset code is {otp_code}.\n"
        f"It expires in {settings.OTP_EXPIRE_MINUTES} minutes.\n"
        "If you did not ask to reset your password, ignore this email.\n"
    )
    html = (
        f"<p>Hello {html_lib.escape(name)},</p>"
        f"<p>Your password reset code is <strong>{html_lib.escape(otp_code)}</strong>.</p>"
        f"<p>It expires in {settings.OTP_EXPIRE_MINUTES} minutes.</p>"
        "<p>If you did not ask to reset your password, ignore this email.</p>"
    )
    return send_email(to_email, subject, html, text)
