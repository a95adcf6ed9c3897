"""Email utility — sends transactional emails via SMTP (TLS)."""
from __future__ import annotations

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from research_partner.core.config import settings

logger = logging.getLogger(__name__)

PURPOSE_VERIFICATION = "verification"
PURPOSE_LOGIN = "login"


def _build_smtp_connection() -> smtplib.SMTP:
    """Open an authenticated SMTP TLS connection."""
    conn = smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=15)
    conn.ehlo()
    conn.starttls()
    conn.ehlo()
    conn.login(settings.SMTP_USER, settings.SMTP_PASS)
    return conn


def send_email(to: str, subject: str, html_body: str, plain_body: str = "") -> bool:
    """Send a transactional email. Returns True on success, False on failure."""
    try:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{settings.EMAIL_FROM_NAME} <{settings.EMAIL_FROM}>"
        msg["To"] = to

        if plain_body:
            msg.attach(MIMEText(plain_body, "plain", "utf-8"))
        msg.attach(MIMEText(html_body, "html", "utf-8"))

        with _build_smtp_connection() as conn:
            conn.sendmail(settings.EMAIL_FROM, [to], msg.as_string())

        logger.info(f"[Email] Sent '{subject}' → {to}")
        return True

    except Exception as exc:
        logger.error(f"[Email] Failed to send '{subject}' to {to}: {exc}")
        return False


# ── OTP email ─────────────────────────────────────────────────────────────────

def render_otp_email(otp: str, purpose: str = PURPOSE_VERIFICATION) -> tuple[str, str, str]:
    """Return (subject, html_body, plain_body) for an OTP email of *purpose*."""
    minutes = settings.OTP_EXPIRE_MINUTES
    if purpose == PURPOSE_VERIFICATION:
        subject = "Verify Your Email - AI Research Partner"
        intro = "Welcome! Please verify your email address to complete your registration."
        action = "verify your account"
    else:
        subject = "Login Verification - AI Research Partner"
        intro = "You requested to log in to your account. Use the OTP below to continue."
        action = "complete your login"

    html_body = f"""
<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <style>
    body {{ font-family: Arial, sans-serif; background: #f4f4f4; margin: 0; padding: 0; }}
    .container {{ max-width: 600px; margin: 50px auto; background: #fff;
                  border-radius: 10px; overflow: hidden; box-shadow: 0 4px 6px rgba(0,0,0,.1); }}
    .header {{ background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
               padding: 30px; text-align: center; color: #fff; font-size: 28px; }}
    .content {{ padding: 40px 30px; text-align: center; color: #333; }}
    .otp {{ font-size: 36px; font-weight: bold; letter-spacing: 8px; color: #667eea;
            background: #f8f9fa; border: 2px dashed #667eea; border-radius: 8px;
            padding: 20px; margin: 30px 0; }}
    .footer {{ background: #f8f9fa; padding: 20px; text-align: center;
               font-size: 14px; color: #666; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="header">AI Research Partner</div>
    <div class="content">
      <p>{intro}</p>
      <div class="otp">{otp}</div>
      <p>Valid for <strong>{minutes} minutes</strong>. Enter this code in the application to {action}.</p>
      <p>If you didn't request this code, please ignore this email.</p>
    </div>
    <div class="footer">This is an automated email. Please do not reply.</div>
  </div>
</body>
</html>
"""
    plain_body = (
        f"{intro}\n\nYour AI Research Partner code is: {otp}\n\n"
        f"Valid for {minutes} minutes."
    )
    return subject, html_body, plain_body


def send_otp_email(to: str, otp: str, purpose: str = PURPOSE_VERIFICATION) -> bool:
    """Send a 6-digit OTP for email verification or login."""
    subject, html_body, plain_body = render_otp_email(otp, purpose)
    return send_email(to, subject, html_body, plain_body)
