"""Email service for sending transactional emails via SendGrid."""

import logging

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from config import PASSWORD_RESET_EXPIRE_MINUTES, SENDGRID_API_KEY, SENDGRID_FROM_EMAIL


logger = logging.getLogger(__name__)


class EmailService:
    """Handles sending emails via SendGrid."""

    def __init__(self, api_key: str | None = None, from_email: str | None = None):
        self.api_key = api_key or SENDGRID_API_KEY
        self.from_email = from_email or SENDGRID_FROM_EMAIL
        self.app_name = "Seedy"

    def send_password_reset(self, to_email: str, username: str, token: str) -> bool:
        """
        Send the password reset token by email.

        The app asks the user to type the token in, so the mail carries the raw
        token rather than a link. Returns True on success, False on failure.
        """
        message = Mail(
            from_email=self.from_email,
            to_emails=to_email,
            subject=f"Reset Your Password at {self.app_name}",
            plain_text_content=self._build_reset_email_text(username=username, token=token),
            html_content=self._build_reset_email_html(username=username, token=token),
        )

        try:
            sg = SendGridAPIClient(self.api_key)
            sg.send(message)
            logger.info("Password reset email sent to user %s", username)
            return True
        except Exception as e:
            logger.exception("Email send failed: %s", e)
            return False

    def _validity(self) -> str:
        hours, minutes = divmod(PASSWORD_RESET_EXPIRE_MINUTES, 60)
        if minutes:
            return f"{PASSWORD_RESET_EXPIRE_MINUTES} minutes"
        return "1 hour" if hours == 1 else f"{hours} hours"

    def _build_reset_email_text(self, *, username: str, token: str) -> str:
        return (
            f"Hello {username}!\n\n"
            f"We've received a request to reset your password for {self.app_name}.\n\n"
            f"Password Reset Token: {token}\n\n"
            f"Please enter this token in the app to set your new password. "
            f"This token is valid for {self._validity()}.\n\n"
            "If you did not request a password reset, you can safely ignore this email.\n\n"
            f"The {self.app_name} Team"
        )

    def _build_reset_email_html(self, *, username: str, token: str) -> str:
        """Build HTML content for password reset email."""
        return f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; color: #333;">
            <h2 style="color: #2E7D32;">Hello {username}!</h2>
            <p>We've received a request to reset your password for <strong>{self.app_name}</strong>.</p>
            <p><b>Password Reset Token:</b>
               <span style="color: #388E3C;"><strong>{token}</strong></span></p>
            <p>Please enter this token in the app to set your new password.
               This token is valid for {self._validity()}.</p>
            <p>If you did not request a password reset, you can safely ignore this email.</p>
            <p style="margin-top: 30px; color: #4CAF50;"><b>The {self.app_name} Team</b></p>
        </div>
        """
