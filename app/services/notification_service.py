"""
Meetup notifications
Cancellation fan-out to joined persons and join notices to organizers
"""

import asyncio
import logging
from typing import Dict, List, Optional, Protocol

from jinja2 import Template
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, From

from app.config import settings
from app.core.exceptions import NotificationError

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    async def send_cancellation_email(self, to_emails: List[str], reason: str) -> None:
        ...

    async def notify_organizer(self, organizer_email: str, joiner_username: str, joined_count: int) -> None:
        ...


TEMPLATES: Dict[str, Template] = {
    "meetup_cancelled": Template("""
        <!DOCTYPE html>
        <html>
        <body>
            <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
                <h2>Meetup Cancellation Notice</h2>
                <p>We regret to inform you that the meetup you joined has been cancelled for the following reason:</p>
                <blockquote style="border-left: 3px solid #ddd; padding-left: 10px;">{{ reason }}</blockquote>
                <p>Best regards,<br>The {{ app_name }} Team</p>
            </div>
        </body>
        </html>
    """),

    "member_joined": Template("""
        <!DOCTYPE html>
        <html>
        <body>
            <div style="max-width: 600px; margin: 0 auto; padding: 20px;">
                <h2>New User Joined Your Meetup</h2>
                <p>User <strong>{{ username }}</strong> just joined your meetup.</p>
                <p>Current number of joined persons: {{ joined_count }}.</p>
                <p>Best regards,<br>The {{ app_name }} Team</p>
            </div>
        </body>
        </html>
    """),
}


class SendGridNotifier:
    """Sends notifications through SendGrid; a failed send raises NotificationError"""

    def __init__(
        self,
        api_key: str,
        from_email: str,
        from_name: Optional[str] = None,
        client: Optional[SendGridAPIClient] = None
    ):
        self.client = client or SendGridAPIClient(api_key)
        self.from_email = From(from_email, from_name)
        self.templates = TEMPLATES

    async def _send(self, operation: str, to_emails: List[str], subject: str, template_name: str, **context) -> None:
        html_content = self.templates[template_name].render(app_name=settings.APP_NAME, **context)

        message = Mail(
            from_email=self.from_email,
            to_emails=to_emails,
            subject=subject,
            html_content=html_content,
            # One personalization per recipient so members don't see each other
            is_multiple=len(to_emails) > 1
        )

        try:
            # The SendGrid client blocks; keep the event loop free
            response = await asyncio.to_thread(self.client.send, message)
        except Exception as e:
            logger.error(f"Error sending {template_name} email: {str(e)}")
            raise NotificationError(operation) from e

        if response.status_code not in (200, 201, 202):
            logger.error(f"SendGrid rejected {template_name} email: {response.status_code}")
            raise NotificationError(operation, f"email provider answered {response.status_code}")

        logger.info(f"Email {template_name} sent to {len(to_emails)} recipient(s): {response.status_code}")

    async def send_cancellation_email(self, to_emails: List[str], reason: str) -> None:
        await self._send(
            "send_cancellation_email",
            to_emails,
            subject="Meetup Cancellation Notice",
            template_name="meetup_cancelled",
            reason=reason
        )

    async def notify_organizer(self, organizer_email: str, joiner_username: str, joined_count: int) -> None:
        await self._send(
            "notify_organizer",
            [organizer_email],
            subject="New User Joined Your Meetup",
            template_name="member_joined",
            username=joiner_username,
            joined_count=joined_count
        )


class LoggingNotifier:
    """Logs notifications instead of sending them, for development"""

    async def send_cancellation_email(self, to_emails: List[str], reason: str) -> None:
        logger.info(
            "Cancellation email",
            extra={"recipients": to_emails, "reason": reason}
        )

    async def notify_organizer(self, organizer_email: str, joiner_username: str, joined_count: int) -> None:
        logger.info(
            "Organizer join notice",
            extra={"recipient": organizer_email, "joiner": joiner_username, "joined_count": joined_count}
        )


def get_notifier() -> Notifier:
    """Notifier selected by NOTIFICATION_BACKEND"""
    if settings.NOTIFICATION_BACKEND == "sendgrid":
        return SendGridNotifier(
            api_key=settings.SENDGRID_API_KEY,
            from_email=settings.FROM_EMAIL,
            from_name=settings.FROM_NAME
        )
    return LoggingNotifier()
