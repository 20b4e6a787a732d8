import asyncio
import smtplib
from email.message import EmailMessage

from loguru import logger

from app.core.config import MailSettings


class EmailService:
    def __init__(self, settings: MailSettings):
        self.settings = settings

    async def send(self, to: str, subject: str, html: str) -> bool:
        if not self.settings.enabled:
            logger.warning(f"Email delivery disabled (no EMAIL_HOST), dropping '{subject}' to {to}")
            return False

        message = EmailMessage()
        message["From"] = self.settings.from_address
        message["To"] = to
        message["Subject"] = subject
        message.set_content("This message requires an HTML capable mail client.")
        message.add_alternative(html, subtype="html")

        await asyncio.to_thread(self._deliver, message)
        logger.info(f"Email '{subject}' sent to {to}")
        return True

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port, timeout=self.settings.timeout) as smtp:
            smtp.starttls()
            if self.settings.smtp_user:
                smtp.login(self.settings.smtp_user, self.settings.smtp_password or "")
            smtp.send_message(message)
