"""
Канал сповіщень електронною поштою (SMTP).
"""

import smtplib
from email.message import EmailMessage
from typing import Any, Dict, List, Optional

from notifications.base import NotificationChannel
from utils.logger import get_logger


class EmailChannel(NotificationChannel):
    """Відправляє окремий лист кожному отримувачу зі списку."""

    name = 'email'

    def __init__(self, recipients: List[str], config: Dict[str, Any]):
        """
        Args:
            recipients: Список адрес (вже розібраний з рядка через кому)
            config: Секція notifications.email
        """
        self.logger = get_logger()
        self.recipients = recipients
        self.smtp_host = config.get('smtp_host', 'localhost')
        self.smtp_port = int(config.get('smtp_port', 25))
        self.sender = config.get('sender', 'door-alert@localhost')
        self.username = config.get('username')
        self.password = config.get('password')
        self.use_tls = bool(config.get('use_tls', False))
        self.timeout = float(config.get('timeout', 10.0))

    def is_enabled(self) -> bool:
        return bool(self.recipients)

    def _build_message(self, recipient: str, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg['From'] = self.sender
        msg['To'] = recipient
        msg['Subject'] = subject
        msg.set_content(body)
        return msg

    def send_one(self, recipient: str, subject: str, body: str) -> None:
        """Відправити один лист одному отримувачу."""
        with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as smtp:
            if self.use_tls:
                smtp.starttls()
            if self.username:
                smtp.login(self.username, self.password or '')
            smtp.send_message(self._build_message(recipient, subject, body))

    def send(self, subject: str, message: str, category: Optional[str] = None) -> None:
        """
        Відправити лист кожному отримувачу.

        Помилка одного отримувача не зупиняє решту; якщо не вдалось
        жодного разу, піднімається RuntimeError з переліком адрес.
        """
        failed = []
        for recipient in self.recipients:
            try:
                self.send_one(recipient, subject, message)
            except (smtplib.SMTPException, OSError) as e:
                self.logger.warning(f"Email: не вдалося відправити лист {recipient}: {e}")
                failed.append(recipient)

        if failed:
            raise RuntimeError(f"Email не доставлено: {', '.join(failed)}")
