"""SMTP email client for sending alerts."""

import smtplib
from email.message import EmailMessage

import structlog

log = structlog.get_logger()


class EmailClient:
    """Sends plain-text alert mails through an SMTP relay."""

    name = "email"

    def __init__(
        self,
        recipient: str,
        sender: str,
        smtp_host: str = "localhost",
        smtp_port: int = 25,
        timeout: float = 10.0,
        starttls: bool = False,
        username: str | None = None,
        password: str | None = None,
    ):
        self.recipient = recipient
        self.sender = sender
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.timeout = timeout
        self.starttls = starttls
        self.username = username
        self.password = password

    def build_message(self, subject: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = self.recipient
        msg.set_content(body)
        return msg

    def send(self, subject: str, body: str) -> bool:
        """Send one alert mail.

        Returns:
            True if the relay accepted the message, False otherwise
        """
        msg = self.build_message(subject, body)
        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.timeout) as smtp:
                if self.starttls:
                    smtp.starttls()
                if self.username:
                    smtp.login(self.username, self.password or "")
                smtp.send_message(msg)
            log.info("Email sent", to=self.recipient)
            return True
        except smtplib.SMTPException as e:
            log.error("SMTP error", to=self.recipient, error=str(e))
            return False
        except OSError as e:
            log.error("SMTP connection failed", host=self.smtp_host, error=str(e))
            return False
