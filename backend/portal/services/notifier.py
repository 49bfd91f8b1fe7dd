"""
Outbound delivery of one-time codes.

The OTP service only knows `Notifier.send(identifier, code)`; which transport
carries the code (console log, SMTP, HTTP SMS gateway) is chosen from config.
Any transport failure surfaces as `DeliveryFailedError`.
"""
import logging
import smtplib
from email.message import EmailMessage

import httpx

from .. import config
from ..utils.error_handlers import DeliveryFailedError
from ..utils.validation import is_email_identifier

logger = logging.getLogger(__name__)


class Notifier:
    def send(self, identifier: str, code: str) -> None:
        raise NotImplementedError


class ConsoleNotifier(Notifier):
    """Development transport: writes the code to the server log."""

    def send(self, identifier: str, code: str) -> None:
        logger.warning("OTP code for %s: %s (console notifier, development only)", identifier, code)


class SmtpNotifier(Notifier):
    def __init__(
        self,
        *,
        host: str,
        port: int,
        user: str,
        password: str,
        mail_from: str,
        use_tls: bool = True,
        ttl_minutes: int = config.OTP_TTL_MINUTES,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.mail_from = mail_from
        self.use_tls = use_tls
        self.ttl_minutes = ttl_minutes

    def _build_message(self, to_email: str, code: str) -> EmailMessage:
        lines: list[str] = []
        lines.append("Hello,")
        lines.append("")
        lines.append(f"Your login code is: {code}")
        lines.append("")
        lines.append(f"It expires in {self.ttl_minutes} minutes and can be used once.")
        lines.append("If you did not request this code you can ignore this email.")

        msg = EmailMessage()
        msg["Subject"] = "Your login code"
        msg["From"] = self.mail_from
        msg["To"] = to_email
        msg.set_content("\n".join(lines))
        return msg

    def send(self, identifier: str, code: str) -> None:
        if not is_email_identifier(identifier):
            raise DeliveryFailedError(details={"reason": "email transport cannot reach a phone number"})
        if not self.host or not self.user or not self.password or not self.mail_from:
            logger.error("SMTP is not configured (missing SMTP_HOST/SMTP_USER/SMTP_PASS/SMTP_FROM).")
            raise DeliveryFailedError()

        msg = self._build_message(identifier, code)
        try:
            with smtplib.SMTP(self.host, self.port, timeout=15) as smtp:
                smtp.ehlo()
                if self.use_tls:
                    smtp.starttls()
                    smtp.ehlo()
                smtp.login(self.user, self.password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send OTP email: %s: %s", type(e).__name__, e)
            raise DeliveryFailedError() from e
        logger.info("OTP email sent to %s", identifier)


class SmsGatewayNotifier(Notifier):
    """
    Posts `{"to": phone, "message": text}` to an HTTP SMS gateway.

    Auth:
      Authorization: Bearer {token}
    """

    def __init__(self, *, url: str, token: str, timeout_s: float = 10.0):
        self.url = url
        self.token = token
        self.timeout_s = timeout_s

    def send(self, identifier: str, code: str) -> None:
        if not self.url:
            logger.error("SMS gateway is not configured (missing SMS_GATEWAY_URL).")
            raise DeliveryFailedError()

        headers = {"Authorization": f"Bearer {self.token}"} if self.token else {}
        payload = {"to": identifier, "message": f"Your login code is {code}"}
        try:
            with httpx.Client(timeout=self.timeout_s) as client:
                r = client.post(self.url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error("SMS gateway request failed: %s: %s", type(e).__name__, e)
            raise DeliveryFailedError() from e
        if r.status_code >= 400:
            logger.error("SMS gateway rejected message (status=%s): %s", r.status_code, r.text[:500])
            raise DeliveryFailedError(details={"gateway_status": r.status_code})
        logger.info("OTP SMS sent to %s", identifier)


class RoutingNotifier(Notifier):
    """Emails go to one transport, phone numbers to another."""

    def __init__(self, *, email: Notifier, phone: Notifier):
        self.email = email
        self.phone = phone

    def send(self, identifier: str, code: str) -> None:
        target = self.email if is_email_identifier(identifier) else self.phone
        target.send(identifier, code)


def _smtp_from_config() -> SmtpNotifier:
    return SmtpNotifier(
        host=config.SMTP_HOST,
        port=config.SMTP_PORT,
        user=config.SMTP_USER,
        password=config.SMTP_PASS,
        mail_from=config.SMTP_FROM,
        use_tls=config.SMTP_TLS,
    )


def build_notifier(backend: str | None = None) -> Notifier:
    backend = (backend or config.NOTIFIER_BACKEND or "console").strip().lower()
    if backend == "console":
        return ConsoleNotifier()
    if backend == "smtp":
        return _smtp_from_config()
    if backend == "gateway":
        return RoutingNotifier(
            email=_smtp_from_config(),
            phone=SmsGatewayNotifier(
                url=config.SMS_GATEWAY_URL,
                token=config.SMS_GATEWAY_TOKEN,
                timeout_s=config.SMS_GATEWAY_TIMEOUT_S,
            ),
        )
    raise ValueError(f"Unknown NOTIFIER_BACKEND: {backend}")


_notifier: Notifier | None = None


def get_notifier() -> Notifier:
    """FastAPI dependency; tests override it with a recording fake."""
    global _notifier
    if _notifier is None:
        _notifier = build_notifier()
    return _notifier
