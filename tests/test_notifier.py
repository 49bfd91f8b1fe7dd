import httpx
import pytest

from backend.portal.services import notifier as notifier_module
from backend.portal.services.notifier import (
    ConsoleNotifier,
    RoutingNotifier,
    SmsGatewayNotifier,
    SmtpNotifier,
    build_notifier,
)
from backend.portal.utils.error_handlers import DeliveryFailedError


class _Capture:
    def __init__(self):
        self.calls = []

    def send(self, identifier, code):
        self.calls.append((identifier, code))


def _patch_httpx(monkeypatch, handler):
    real_client = httpx.Client

    def fake_client(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(handler)
        return real_client(*args, **kwargs)

    monkeypatch.setattr(notifier_module.httpx, "Client", fake_client)


def test_build_notifier_backends():
    assert isinstance(build_notifier("console"), ConsoleNotifier)
    assert isinstance(build_notifier("SMTP"), SmtpNotifier)
    routing = build_notifier("gateway")
    assert isinstance(routing, RoutingNotifier)
    assert isinstance(routing.phone, SmsGatewayNotifier)
    with pytest.raises(ValueError):
        build_notifier("pigeon")


def test_console_notifier_logs_code(caplog):
    with caplog.at_level("WARNING"):
        ConsoleNotifier().send("+15550001", "123456")
    assert "123456" in caplog.text


def test_routing_notifier_splits_by_identifier_kind():
    email, phone = _Capture(), _Capture()
    routing = RoutingNotifier(email=email, phone=phone)

    routing.send("jane@example.com", "111111")
    routing.send("+15550001", "222222")

    assert email.calls == [("jane@example.com", "111111")]
    assert phone.calls == [("+15550001", "222222")]


def test_smtp_notifier_unconfigured_fails_delivery():
    smtp = SmtpNotifier(host="", port=587, user="", password="", mail_from="")
    with pytest.raises(DeliveryFailedError):
        smtp.send("jane@example.com", "123456")


def test_smtp_notifier_cannot_reach_phone_numbers():
    smtp = SmtpNotifier(host="smtp.example.com", port=587, user="u", password="p", mail_from="noreply@example.com")
    with pytest.raises(DeliveryFailedError):
        smtp.send("+15550001", "123456")


def test_smtp_message_contains_code():
    smtp = SmtpNotifier(host="smtp.example.com", port=587, user="u", password="p", mail_from="noreply@example.com")
    msg = smtp._build_message("jane@example.com", "654321")
    assert msg["To"] == "jane@example.com"
    assert "654321" in msg.get_content()


def test_sms_gateway_posts_code(monkeypatch):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = request.read().decode()
        return httpx.Response(200, json={"queued": True})

    _patch_httpx(monkeypatch, handler)

    SmsGatewayNotifier(url="https://sms.example.com/send", token="tok").send("+15550001", "424242")
    assert seen["auth"] == "Bearer tok"
    assert "+15550001" in seen["body"]
    assert "424242" in seen["body"]


def test_sms_gateway_rejection_is_delivery_failure(monkeypatch):
    _patch_httpx(monkeypatch, lambda request: httpx.Response(503, text="down"))

    with pytest.raises(DeliveryFailedError) as exc:
        SmsGatewayNotifier(url="https://sms.example.com/send", token="").send("+15550001", "424242")
    assert exc.value.details == {"gateway_status": 503}


def test_sms_gateway_network_error_is_delivery_failure(monkeypatch):
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    _patch_httpx(monkeypatch, handler)

    with pytest.raises(DeliveryFailedError):
        SmsGatewayNotifier(url="https://sms.example.com/send", token="").send("+15550001", "424242")


def test_sms_gateway_unconfigured():
    with pytest.raises(DeliveryFailedError):
        SmsGatewayNotifier(url="", token="").send("+15550001", "424242")
