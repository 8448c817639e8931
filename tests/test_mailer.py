import smtplib

import pytest

from eduwise.core.config import settings
from eduwise.core.exceptions import MailDeliveryError
from eduwise.core.mailer import Mailer


class FakeSMTP:
    instances = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.calls = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.calls.append("starttls")

    def login(self, username, password):
        self.calls.append(("login", username))

    def sendmail(self, sender, recipients, body):
        self.calls.append(("sendmail", sender, tuple(recipients)))


class RefusingSMTP(FakeSMTP):
    def sendmail(self, sender, recipients, body):
        raise smtplib.SMTPRecipientsRefused({recipients[0]: (550, b"No such user")})


@pytest.mark.asyncio
async def test_disabled_without_smtp_host() -> None:
    mailer = Mailer(settings.model_copy(update={"smtp_host": None}))
    assert mailer.enabled is False
    assert await mailer.send("a@example.com", "Hi", "Body") is False


@pytest.mark.asyncio
async def test_delivers_over_smtp(monkeypatch) -> None:
    FakeSMTP.instances = []
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
    config = settings.model_copy(
        update={"smtp_host": "smtp.example.com", "smtp_port": 2525, "smtp_username": "mailer", "smtp_password": "pw"}
    )

    sent = await Mailer(config).send("a@example.com", "Welcome", "Body", "<p>Body</p>")
    assert sent is True
    server = FakeSMTP.instances[0]
    assert (server.host, server.port) == ("smtp.example.com", 2525)
    assert server.calls[0] == "starttls"
    assert ("login", "mailer") in server.calls
    assert server.calls[-1] == ("sendmail", config.mail_from, ("a@example.com",))


@pytest.mark.asyncio
async def test_smtp_failure_raises(monkeypatch) -> None:
    monkeypatch.setattr(smtplib, "SMTP", RefusingSMTP)
    config = settings.model_copy(update={"smtp_host": "smtp.example.com"})

    with pytest.raises(MailDeliveryError):
        await Mailer(config).send("nobody@example.com", "Welcome", "Body")
