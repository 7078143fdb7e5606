import smtplib

import pytest
from unittest.mock import MagicMock, patch

from deals.notifications.exceptions import EmailConfigurationException, EmailSendingException
from deals.notifications.smtp_sender import SmtpEmailSender

@pytest.fixture
def smtp_sender():
    return SmtpEmailSender(
        smtp_host="smtp.test.com",
        smtp_port=587,
        smtp_user="updates@deals.example.com",
        smtp_password="test_password",
        default_sender="updates@deals.example.com",
        sender_name="Deals Portal",
        use_tls=True,
        timeout=5,
    )

def mock_smtp_server(mock_smtp):
    server = MagicMock()
    mock_smtp.return_value.__enter__.return_value = server
    return server

def test_initialization_does_not_require_password():
    """Une configuration incomplète ne doit pas empêcher la construction du sender."""
    sender = SmtpEmailSender(smtp_password="")
    assert sender.smtp_password == ""

def test_build_message_headers(smtp_sender):
    msg = smtp_sender.build_message("buyer@example.com", "Sujet", "<p>Hi</p>", "updates@deals.example.com")
    assert msg["From"] == "Deals Portal <updates@deals.example.com>"
    assert msg["To"] == "buyer@example.com"
    assert msg["Subject"] == "Sujet"

@pytest.mark.asyncio
async def test_send_email_success(smtp_sender):
    with patch("deals.notifications.smtp_sender.smtplib.SMTP") as mock_smtp:
        server = mock_smtp_server(mock_smtp)

        result = await smtp_sender.send_email(
            recipient_email="buyer@example.com",
            subject="Test Subject",
            html_content="<h1>Test</h1>",
        )

        assert result is True
        mock_smtp.assert_called_once_with("smtp.test.com", 587, timeout=5)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("updates@deals.example.com", "test_password")
        server.sendmail.assert_called_once()
        assert server.sendmail.call_args.args[1] == ["buyer@example.com"]

@pytest.mark.asyncio
async def test_send_email_missing_password_raises_configuration_error(smtp_sender):
    smtp_sender.smtp_password = ""
    with patch("deals.notifications.smtp_sender.smtplib.SMTP") as mock_smtp:
        with pytest.raises(EmailConfigurationException):
            await smtp_sender.send_email("buyer@example.com", "Sujet", "<p>Hi</p>")
        mock_smtp.assert_not_called()

@pytest.mark.asyncio
async def test_send_email_authentication_error(smtp_sender):
    with patch("deals.notifications.smtp_sender.smtplib.SMTP") as mock_smtp:
        server = mock_smtp_server(mock_smtp)
        server.login.side_effect = smtplib.SMTPAuthenticationError(535, b"Authentication failed")

        with pytest.raises(EmailSendingException):
            await smtp_sender.send_email("buyer@example.com", "Sujet", "<p>Hi</p>")

@pytest.mark.asyncio
async def test_send_email_recipient_refused_returns_false(smtp_sender):
    with patch("deals.notifications.smtp_sender.smtplib.SMTP") as mock_smtp:
        server = mock_smtp_server(mock_smtp)
        server.sendmail.side_effect = smtplib.SMTPRecipientsRefused({"buyer@example.com": (550, b"No such user")})

        assert await smtp_sender.send_email("buyer@example.com", "Sujet", "<p>Hi</p>") is False

@pytest.mark.asyncio
async def test_send_email_timeout_is_wrapped(smtp_sender):
    with patch("deals.notifications.smtp_sender.smtplib.SMTP") as mock_smtp:
        mock_smtp.side_effect = TimeoutError("timed out")
        with pytest.raises(EmailSendingException):
            await smtp_sender.send_email("buyer@example.com", "Sujet", "<p>Hi</p>")

@pytest.mark.asyncio
async def test_port_465_uses_implicit_tls(smtp_sender):
    smtp_sender.smtp_port = 465
    with patch("deals.notifications.smtp_sender.smtplib.SMTP_SSL") as mock_smtp_ssl:
        server = mock_smtp_server(mock_smtp_ssl)
        assert await smtp_sender.send_email("buyer@example.com", "Sujet", "<p>Hi</p>") is True
        server.starttls.assert_not_called()
