"""
Email Tools

Notifiers delivering plain-text status emails through Mailgun's HTTP API
or SES. The backend is chosen by ``email_backend`` in settings.
"""

import boto3
from botocore.exceptions import BotoCoreError, ClientError
import httpx
import structlog

from relay.config import Settings, get_settings
from relay.exceptions import ReportingError
from relay.tools.base import Notifier
from relay.tools.http import build_http_client

log = structlog.get_logger()


class MailgunNotifier(Notifier):
    """Notifier posting to the Mailgun messages endpoint."""

    backend = "mailgun"

    def __init__(
        self,
        api_key: str,
        domain: str,
        sender: str,
        *,
        client: httpx.Client,
        base_url: str = "https://api.mailgun.net/v3",
    ) -> None:
        self._api_key = api_key
        self._domain = domain
        self._sender = sender
        self._client = client
        self._endpoint = f"{base_url.rstrip('/')}/{domain}/messages"

    def send(self, recipient: str, subject: str, body: str) -> str:
        """
        Send an email via Mailgun.

        Returns:
            Mailgun message ID

        Raises:
            ReportingError: If the API call fails or is rejected
        """
        log.info(
            "sending_mailgun_email",
            to=recipient,
            subject=subject[:50],
            domain=self._domain,
        )

        try:
            response = self._post({
                "from": self._sender,
                "to": recipient,
                "subject": subject,
                "text": body,
            })
        except httpx.HTTPStatusError as e:
            error_message = f"{e.response.status_code}: {e.response.text[:200]}"
            log.error(
                "mailgun_send_failed",
                to=recipient,
                status_code=e.response.status_code,
                error_message=error_message,
            )
            raise ReportingError(
                backend=self.backend,
                recipient=recipient,
                error_message=error_message,
            ) from e
        except httpx.HTTPError as e:
            log.error("mailgun_send_failed", to=recipient, error=str(e))
            raise ReportingError(
                backend=self.backend,
                recipient=recipient,
                error_message=str(e),
            ) from e

        try:
            message_id = response.json().get("id", "")
        except ValueError:
            message_id = ""

        log.info(
            "mailgun_email_sent",
            message_id=message_id,
            to=recipient,
        )

        return message_id

    def _post(self, data: dict[str, str]) -> httpx.Response:
        response = self._client.post(self._endpoint, auth=("api", self._api_key), data=data)
        response.raise_for_status()
        return response


class SESNotifier(Notifier):
    """Notifier sending through Amazon SES."""

    backend = "ses"

    def __init__(self, sender: str, *, client=None) -> None:
        self._sender = sender
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = boto3.client("ses", **get_settings().ses_config)
        return self._client

    def send(self, recipient: str, subject: str, body: str) -> str:
        """
        Send an email via SES.

        Returns:
            SES message ID

        Raises:
            ReportingError: If send fails
        """
        send_params = {
            "Source": self._sender,
            "Destination": {"ToAddresses": [recipient]},
            "Message": {
                "Subject": {"Data": subject, "Charset": "UTF-8"},
                "Body": {"Text": {"Data": body, "Charset": "UTF-8"}},
            },
        }

        log.info(
            "sending_ses_email",
            to=recipient,
            subject=subject[:50],
        )

        try:
            response = self.client.send_email(**send_params)
        except ClientError as e:
            error_code = e.response["Error"]["Code"]
            error_message = e.response["Error"]["Message"]

            log.error(
                "ses_send_failed",
                to=recipient,
                error_code=error_code,
                error_message=error_message,
            )

            raise ReportingError(
                backend=self.backend,
                recipient=recipient,
                error_message=f"{error_code}: {error_message}",
            ) from e
        except BotoCoreError as e:
            log.error("ses_send_failed", to=recipient, error=str(e))
            raise ReportingError(
                backend=self.backend,
                recipient=recipient,
                error_message=str(e),
            ) from e

        message_id = response["MessageId"]

        log.info(
            "ses_email_sent",
            message_id=message_id,
            to=recipient,
        )

        return message_id


def build_notifier(
    settings: Settings | None = None,
    *,
    http_client: httpx.Client | None = None,
) -> Notifier:
    """Build the notifier selected by ``settings.email_backend``."""
    settings = settings or get_settings()

    if settings.email_backend == "ses":
        return SESNotifier(
            settings.sender,
            client=boto3.client("ses", **settings.ses_config),
        )

    return MailgunNotifier(
        api_key=settings.mailgun_api_key.get_secret_value(),
        domain=settings.mailgun_domain,
        sender=settings.sender,
        client=http_client or build_http_client(settings),
        base_url=settings.mailgun_base_url,
    )
