"""
AWS SES client wrapper with retry logic.
"""

import time
from typing import Any, Optional

import boto3
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectionError as BotoConnectionError,
    EndpointConnectionError,
)

from ats.core.logging import get_logger

logger = get_logger(__name__)

# SES rejections that a retry cannot fix
NON_RETRYABLE_ERRORS = frozenset(
    {"MessageRejected", "MailFromDomainNotVerified", "ConfigurationSetDoesNotExist"}
)


class SESClientError(Exception):
    """Raised when an email cannot be sent through SES."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.context = context


class SESClient:
    """
    Blocking SES client; callers in async code run it in a worker thread.
    """

    def __init__(
        self,
        region_name: str,
        from_address: str,
        max_retries: int = 3,
        retry_backoff: float = 1.0,
        client: Optional[Any] = None,
    ) -> None:
        self.from_address = from_address
        self.max_retries = max_retries
        self.retry_backoff = retry_backoff
        self._client = client or boto3.client("ses", region_name=region_name)

        logger.info("SES client initialized", region=region_name, max_retries=max_retries)

    def _backoff(self, attempt: int) -> None:
        if attempt < self.max_retries - 1:
            backoff_time = self.retry_backoff * (2**attempt)
            logger.info(
                "Retrying SES send after backoff",
                backoff_seconds=backoff_time,
                attempt=attempt + 1,
            )
            time.sleep(backoff_time)

    def send_email(
        self,
        to_addresses: list[str],
        subject: str,
        body_text: str,
        body_html: Optional[str] = None,
    ) -> dict[str, Any]:
        """
        Send an email, retrying throttling and connection errors.

        Returns:
            Dictionary with the SES message ID and recipients

        Raises:
            SESClientError: If the message is rejected or retries run out
        """
        if not to_addresses:
            raise SESClientError("At least one recipient email address is required")

        message: dict[str, Any] = {
            "Subject": {"Data": subject, "Charset": "UTF-8"},
            "Body": {"Text": {"Data": body_text, "Charset": "UTF-8"}},
        }
        if body_html:
            message["Body"]["Html"] = {"Data": body_html, "Charset": "UTF-8"}

        last_exception: Optional[Exception] = None
        for attempt in range(self.max_retries):
            try:
                response = self._client.send_email(
                    Source=self.from_address,
                    Destination={"ToAddresses": to_addresses},
                    Message=message,
                )
                logger.info(
                    "Email sent via SES",
                    message_id=response["MessageId"],
                    to_addresses=to_addresses,
                )
                return {"message_id": response["MessageId"], "to_addresses": to_addresses}

            except ClientError as e:
                error_code = e.response.get("Error", {}).get("Code", "Unknown")
                error_message = e.response.get("Error", {}).get("Message", str(e))
                logger.warning(
                    "SES client error",
                    attempt=attempt + 1,
                    error_code=error_code,
                    error_message=error_message,
                )
                last_exception = e
                if error_code in NON_RETRYABLE_ERRORS:
                    raise SESClientError(
                        f"SES error: {error_message}", error_code=error_code
                    ) from e
                self._backoff(attempt)

            except (BotoConnectionError, EndpointConnectionError, BotoCoreError) as e:
                logger.warning("SES connection error", attempt=attempt + 1, error=str(e))
                last_exception = e
                self._backoff(attempt)

        raise SESClientError(
            f"Failed to send email after {self.max_retries} attempts",
            last_error=str(last_exception),
        ) from last_exception
