"""Best-effort failure notifications to the error tracker.

report() never raises: a tracker that is down must not stop the pipeline.
"""

import logging

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Purchase Order Sync Failed"


class ErrorReporter:
    """Posts {title, message} notifications to an error tracker endpoint.

    With no api_url configured, failures are only logged.
    """

    def __init__(
        self,
        api_url: str | None,
        title: str = DEFAULT_TITLE,
        timeout_seconds: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.api_url = api_url
        self.title = title
        self.client = client or httpx.Client(timeout=timeout_seconds)

    def report(self, order_id: str, error: Exception | str) -> None:
        """Send one notification; failures of the call itself are logged and dropped."""
        message = f"Failed to sync PO: {order_id}, Error: {error}"
        if not self.api_url:
            logger.info("Error reporter not configured, skipping: %s", message)
            return
        try:
            response = self.client.post(self.api_url, json={"title": self.title, "message": message})
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Could not report error for %s: %s", order_id, e)
            return
        if not response.is_success:
            logger.warning("Error tracker answered %s for %s", response.status_code, order_id)

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self.client.close()
