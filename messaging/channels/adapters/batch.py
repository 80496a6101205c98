"""Bulk fetch over Gmail batch requests.

One HTTP round trip carries up to ``batch_size`` API calls. Results come back
in request order; any failed entry fails the whole fetch.
"""

from typing import Any

from google.auth.exceptions import GoogleAuthError
from googleapiclient.errors import BatchError, HttpError
from httplib2 import HttpLib2Error

from mailsync_core.utils.logging import ContextLogger

from ...config import get_config
from ...exceptions import UpstreamUnavailableError

logger = ContextLogger(__name__)

# Gmail rejects batches with more than 100 calls
MAX_BATCH_SIZE = 100

UPSTREAM_ERRORS = (HttpError, BatchError, GoogleAuthError, HttpLib2Error, OSError)


class GmailBatchFetcher:
    """Run many Gmail API requests through ``new_batch_http_request``."""

    def __init__(self, service, batch_size: int | None = None):
        self.service = service
        self.batch_size = min(batch_size or get_config("BATCH_SIZE"), MAX_BATCH_SIZE)

    def fetch(self, requests: list) -> list[dict[str, Any]]:
        """Execute ``requests`` in batches and return their payloads in order.

        Raises
        ------
            UpstreamUnavailableError: If a batch or any single entry fails

        """
        payloads: list[dict[str, Any] | None] = [None] * len(requests)

        for start in range(0, len(requests), self.batch_size):
            chunk = requests[start : start + self.batch_size]
            failures: dict[int, Exception] = {}

            def _collect(request_id, response, exception, failures=failures):
                index = int(request_id)
                if exception is not None:
                    failures[index] = exception
                else:
                    payloads[index] = response

            batch = self.service.new_batch_http_request(callback=_collect)
            for offset, request in enumerate(chunk):
                batch.add(request, request_id=str(start + offset))

            logger.debug(
                "Executing Gmail batch",
                extra_context={"batch_start": start, "batch_size": len(chunk)},
            )
            try:
                batch.execute()
            except UPSTREAM_ERRORS as e:
                logger.error(f"Gmail batch request failed: {e!s}")
                raise UpstreamUnavailableError(f"Gmail batch request failed: {e!s}") from e

            if failures:
                index = min(failures)
                error = failures[index]
                logger.error(
                    f"Gmail batch entry failed: {error!s}",
                    extra_context={"failed_entries": len(failures)},
                )
                raise UpstreamUnavailableError(
                    f"{len(failures)} of {len(chunk)} batch entries failed, "
                    f"first at position {index}: {error!s}",
                ) from error

        return payloads
