# logship/uploader.py
import json
import logging
import os
import time
from typing import Callable, Optional, Sequence

import requests

logger = logging.getLogger(__name__)

HEADERS = {"Content-Type": "application/json"}


class DeliveryError(Exception):
    def __init__(self, reason: str, status_code: Optional[int] = None):
        super().__init__(f"Failed to upload: {reason}")
        self.reason = reason
        self.status_code = status_code


def build_payload(lines: Sequence[str]) -> bytes:
    """One ``{"log": ...}`` object per line, newline-joined, file order."""
    records = (json.dumps({"log": line}, ensure_ascii=False, separators=(",", ":")) for line in lines)
    return "\n".join(records).encode("utf-8")


class BatchUploader:
    """POSTs batches of lines to ``<endpoint>/<file name>``.

    A failed attempt is retried after ``retry_delay`` seconds, up to
    ``attempts`` tries in total. The same payload bytes go out each time.
    """

    def __init__(
        self,
        endpoint: str,
        timeout: Optional[float] = None,
        attempts: int = 2,
        retry_delay: float = 0.2,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self.attempts = attempts
        self.retry_delay = retry_delay
        self.session = session or requests.Session()
        self.sleep = sleep

    def url_for(self, path: str) -> str:
        return f"{self.endpoint}/{os.path.basename(path)}"

    def _post(self, url: str, body: bytes) -> None:
        try:
            r = self.session.post(url, data=body, headers=HEADERS, timeout=self.timeout)
        except requests.RequestException as e:
            raise DeliveryError(str(e)) from e
        if not r.ok:
            raise DeliveryError(r.reason or str(r.status_code), status_code=r.status_code)

    def upload(self, path: str, lines: Sequence[str]) -> None:
        url = self.url_for(path)
        body = build_payload(lines)
        for attempt in range(1, self.attempts + 1):
            try:
                self._post(url, body)
            except DeliveryError as e:
                if attempt == self.attempts:
                    raise
                logger.warning("Retry upload to %s after error: %s", url, e)
                self.sleep(self.retry_delay)
            else:
                logger.debug("Uploaded %d log lines to %s", len(lines), url)
                return
