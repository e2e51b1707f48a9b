# onboard/forms/submitter.py
import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from onboard.core.errors import SubmissionFailed

logger = logging.getLogger(__name__)


class FormSubmitter:
    """Post een opgebouwde submission naar /api/submit (altijd multipart)."""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None, timeout: int = 30):
        self.url = f"{base_url.rstrip('/')}/api/submit"
        self.session = session or requests.Session()
        self.timeout = timeout

    def submit(
        self,
        data: List[Tuple[str, str]],
        files: List[Tuple[str, Tuple[str, bytes, str]]],
    ) -> Dict[str, Any]:
        # Tekstvelden als (None, value) parts zodat requests ook zonder bestanden multipart stuurt
        parts: List[Tuple[str, Any]] = [(k, (None, v)) for k, v in data]
        parts += files

        try:
            response = self.session.post(self.url, files=parts, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Error posting submission: {str(e)}")
            raise SubmissionFailed("Submission failed") from e

        if not response.ok:
            logger.error(f"Submit endpoint error: {response.status_code} - {response.text}")
            raise SubmissionFailed("Submission failed")

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Submit endpoint returned invalid JSON: {response.text[:200]}")
            raise SubmissionFailed("Something went wrong") from e
