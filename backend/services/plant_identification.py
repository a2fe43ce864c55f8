"""Client for the Pl@ntNet identification API."""

import logging
from typing import Optional

import requests

from config import PLANTNET_API_KEY, PLANTNET_API_URL, PLANTNET_TIMEOUT_SECONDS
from services.exceptions import ServiceError, UpstreamError


logger = logging.getLogger(__name__)

IDENTIFY_ERROR_MESSAGE = "Error processing request."


class PlantIdentifier:
    """Forward a photo URL to Pl@ntNet and return its answer unchanged."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key or PLANTNET_API_KEY
        self.api_url = api_url or PLANTNET_API_URL
        self.timeout = timeout or PLANTNET_TIMEOUT_SECONDS

    def identify(self, photo_url: str, lang: str) -> dict:
        """
        Identify the plant in ``photo_url``.

        Raises:
            UpstreamError: Pl@ntNet answered with a non-2xx status; its status
                and message are relayed.
            ServiceError: the request could not be made or the body was not JSON.
        """
        params = {
            "api-key": self.api_key,
            "images": photo_url,
            "lang": lang,
        }
        try:
            response = requests.get(self.api_url, params=params, timeout=self.timeout)
        except requests.exceptions.RequestException:
            logger.exception("Plant identification request failed")
            raise ServiceError(IDENTIFY_ERROR_MESSAGE)

        if not response.ok:
            message = self._upstream_message(response)
            logger.warning("Pl@ntNet answered %s: %s", response.status_code, message)
            raise UpstreamError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError:
            logger.exception("Pl@ntNet returned a non-JSON body")
            raise ServiceError(IDENTIFY_ERROR_MESSAGE)

    @staticmethod
    def _upstream_message(response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.reason or IDENTIFY_ERROR_MESSAGE
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return response.reason or IDENTIFY_ERROR_MESSAGE
