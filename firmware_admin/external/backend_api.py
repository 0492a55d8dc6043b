"""
Firmware backend API client.

This module provides a client for the device management backend: listing
firmwares, devices and projects, uploading, downloading and deleting
firmware binaries.
"""

import logging
import requests
from typing import Any, Dict, List, Optional, Tuple

from firmware_admin.data.models import (
    Device,
    Firmware,
    Project,
    parse_devices,
    parse_firmwares,
    parse_projects,
)

logger = logging.getLogger(__name__)


class APIError(Exception):
    """Base exception for backend errors (transport failure or non-2xx)."""

    def __init__(self, message: str, status_code: Optional[int] = None, server_message: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.server_message = server_message


class AuthenticationError(APIError):
    """Exception for 401 responses on bearer-protected endpoints."""
    pass


class FirmwareBackendAPI:
    """Client for the firmware management REST backend."""

    def __init__(self, base_url: str, token: Optional[str] = None, timeout: Optional[float] = 30,
                 session: Optional[requests.Session] = None):
        """
        Initialize API client.

        Args:
            base_url: Backend base URL, e.g. https://host/api
            token: Bearer token for the devices and projects endpoints
            timeout: Request timeout in seconds, None for no timeout
            session: Optional pre-configured session (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def firmware_url(self) -> str:
        return f"{self.base_url}/firmware"

    def download_url(self, firmware_id: str) -> str:
        return f"{self.firmware_url}/download/{firmware_id}"

    def _auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning(f"{method} {url} failed: {e}")
            raise APIError(f"Network error on {method} {url}: {str(e)}")
        logger.debug(f"{method} {url} -> {response.status_code}")
        return response

    def validate_token(self) -> bool:
        """
        Validate the bearer token with a request to a protected endpoint.

        Returns:
            True if the token is accepted, False otherwise
        """
        try:
            self.list_projects()
            return True
        except APIError as e:
            logger.info(f"Token validation failed: {e}")
            return False

    def list_firmwares(self) -> List[Firmware]:
        """
        Fetch all firmware records, in backend order.

        Raises:
            APIError: If the request fails
        """
        response = self._request("GET", f"{self.firmware_url}/firmwares-details")
        return parse_firmwares(self._handle_response(response))

    def list_devices(self) -> List[Device]:
        """
        Fetch the devices visible to the logged-in user.

        Raises:
            AuthenticationError: If the token is missing, expired or rejected
            APIError: If the request fails
        """
        response = self._request("GET", f"{self.base_url}/devices", headers=self._auth_headers())
        return parse_devices(self._handle_response(response))

    def list_projects(self) -> List[Project]:
        """
        Fetch the projects visible to the logged-in user.

        Raises:
            AuthenticationError: If the token is missing, expired or rejected
            APIError: If the request fails
        """
        response = self._request("GET", f"{self.base_url}/projects", headers=self._auth_headers())
        return parse_projects(self._handle_response(response))

    def upload_firmware(self, version: str, description: str, esp_id: Optional[str],
                        file_name: Optional[str], content: Optional[bytes]) -> Any:
        """
        Upload a firmware binary as a multipart form.

        Fields are sent as given; an empty version is sent as an empty string.

        Raises:
            APIError: If the request fails
        """
        # (None, value) parts keep the body multipart even without a file
        fields = {
            "version": (None, version or ""),
            "description": (None, description or ""),
            "esp_id": (None, esp_id or ""),
        }
        if content is not None:
            fields["file"] = (file_name or "firmware.bin", content, "application/octet-stream")
        response = self._request("POST", f"{self.firmware_url}/upload", files=fields)
        return self._handle_response(response, default_message="Failed to upload firmware")

    def download_firmware(self, firmware_id: str) -> bytes:
        """
        Download a firmware binary.

        Returns:
            Raw binary content

        Raises:
            APIError: If the request fails
        """
        response = self._request("GET", self.download_url(firmware_id))
        if not response.ok:
            self._handle_response(response, default_message="Download failed")
        return response.content

    def delete_firmware(self, firmware_id: str) -> None:
        """
        Delete a firmware record and its binary.

        Raises:
            APIError: If the request fails
        """
        response = self._request("DELETE", f"{self.firmware_url}/delete/{firmware_id}")
        self._handle_response(response, default_message="Failed to delete firmware")

    @staticmethod
    def _error_message(response: requests.Response) -> Tuple[Optional[str], str]:
        try:
            body = response.json()
        except ValueError:
            return None, response.text
        if isinstance(body, dict):
            message = body.get("message") or body.get("error")
            return (str(message) if message else None), response.text
        return None, response.text

    def _handle_response(self, response: requests.Response, default_message: Optional[str] = None) -> Any:
        """
        Handle API response and errors.

        Args:
            response: Response object from requests
            default_message: Message used when the backend does not send one

        Returns:
            Parsed JSON data, or None for an empty body

        Raises:
            AuthenticationError: For 401 errors
            APIError: For other non-2xx responses or a malformed body
        """
        if response.ok:
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError:
                raise APIError(f"Invalid JSON from {response.url}", status_code=response.status_code)

        server_message, text = self._error_message(response)
        status = response.status_code

        if status == 401:
            raise AuthenticationError("Unauthorized (401): session expired or invalid token",
                                      status_code=status, server_message=server_message)

        elif status == 404:
            message = f"Resource not found (404): {response.url}"

        elif 400 <= status < 500:
            message = f"Client error ({status}): {text}"

        elif 500 <= status < 600:
            message = f"Server error ({status}): {text}"

        else:
            message = f"Unexpected status code ({status}): {text}"

        raise APIError(server_message or default_message or message,
                       status_code=status, server_message=server_message)
