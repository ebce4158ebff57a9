"""
SEO Toolkit exceptions
Error types raised across the toolkit
"""

from typing import Optional


class SEOToolkitError(Exception):
    """Base class for toolkit errors"""


class FetchError(SEOToolkitError):
    """Raised when a page cannot be retrieved (network error, timeout or non-2xx response)"""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.message = message
        self.status_code = status_code

    def __str__(self):
        if self.status_code:
            return f"{self.message} (HTTP {self.status_code})"
        return self.message


class UnsupportedFormatError(SEOToolkitError):
    """Raised when a report format is not supported"""


class InvalidPayloadError(SEOToolkitError):
    """Raised when an API payload fails validation"""
