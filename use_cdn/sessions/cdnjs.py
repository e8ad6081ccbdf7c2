"""
Session for the cdnjs CDN.
"""

from .base import BaseSession

CDNJS_URL = "https://cdnjs.cloudflare.com/"


class CdnjsSession(BaseSession):
    """
    One session of access to cdnjs. Files live under
    ``<base>ajax/libs/<package>/<version>/``. cdnjs has no resolution
    protocol of its own, so a registry resolver is always used.
    """

    DEFAULT_URL = CDNJS_URL

    def make_package_url(self, package: str, version: str) -> str:
        return f"{self.base}ajax/libs/{package}/{version}"
