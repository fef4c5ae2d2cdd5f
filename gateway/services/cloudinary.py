# gateway/services/cloudinary.py
"""Cloudinary unsigned uploads + delivery URL transformations."""

from __future__ import annotations

import logging
from typing import Optional

import requests
from django.conf import settings

from .http import new_session, request_with_retry

log = logging.getLogger(__name__)

CLOUDINARY_API = "https://api.cloudinary.com/v1_1"


class CloudinaryError(Exception):
    def __init__(self, message: str, status: int = 0):
        super().__init__(message)
        self.status = status


def optimized_url(url: str, width: Optional[int] = None, height: Optional[int] = None,
                  crop: Optional[str] = "fill") -> str:
    """Add q_auto,f_auto (plus size/crop) to a Cloudinary delivery URL; other URLs are returned as-is."""
    if not url or "cloudinary.com" not in url:
        return url
    transformations = ["q_auto", "f_auto"]
    if width:
        transformations.append(f"w_{int(width)}")
    if height:
        transformations.append(f"h_{int(height)}")
    if crop:
        transformations.append(f"c_{crop}")
    return url.replace("/upload/", "/upload/" + ",".join(transformations) + "/", 1)


class CloudinaryClient:
    def __init__(self, cloud_name: str, upload_preset: str, *, session: Optional[requests.Session] = None):
        self.cloud_name = (cloud_name or "").strip()
        self.upload_preset = (upload_preset or "").strip()
        self.session = session or new_session()

    @classmethod
    def from_settings(cls, session: Optional[requests.Session] = None) -> "CloudinaryClient":
        return cls(settings.CLOUDINARY_CLOUD_NAME, settings.CLOUDINARY_UPLOAD_PRESET, session=session)

    def upload_image(self, content: bytes, filename: str = "upload",
                     mime_type: str = "application/octet-stream") -> str:
        """Unsigned upload; returns the secure_url."""
        if not self.cloud_name or not self.upload_preset:
            raise CloudinaryError("Cloudinary is not configured")
        url = f"{CLOUDINARY_API}/{self.cloud_name}/image/upload"
        resp = request_with_retry(
            self.session, "POST", url,
            data={"upload_preset": self.upload_preset},
            files={"file": (filename or "upload", content, mime_type or "application/octet-stream")},
        )
        if resp.status_code >= 300:
            raise CloudinaryError(f"Failed to upload image to Cloudinary: HTTP {resp.status_code}",
                                  status=resp.status_code)
        try:
            secure_url = resp.json().get("secure_url")
        except (ValueError, AttributeError) as exc:
            raise CloudinaryError("Cloudinary returned an unexpected body", status=resp.status_code) from exc
        if not secure_url:
            raise CloudinaryError("Cloudinary response had no secure_url", status=resp.status_code)
        log.info("[cloudinary] uploaded %s (%s bytes)", filename, len(content))
        return secure_url

    optimized_url = staticmethod(optimized_url)
