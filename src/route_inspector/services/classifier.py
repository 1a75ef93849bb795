"""Endpoint classification."""

from __future__ import annotations

from route_inspector.services.models import Category

LOCAL_PREFIX = "http-/"
HTTP_PREFIXES = ("http://", "https://")


def is_http_url(label: str | None) -> bool:
    """Return ``True`` for labels that can be probed over plain HTTP(S)."""

    return bool(label) and label.startswith(HTTP_PREFIXES)


def classify(label: str | None) -> Category:
    """Map a raw endpoint label to its category.

    Hub paths (``http-/...``) are ``local``, http/https URLs are ``external`` and everything else, topic and queue
    names as well as empty labels, falls back to ``middleware``.
    """

    if not label:
        return "middleware"
    if label.startswith(LOCAL_PREFIX):
        return "local"
    if is_http_url(label):
        return "external"
    return "middleware"


__all__ = ["classify", "is_http_url", "LOCAL_PREFIX", "HTTP_PREFIXES"]
