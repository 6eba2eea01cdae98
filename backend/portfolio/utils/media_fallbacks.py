from __future__ import annotations

from .media_keys import canonical_key
from .media_paths import is_remote_url, strip_leading_slashes, url_pathname

FALLBACK_IMAGE_MAP: dict[str, str] = {
    "AI-Powered Trivia Web Game": "/ai-trivia-game.png",
    "Multi-Agent AI Agency Platform": "/ai-agency.png",
    "Ride Hailing Application": "/ride-hailing-app.png",
    "Cloud of Things Solution for Smart Parking Management": "/cloud-of-things.png",
    "Database and Big Data Modelling for Digital Migration Company": "/digital-migration.png",
    "Cloud-Based Hybrid Migration Software Development using Azure": "/azure-hybrid.jpeg",
    "E-commerce Store Development": "/ecommerce.png",
    "Design and Simulation of a Fully Electric Aircraft": "/electric-aircraft-img.png",
}

_IMAGE_EXTENSIONS = frozenset({"png", "jpg", "jpeg"})


def infer_from_remote_url(remote_url: str | None) -> str | None:
    """Local asset path matching the remote file's name, minus any provider hash."""

    if not remote_url:
        return None
    path = url_pathname(remote_url) if is_remote_url(remote_url) else remote_url
    trimmed = strip_leading_slashes(path or "")
    if not trimmed:
        return None
    last_segment = trimmed.rsplit("/", 1)[-1]
    stem, dot, extension = last_segment.rpartition(".")
    if not dot or not stem or extension.lower() not in _IMAGE_EXTENSIONS:
        return None
    canonical = canonical_key(f"{stem}.{extension.lower()}")
    return f"/{canonical}"


def project_fallback_image(
    *,
    title: str | None = None,
    remote_url: str | None = None,
    fallback_candidate: str | None = None,
) -> str | None:
    if isinstance(fallback_candidate, str) and fallback_candidate:
        if fallback_candidate.startswith("/"):
            return fallback_candidate
        return f"/{strip_leading_slashes(fallback_candidate)}"

    if isinstance(title, str) and title:
        mapped = FALLBACK_IMAGE_MAP.get(title)
        if mapped:
            return mapped

    if isinstance(remote_url, str):
        return infer_from_remote_url(remote_url)
    return None
