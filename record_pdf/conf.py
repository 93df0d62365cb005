"""
Configuration helpers for PDF printing.

Settings are read from the ``RECORD_PDF`` dictionary in Django settings and
merged over ``PDF_DEFAULTS``. ``get_pdf_settings()`` freezes the result into a
``PdfSettings`` instance which is handed to the composer and services, so the
rest of the package never reads ``django.conf.settings`` directly.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, Optional
from urllib.parse import unquote, urljoin, urlparse

from django.conf import settings

logger = logging.getLogger(__name__)

# Optional WeasyPrint URL fetcher
try:
    from weasyprint.urls import default_url_fetcher

    WEASYPRINT_URL_FETCHER_AVAILABLE = True
except (ImportError, OSError):
    default_url_fetcher = None
    WEASYPRINT_URL_FETCHER_AVAILABLE = False

# ---------------------------------------------------------------------------
# Default configuration dictionaries
# ---------------------------------------------------------------------------

PDF_DEFAULTS = {
    "default_font_face": "freesans",
    "font_size": 12,
    "mass_render_max_count": None,
    "mass_file_retention_seconds": 3600,
    "cleanup_queue": "default",
    "renderer": "weasyprint",
    "base_url": None,
    "campaign_entity_type": "Campaign",
    "services": {},
}

URL_FETCHER_DEFAULTS = {
    "schemes": ["file", "data", "http", "https"],
    "hosts": [],
    "allow_remote": False,
    "file_roots": [],
}


@dataclass(frozen=True)
class PdfSettings:
    default_font_face: str = "freesans"
    font_size: int = 12
    mass_render_max_count: Optional[int] = None
    mass_file_retention_seconds: int = 3600
    cleanup_queue: str = "default"
    renderer: str = "weasyprint"
    base_url: Optional[str] = None
    campaign_entity_type: str = "Campaign"
    services: dict[str, str] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Settings accessor functions
# ---------------------------------------------------------------------------


def _merge_dict(defaults: dict[str, Any], overrides: Any) -> dict[str, Any]:
    """Shallow-merge dict settings with safe fallbacks."""
    merged = dict(defaults)
    if isinstance(overrides, dict):
        merged.update(overrides)
    return merged


def _pdf_settings() -> dict[str, Any]:
    return getattr(settings, "RECORD_PDF", {}) or {}


def _coerce_int(value: Any, default: Optional[int]) -> Optional[int]:
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _coerce_str(value: Any, default: str) -> str:
    if value is None:
        return default
    value = str(value).strip()
    return value or default


def get_pdf_settings() -> PdfSettings:
    """Build an immutable settings snapshot from ``settings.RECORD_PDF``."""
    raw = _merge_dict(PDF_DEFAULTS, _pdf_settings())
    max_count = _coerce_int(raw.get("mass_render_max_count"), None)
    services = raw.get("services") if isinstance(raw.get("services"), dict) else {}
    return PdfSettings(
        default_font_face=_coerce_str(
            raw.get("default_font_face"), PDF_DEFAULTS["default_font_face"]
        ),
        font_size=_coerce_int(raw.get("font_size"), PDF_DEFAULTS["font_size"]),
        mass_render_max_count=max_count or None,
        mass_file_retention_seconds=_coerce_int(
            raw.get("mass_file_retention_seconds"),
            PDF_DEFAULTS["mass_file_retention_seconds"],
        ),
        cleanup_queue=_coerce_str(raw.get("cleanup_queue"), PDF_DEFAULTS["cleanup_queue"]),
        renderer=_coerce_str(raw.get("renderer"), PDF_DEFAULTS["renderer"]).lower(),
        base_url=raw.get("base_url") or None,
        campaign_entity_type=_coerce_str(
            raw.get("campaign_entity_type"), PDF_DEFAULTS["campaign_entity_type"]
        ),
        services={str(key): str(value) for key, value in services.items()},
    )


def _url_fetcher_allowlist() -> dict[str, Any]:
    return _merge_dict(URL_FETCHER_DEFAULTS, _pdf_settings().get("url_fetcher_allowlist"))


# ---------------------------------------------------------------------------
# File roots and URL fetcher helpers
# ---------------------------------------------------------------------------


def _default_file_roots() -> list[Path]:
    roots: list[Path] = []
    for candidate in (
        getattr(settings, "STATIC_ROOT", None),
        getattr(settings, "MEDIA_ROOT", None),
    ):
        if candidate:
            roots.append(Path(candidate))
    return roots


def _path_within_roots(path: Path, roots: Iterable[Path]) -> bool:
    try:
        resolved = path.resolve()
    except OSError:
        return False
    for root in roots:
        try:
            resolved.relative_to(root.resolve())
            return True
        except (OSError, ValueError):
            continue
    return False


def _file_path_from_url(url: str) -> Optional[Path]:
    parsed = urlparse(url)
    if parsed.scheme not in ("", "file"):
        return None
    return Path(unquote(parsed.path or url))


def _build_safe_url_fetcher(base_url: Optional[str]) -> Optional[Callable]:
    """
    Wrap WeasyPrint's fetcher so template markup can only load allowlisted
    resources: permitted schemes, permitted remote hosts and local files
    below the configured roots.
    """
    if not default_url_fetcher:
        return None

    allowlist = _url_fetcher_allowlist()
    allowed_schemes = {str(item).lower() for item in allowlist.get("schemes") or []}
    allow_remote = bool(allowlist.get("allow_remote", False))
    allowed_hosts = {str(item).lower() for item in allowlist.get("hosts") or [] if item}
    file_roots = [Path(entry) for entry in allowlist.get("file_roots") or []]
    if not file_roots:
        file_roots = _default_file_roots()
    base_parsed = urlparse(str(base_url)) if base_url else None
    base_is_http = bool(base_parsed and base_parsed.scheme in ("http", "https"))

    def safe_fetcher(url: str, *args: Any, **kwargs: Any) -> dict[str, Any]:
        resolved_url = url
        if not urlparse(url).scheme and base_is_http:
            resolved_url = urljoin(str(base_url), url)
        parsed = urlparse(resolved_url)
        scheme = (parsed.scheme or "file").lower()

        if scheme not in allowed_schemes:
            logger.warning("Blocked PDF resource with scheme %s", scheme)
            raise ValueError(f"Blocked URL scheme: {scheme}")

        if scheme in ("http", "https"):
            host = (parsed.hostname or "").lower()
            if not allow_remote and host not in allowed_hosts:
                logger.warning("Blocked remote PDF resource on host %s", host)
                raise ValueError("Remote URL fetch blocked by allowlist")
        elif scheme == "file":
            file_path = _file_path_from_url(resolved_url)
            if file_path is None or not _path_within_roots(file_path, file_roots):
                logger.warning("Blocked local PDF resource %s", resolved_url)
                raise ValueError("File URL fetch blocked by allowlist")

        return default_url_fetcher(resolved_url, *args, **kwargs)

    return safe_fetcher


def resolve_url_fetcher(base_url: Optional[str]) -> Optional[Callable]:
    custom = _pdf_settings().get("url_fetcher")
    if callable(custom):
        return custom
    return _build_safe_url_fetcher(base_url)
