"""Translation registry for the few strings the tour engine renders itself.

The engine treats step headers and contents as opaque; only the popup's own
labels ("Next", "Close", "Do it", "Step X/Y") are looked up here.

Design decisions:
 - A default locale (``"en"``) always exists and is consulted as fallback.
 - Missing key after fallback returns the key itself rather than raising.
 - Interpolation via ``str.format`` with named placeholders.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from featuretour import settings

__all__ = [
    "register_catalog",
    "set_locale",
    "get_locale",
    "t",
    "translate",
    "NEXT",
    "CLOSE",
    "DO_IT",
    "STEPS",
]

NEXT = "tour.next"
CLOSE = "tour.close"
DO_IT = "tour.do_it"
STEPS = "tour.steps"

_DEFAULT_LOCALE = "en"
_current_locale = settings.DEFAULT_LOCALE

_catalogs: Dict[str, Dict[str, str]] = {}


def register_catalog(locale: str, catalog: Dict[str, str]) -> None:
    """Register or extend a catalog for a locale (last registration wins)."""
    existing = _catalogs.setdefault(locale, {})
    existing.update(catalog)


def set_locale(locale: str) -> None:
    global _current_locale
    _current_locale = locale


def get_locale() -> str:
    return _current_locale


def _lookup(locale: str, key: str) -> Optional[str]:
    catalog = _catalogs.get(locale)
    if not catalog:
        return None
    return catalog.get(key)


def translate(key: str, **variables: Any) -> str:
    """Translate a key using the current locale with fallback.

    Missing interpolation variables raise ``KeyError``.
    """
    text = _lookup(_current_locale, key)
    if text is None and _current_locale != _DEFAULT_LOCALE:
        text = _lookup(_DEFAULT_LOCALE, key)
    if text is None:
        text = key
    if "{" in text and "}" in text:
        try:
            return text.format(**variables)
        except KeyError as e:
            raise KeyError(
                f"Missing interpolation variable {e.args[0]!r} for key '{key}'"
            ) from e
    return text


t = translate


register_catalog(
    _DEFAULT_LOCALE,
    {
        NEXT: "Next >>",
        CLOSE: "Close",
        DO_IT: "Do it!",
        STEPS: "Step {current}/{total}",
    },
)
register_catalog(
    "de",
    {
        NEXT: "Weiter >>",
        CLOSE: "Schließen",
        DO_IT: "Ausführen!",
        STEPS: "Schritt {current}/{total}",
    },
)
