# sales/conf.py

"""
POS SETTINGS ACCESSOR

Reads settings.PHARMACY_POS at call time (never cached at import) so
override_settings() in tests takes effect.
"""

from django.conf import settings

DEFAULTS = {
    "RECEIPT_PREFIX": "ZZ",
    "RETURN_RECEIPT_PREFIX": "RET",
    "RETURN_WINDOW_DAYS": 2,
    "SALES_FETCH_LIMIT": 1000,
}


def pos_setting(name: str):
    if name not in DEFAULTS:
        raise KeyError(f"Unknown PHARMACY_POS setting: {name}")

    configured = getattr(settings, "PHARMACY_POS", None) or {}
    value = configured.get(name)
    return DEFAULTS[name] if value in (None, "") else value
