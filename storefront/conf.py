"""Settings access for the storefront app.

Values come from the Django settings module; see config/settings.py.
"""

from dataclasses import dataclass

from django.conf import settings

DEFAULT_API_URL = "http://localhost:4001/api"
DEFAULT_API_TIMEOUT = 10.0


@dataclass(frozen=True)
class ApiSettings:
    base_url: str
    timeout: float


def get_api_settings() -> ApiSettings:
    return ApiSettings(
        base_url=getattr(settings, "STOREFRONT_API_URL", DEFAULT_API_URL),
        timeout=float(getattr(settings, "STOREFRONT_API_TIMEOUT", DEFAULT_API_TIMEOUT)),
    )
