"""Services for allure_uploader."""
from .api_client import AllureAPIClient
from .session import extract_csrf_token, session_from_set_cookie

__all__ = [
    "AllureAPIClient",
    "extract_csrf_token",
    "session_from_set_cookie",
]
