"""Build a Session from the login response's Set-Cookie headers."""
from typing import Iterable, List, Optional

from ..models import CSRF_COOKIE_NAME, Session


def extract_csrf_token(set_cookies: Iterable[str], name: str = CSRF_COOKIE_NAME) -> Optional[str]:
    """
    Find the CSRF token among Set-Cookie values.

    The first entry that carries ``<name>=`` wins; its value runs up to
    the next ``;`` (or the end of the entry).
    """
    marker = f"{name}="
    for cookie in set_cookies:
        start = cookie.find(marker)
        if start == -1:
            continue
        value = cookie[start + len(marker):].split(";", 1)[0]
        if value:
            return value
    return None


def session_from_set_cookie(set_cookies: Iterable[str]) -> Session:
    cookies: List[str] = list(set_cookies)
    return Session(cookie="; ".join(cookies), csrf_token=extract_csrf_token(cookies))
