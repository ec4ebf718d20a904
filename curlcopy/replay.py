from typing import Dict, Optional
from urllib.parse import urlparse

import requests

from .curl_parser import ParsedCurl

# Not forwarded onto a session: requests computes these itself, and cookies
# travel through the cookie jar instead of a raw header.
SKIP_HEADERS = {'content-length', 'host', 'authority', 'cookie', 'cookies'}


def _forwardable(headers: Dict[str, str]) -> Dict[str, str]:
    return {k: v for k, v in headers.items() if k.lower() not in SKIP_HEADERS}


def build_session(parsed: ParsedCurl, cookie_domain: Optional[str] = None) -> requests.Session:
    """Session carrying the captured headers and cookies, ready to replay against the same site.

    Cookies are scoped to `cookie_domain`, or to the URL's host when not given.
    """
    session = requests.Session()
    session.headers.update(_forwardable(parsed.headers))
    domain = cookie_domain if cookie_domain is not None else (urlparse(parsed.url).hostname or '')
    for k, v in parsed.cookies.items():
        session.cookies.set(k, v, domain=domain)
    return session


def build_request(parsed: ParsedCurl) -> requests.Request:
    """Unsent request mirroring the captured command."""
    return requests.Request(
        method=parsed.method,
        url=parsed.url,
        headers=_forwardable(parsed.headers),
        cookies=dict(parsed.cookies),
        data=parsed.body.encode('utf-8') if parsed.body else None,
    )


def prepare(parsed: ParsedCurl) -> requests.PreparedRequest:
    return build_request(parsed).prepare()
