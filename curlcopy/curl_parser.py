import json
import logging
import re
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from .errors import MalformedCookieError, StructuralError, UnrecognizedOptionError

logger = logging.getLogger(__name__)

CookieMap = Dict[str, str]
HeaderMap = Dict[str, str]
FlagMap = Dict[str, str]

# A recognizer returns (value, position after the match), or None when its
# shape does not start at the given position.
Recognizer = Callable[[str, int], Optional[Tuple[Any, int]]]

_KEY_RE = re.compile(r"[A-Za-z0-9_-]*")
_WS_RE = re.compile(r"\s*")

_COOKIE_PREFIX = "'cookie: "
_CONTINUATIONS = ("\\\n", "\\\r\n")


@dataclass(frozen=True)
class ParsedCurl:
    """A curl command copied from the browser network tab.

    `body` is empty both when `--data-raw` is missing and when it carries an
    empty payload.
    """
    url: str
    cookies: CookieMap = field(default_factory=dict)
    headers: HeaderMap = field(default_factory=dict)
    body: str = ''
    flags: FlagMap = field(default_factory=dict)

    @property
    def method(self) -> str:
        for name in ('X', 'request'):
            if self.flags.get(name):
                return self.flags[name].upper()
        return 'POST' if self.body else 'GET'

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


def _key(text: str, pos: int) -> Tuple[str, int]:
    # Never fails; an empty key is for the caller to reject
    m = _KEY_RE.match(text, pos)
    return m.group(), m.end()


def _skip_ws(text: str, pos: int) -> int:
    return _WS_RE.match(text, pos).end()


def _skip_continuation(text: str, pos: int) -> int:
    for marker in _CONTINUATIONS:
        if text.startswith(marker, pos):
            return pos + len(marker)
    return pos


def _literal(text: str, pos: int, *tokens: str) -> Optional[int]:
    for token in tokens:
        if text.startswith(token, pos):
            return pos + len(token)
    return None


def _until_quote(text: str, pos: int) -> Optional[Tuple[str, int]]:
    """Everything up to the next single quote, then the quote itself."""
    end = text.find("'", pos)
    if end == -1:
        return None
    return text[pos:end], end + 1


def _cookie_pairs(text: str, pos: int) -> Tuple[CookieMap, int]:
    end = text.find("'", pos)
    if end == -1:
        raise StructuralError(text, len(text), "closing quote of the Cookie header")
    cookies: CookieMap = {}
    if not text[pos:end].strip():
        return cookies, end + 1
    start = pos
    while True:
        seg_end = text.find(';', start, end)
        if seg_end == -1:
            seg_end = end
        seg_start = _skip_ws(text, start)
        name, at = _key(text, seg_start)
        if not name or at >= seg_end or text[at] != '=':
            raise MalformedCookieError(text, seg_start, "a name=value cookie pair")
        cookies[name] = text[at + 1:seg_end].rstrip()
        if seg_end == end:
            return cookies, end + 1
        start = seg_end + 1


def _option_header_cookie(text: str, pos: int) -> Optional[Tuple[CookieMap, int]]:
    at = _literal(text, pos, "-H ", "--header ")
    if at is None or text[at:at + len(_COOKIE_PREFIX)].lower() != _COOKIE_PREFIX:
        return None
    # Committed from here on: a bad cookie list fails the whole parse
    return _cookie_pairs(text, at + len(_COOKIE_PREFIX))


def _option_header(text: str, pos: int) -> Optional[Tuple[Tuple[str, str], int]]:
    at = _literal(text, pos, "-H '", "--header '")
    if at is None:
        return None
    name, at = _key(text, at)
    if not name or not text.startswith(': ', at):
        return None
    quoted = _until_quote(text, at + 2)
    if quoted is None:
        return None
    value, at = quoted
    return (name, value), at


def _option_data_raw(text: str, pos: int) -> Optional[Tuple[str, int]]:
    at = _literal(text, pos, "--data-raw '")
    if at is None:
        return None
    return _until_quote(text, at)


def _option_flag(text: str, pos: int) -> Optional[Tuple[Tuple[str, Optional[str]], int]]:
    if text.startswith('--', pos):
        name, at = _key(text, pos + 2)
        if not name:
            return None
    elif text.startswith('-', pos) and pos + 1 < len(text):
        name, at = text[pos + 1], pos + 2
    else:
        return None
    arg = None
    if text.startswith(" '", at):
        quoted = _until_quote(text, at + 2)
        if quoted is not None:
            arg, at = quoted
    return (name, arg), at


def _fold_cookies(acc: Dict[str, Any], cookies: CookieMap) -> None:
    # Last cookie header replaces any earlier one
    acc['cookies'] = cookies


def _fold_header(acc: Dict[str, Any], header: Tuple[str, str]) -> None:
    name, value = header
    acc['headers'][name] = value


def _fold_data_raw(acc: Dict[str, Any], body: str) -> None:
    acc['body'] = body


def _fold_flag(acc: Dict[str, Any], flag: Tuple[str, Optional[str]]) -> None:
    name, arg = flag
    acc['flags'][name] = arg if arg is not None else ''


# Order matters: the flag shape would swallow -H and --data-raw, and the
# header shape would swallow a Cookie header.
OPTION_SHAPES: List[Tuple[Recognizer, Callable[[Dict[str, Any], Any], None]]] = [
    (_option_header_cookie, _fold_cookies),
    (_option_header, _fold_header),
    (_option_data_raw, _fold_data_raw),
    (_option_flag, _fold_flag),
]


def _dispatch(text: str, pos: int, acc: Dict[str, Any]) -> int:
    for recognize, fold in OPTION_SHAPES:
        matched = recognize(text, pos)
        if matched is not None:
            value, pos = matched
            fold(acc, value)
            return pos
    raise UnrecognizedOptionError(text, pos, "an option (-H, --header, --data-raw, -X, --flag)")


def _parse_command(text: str) -> Tuple[str, int]:
    # curl '<url>' [\]
    pos = _skip_ws(text, 0)
    if not text.startswith('curl', pos):
        raise StructuralError(text, pos, "'curl'")
    pos += len('curl')
    at = _skip_ws(text, pos)
    if at == pos:
        raise StructuralError(text, pos, "whitespace after 'curl'")
    if not text.startswith("'", at):
        raise StructuralError(text, at, "a single-quoted URL")
    quoted = _until_quote(text, at + 1)
    if quoted is None:
        raise StructuralError(text, len(text), "closing quote of the URL")
    url, pos = quoted
    if text.startswith(' \\', pos):
        pos += 2
    return url, pos


def parse_curl_prefix(curl_text: str) -> Tuple[ParsedCurl, str]:
    """
    Parse a curl command copied from the browser network tab.

    Returns: (parsed command, unconsumed trailing input)
    Raises: CurlParseError (a ValueError) on the first thing it cannot match.
    """
    url, pos = _parse_command(curl_text)
    acc: Dict[str, Any] = {'cookies': {}, 'headers': {}, 'body': '', 'flags': {}}

    # [options...], separated by a single space, each optionally preceded by
    # a line continuation and indentation
    count = 0
    while True:
        if count:
            if not curl_text.startswith(' ', pos):
                break
            pos += 1
        pos = _skip_ws(curl_text, _skip_continuation(curl_text, pos))
        if pos == len(curl_text):
            break
        pos = _dispatch(curl_text, pos, acc)
        count += 1

    rest = curl_text[pos:]
    logger.debug("parsed %d option(s) for %s, %d char(s) left over", count, url, len(rest))
    return ParsedCurl(url=url, **acc), rest


text_curl = parse_curl_prefix


def parse_curl(curl_text: str) -> ParsedCurl:
    """Like parse_curl_prefix, but anything left over other than whitespace is an error."""
    parsed, rest = parse_curl_prefix(curl_text)
    if rest.strip():
        raise StructuralError(curl_text, len(curl_text) - len(rest), "a ' ' separator or end of input")
    return parsed
