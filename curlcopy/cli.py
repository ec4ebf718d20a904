import argparse
import logging
import sys
from typing import Dict, List, Optional

from rich import print
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from .curl_parser import ParsedCurl, parse_curl, parse_curl_prefix
from .errors import CurlParseError

logger = logging.getLogger(__name__)


def _setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_time=False, show_path=False)],
    )


def render_mapping(title: str, mapping: Dict[str, str], key_header: str = "Name"):
    table = Table(title=title)
    table.add_column(key_header, style="cyan")
    table.add_column("Value", overflow="fold")
    for k, v in mapping.items():
        table.add_row(escape(k), escape(v))
    print(table)


def render_parsed(parsed: ParsedCurl):
    print(f"[bold]URL:[/bold] {escape(parsed.url)}")
    print(f"[bold]Method:[/bold] {parsed.method}")
    if parsed.flags:
        render_mapping("Flags", parsed.flags, key_header="Flag")
    if parsed.headers:
        render_mapping("Headers", parsed.headers, key_header="Header")
    if parsed.cookies:
        render_mapping("Cookies", parsed.cookies, key_header="Cookie")
    if parsed.body:
        print("[bold]Body:[/bold]")
        print(escape(parsed.body))


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Inspect a cURL command copied from the browser's network tab")
    parser.add_argument("curl_file", nargs="?", help="Path to a text file containing the copied cURL request.")
    parser.add_argument("--json", action="store_true", help="Print the parsed command as JSON.")
    parser.add_argument("--strict", action="store_true", help="Fail if anything is left over after the last option.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log parser debug output.")
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    try:
        if args.curl_file:
            try:
                with open(args.curl_file, 'r', encoding='utf-8') as f:
                    curl_text = f.read()
            except OSError as e:
                print(f"[red]Cannot read {escape(args.curl_file)}: {escape(str(e))}[/red]", file=sys.stderr)
                return 2
        else:
            if sys.stdin.isatty():
                print("Paste your cURL command, then Ctrl-D (Linux/macOS) or Ctrl-Z Enter (Windows):")
            curl_text = sys.stdin.read()

        try:
            if args.strict:
                parsed = parse_curl(curl_text)
            else:
                parsed, rest = parse_curl_prefix(curl_text)
                if rest.strip():
                    logger.warning("Ignored trailing input at position %d: %r", len(curl_text) - len(rest), rest.strip()[:60])
        except CurlParseError as e:
            print(f"[red]Could not parse curl command:[/red] {escape(str(e))}", file=sys.stderr)
            return 1

        if args.json:
            # Plain stdout so the output stays pipeable
            sys.stdout.write(parsed.to_json() + "\n")
        else:
            render_parsed(parsed)
        return 0

    except KeyboardInterrupt:
        print("\n\nInterrupted by user.", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
