""" Fetches JSON source feeds concurrently.

    Each URL gets its own worker. Results are either printed as they arrive,
    or collected and returned in the same order as the input URLs. """

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple
from urllib.parse import urlparse
import json

import requests
from rich.console import Console
from rich.json import JSON

from prosign.logger import get_console
from prosign.src.utils.config_loader import DEFAULT_FETCH_TIMEOUT

MAX_BODY_EXCERPT = 1000


@dataclass
class FetchOutcome:
    """Result of fetching one URL"""

    url: str
    ok: bool
    text: str = ""
    status_code: Optional[int] = None
    error: Optional[str] = None
    is_json: bool = False


def fetch_single(url: str, timeout: float = DEFAULT_FETCH_TIMEOUT, session=None) -> FetchOutcome:
    """Fetch one URL and pretty-print its JSON body.

    A body that isn't JSON still counts as a success; the raw text is kept
    so the caller can see what came back.
    """
    session = session if session is not None else requests
    try:
        response = session.get(url, timeout=timeout)
    except requests.exceptions.RequestException as e:
        return FetchOutcome(url=url, ok=False, error=f"Error fetching {url}: {e}")

    status = response.status_code
    if not 200 <= status <= 299:
        return FetchOutcome(
            url=url,
            ok=False,
            text=response.text[:MAX_BODY_EXCERPT],
            status_code=status,
            error=f"HTTP {status} from {url}",
        )

    try:
        data = json.loads(response.text)
    except ValueError:
        return FetchOutcome(url=url, ok=True, text=response.text, status_code=status)

    return FetchOutcome(
        url=url,
        ok=True,
        text=json.dumps(data, indent=2, ensure_ascii=False),
        status_code=status,
        is_json=True,
    )


def _fetch_tagged(
    index: int, url: str, timeout: float, session
) -> Tuple[int, FetchOutcome]:
    return index, fetch_single(url, timeout, session)


def fetch_json_outcomes(
    urls: Iterable[str], timeout: float = DEFAULT_FETCH_TIMEOUT, session=None
) -> List[FetchOutcome]:
    """Fetch every URL concurrently and return outcomes in input order"""
    urls = list(urls)
    if not urls:
        return []

    tagged: List[Tuple[int, FetchOutcome]] = []
    with ThreadPoolExecutor(max_workers=len(urls), thread_name_prefix="prosign-fetch") as executor:
        futures = [
            executor.submit(_fetch_tagged, index, url, timeout, session)
            for index, url in enumerate(urls)
        ]
        for future in as_completed(futures):
            tagged.append(future.result())

    tagged.sort(key=lambda item: item[0])
    return [outcome for _, outcome in tagged]


def print_outcome(console: Console, outcome: FetchOutcome) -> None:
    """Print one outcome the way the fetch command shows it"""
    if not outcome.ok:
        console.print(outcome.error, style="red", markup=False)
        if outcome.status_code is not None and outcome.text:
            console.print("Response body (truncated):")
            console.print(outcome.text, markup=False)
        return

    host = urlparse(outcome.url).hostname or outcome.url
    console.print(f"\n--- JSON from: {outcome.url} ---\n", markup=False)
    if outcome.is_json:
        console.print(JSON(outcome.text))
    else:
        console.print(outcome.text, markup=False)
    console.print(f"\n--- end of {host} ---\n", markup=False)


def fetch_and_print_json(
    urls: Iterable[str],
    console: Optional[Console] = None,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
    session=None,
) -> None:
    """Fetch every URL concurrently, printing each one as soon as it finishes"""
    console = console or get_console()
    urls = list(urls)
    if not urls:
        console.print("No URLs provided.")
        return

    with ThreadPoolExecutor(max_workers=len(urls), thread_name_prefix="prosign-fetch") as executor:
        futures = [executor.submit(fetch_single, url, timeout, session) for url in urls]
        for future in as_completed(futures):
            print_outcome(console, future.result())


def is_valid_url(url: str) -> bool:
    """True if requests can build a request for this string"""
    try:
        requests.models.PreparedRequest().prepare_url(url, None)
    except requests.exceptions.RequestException:
        return False
    return True


def filter_valid_urls(url_strings: Iterable[str], console: Optional[Console] = None) -> List[str]:
    """Drop strings that aren't usable URLs, reporting how many were skipped"""
    url_strings = list(url_strings)
    valid = [url for url in url_strings if is_valid_url(url)]
    skipped = len(url_strings) - len(valid)
    if skipped:
        console = console or get_console()
        console.print(
            f"[yellow]{skipped} string(s) were invalid URLs and were skipped.[/]"
        )
    return valid


def fetch_json_outcomes_from_strings(
    url_strings: Iterable[str],
    timeout: float = DEFAULT_FETCH_TIMEOUT,
    session=None,
    console: Optional[Console] = None,
) -> List[FetchOutcome]:
    return fetch_json_outcomes(filter_valid_urls(url_strings, console), timeout, session)


def fetch_and_print_json_from_strings(
    url_strings: Iterable[str],
    console: Optional[Console] = None,
    timeout: float = DEFAULT_FETCH_TIMEOUT,
    session=None,
) -> None:
    fetch_and_print_json(filter_valid_urls(url_strings, console), console, timeout, session)
