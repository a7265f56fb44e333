import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from .browser import BrowserSession
from .page_snapshot import PageSnapshot, SnapshotNode
from .ranking import Candidate
from .search import Diagnostic, InputError, SearchOptions, locate_detailed

logger = logging.getLogger(__name__)

_run_lock: asyncio.Lock | None = None
_run_lock_loop: asyncio.AbstractEventLoop | None = None


@dataclass
class LocatedElement:
    index: int
    tag: str
    xpath: str
    text: str
    relevance: float
    detected_type: str
    matched_sources: list[str] = field(default_factory=list)
    bounds: Optional[tuple[float, float, float, float]] = None


@dataclass
class PageLocateResult:
    url: str
    query: str
    results: list[LocatedElement]
    diagnostics: list[Diagnostic]


def _trim(value: str, limit: int = 80) -> str:
    value = " ".join((value or "").split())
    return value[:limit]


def describe_candidate(snapshot: PageSnapshot, candidate: Candidate) -> LocatedElement:
    node: SnapshotNode = candidate.element
    return LocatedElement(
        index=node.index,
        tag=node.tag,
        xpath=snapshot.xpath(node),
        text=_trim(snapshot.get_inner_text(node) or snapshot.get_text(node)),
        relevance=round(candidate.relevance, 3),
        detected_type=candidate.detected_type,
        matched_sources=[m.source_kind for m in candidate.matched_sources],
        bounds=node.bounds,
    )


def locate_in_snapshot(
    snapshot: PageSnapshot, query: str, options: Optional[SearchOptions] = None
) -> tuple[list[LocatedElement], list[Diagnostic]]:
    result = locate_detailed(snapshot, query, options)
    return [describe_candidate(snapshot, c) for c in result.candidates], result.diagnostics


def _get_run_lock() -> asyncio.Lock:
    """Ensure only one browser session runs per event loop.

    Playwright does not always behave well when multiple persistent contexts
    share a profile directory, so page lookups are serialized. The lock is
    recreated if a new event loop is used (e.g. the CLI via asyncio.run).
    """

    global _run_lock, _run_lock_loop

    loop = asyncio.get_running_loop()
    if _run_lock is None or _run_lock_loop is not loop:
        _run_lock = asyncio.Lock()
        _run_lock_loop = loop

    return _run_lock


async def locate_on_page_async(
    url: str,
    query: str,
    options: Optional[SearchOptions] = None,
    session_factory=BrowserSession,
) -> PageLocateResult:
    """Open ``url``, snapshot the rendered page and locate ``query`` in it."""

    if not isinstance(query, str) or not query:
        raise InputError("Search text must be a non-empty string")
    logger.info("locate_on_page url=%s query=%r", url, query)
    async with _get_run_lock():
        async with session_factory() as session:
            await session.goto(url)
            snapshot = await session.capture_page_snapshot()

    if snapshot is None:
        raise RuntimeError("page snapshot unavailable")

    results, diagnostics = locate_in_snapshot(snapshot, query, options)
    return PageLocateResult(url=url, query=query, results=results, diagnostics=diagnostics)


def locate_on_page_blocking(url: str, query: str, options: Optional[SearchOptions] = None) -> PageLocateResult:
    """Synchronous wrapper for CLI usage."""

    return asyncio.run(locate_on_page_async(url, query, options))
