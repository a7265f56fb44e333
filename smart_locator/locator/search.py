"""
Natural-language element search over a DocumentModel.

A call runs two phases: an optional reference resolution (a single, non-nested
sub-search when ``near`` is text) and a full scan of the container. Matches are
scored, ancestors subsumed by their descendants are removed, and the best
``max_results`` handles are returned.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from typing import Any, Literal, Optional

from .dedupe import filter_out_ancestors
from .document_model import DocumentModel, ElementHandle, GeometryError, Rect
from .proximity import DIRECTIONS, proximity_score
from .ranking import Candidate, MatchedSource, compute_relevance
from .text_matcher import match_quality, normalize_text, text_matches
from .text_sources import extract_text_sources
from .type_detection import detect_element_type, infer_type_from_query, is_interactive, strip_type_keyword

logger = logging.getLogger(__name__)

DiagnosticKind = Literal["reference_unresolved", "reference_geometry_unavailable", "geometry_unavailable"]


class InputError(ValueError):
    """Invalid query or options; raised before any scanning happens."""


@dataclass(frozen=True)
class SearchOptions:
    type: Optional[str] = None
    exact_match: bool = False
    case_sensitive: bool = False
    container: Any = None
    max_results: int = 10
    include_hidden: bool = False
    near: Any = None
    proximity_threshold: float = 200.0
    directions: tuple[str, ...] = DIRECTIONS

    @classmethod
    def from_settings(cls, settings: Any) -> "SearchOptions":
        return cls(
            max_results=settings.max_results,
            proximity_threshold=settings.proximity_threshold,
            include_hidden=settings.include_hidden,
        )


DEFAULT_OPTIONS = SearchOptions()


@dataclass(frozen=True)
class Diagnostic:
    kind: DiagnosticKind
    message: str


@dataclass
class LocateResult:
    elements: list[ElementHandle] = field(default_factory=list)
    candidates: list[Candidate] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    query: str = ""
    active_type: Optional[str] = None


def merge_options(base: Optional[SearchOptions] = None, **overrides: Any) -> SearchOptions:
    base = base or DEFAULT_OPTIONS
    known = {f.name for f in dataclasses.fields(SearchOptions)}
    unknown = sorted(set(overrides) - known)
    if unknown:
        raise InputError(f"unknown search options: {', '.join(unknown)}")
    if "directions" in overrides:
        directions = overrides["directions"]
        if directions is None or isinstance(directions, str):
            raise InputError("directions must be a list of direction names")
        try:
            overrides["directions"] = tuple(directions)
        except TypeError as exc:
            raise InputError("directions must be a list of direction names") from exc
    options = dataclasses.replace(base, **overrides)
    _validate_options(options)
    return options


def _validate_options(options: SearchOptions) -> None:
    if isinstance(options.max_results, bool) or not isinstance(options.max_results, int) or options.max_results < 0:
        raise InputError("max_results must be a non-negative integer")
    threshold = options.proximity_threshold
    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)) or threshold < 0:
        raise InputError("proximity_threshold must be a non-negative number")
    if not isinstance(options.directions, (tuple, list)):
        raise InputError("directions must be a list of direction names")
    bad = [d for d in options.directions if d not in DIRECTIONS]
    if bad:
        raise InputError(f"unsupported directions: {', '.join(map(str, bad))}")
    if options.type is not None and not isinstance(options.type, str):
        raise InputError("type must be a string")


def prepare_query(query: str, explicit_type: Optional[str]) -> tuple[str, Optional[str]]:
    """Infer a wanted type from the query when none was given, stripping its keyword."""

    if explicit_type:
        return query, explicit_type
    inferred, keyword = infer_type_from_query(query)
    if not inferred or not keyword:
        return query, None
    stripped = strip_type_keyword(query, keyword)
    if not stripped.strip():
        # A query made only of the keyword ("button") keeps its text.
        return query, inferred
    return stripped, inferred


def _diagnose(diagnostics: list[Diagnostic], kind: DiagnosticKind, message: str, level: int = logging.WARNING) -> None:
    diagnostics.append(Diagnostic(kind=kind, message=message))
    logger.log(level, "locate_%s %s", kind, message)


def resolve_reference(
    document: DocumentModel, options: SearchOptions, diagnostics: list[Diagnostic]
) -> Optional[ElementHandle]:
    near = options.near
    if near is None or (isinstance(near, str) and not near):
        return None
    if not isinstance(near, str):
        return near

    sub_options = SearchOptions(
        container=options.container,
        exact_match=options.exact_match,
        case_sensitive=options.case_sensitive,
        include_hidden=options.include_hidden,
        max_results=1,
    )
    found = _locate(document, near, sub_options, diagnostics)
    if found.elements:
        return found.elements[0]
    _diagnose(diagnostics, "reference_unresolved", f"near={near!r}")
    return None


def reference_rect(
    document: DocumentModel, reference: Optional[ElementHandle], near: Any, diagnostics: list[Diagnostic]
) -> Optional[Rect]:
    if reference is None:
        return None
    try:
        rect = document.get_bounding_rect(reference)
    except GeometryError as exc:
        _diagnose(diagnostics, "reference_geometry_unavailable", f"near={near!r} reason={exc}")
        return None
    if rect.is_empty:
        _diagnose(diagnostics, "reference_geometry_unavailable", f"near={near!r} reason=empty_rect")
        return None
    return rect


def collect_matched_sources(
    sources: dict[str, str], query: str, exact_match: bool, case_sensitive: bool
) -> list[MatchedSource]:
    matched: list[MatchedSource] = []
    for kind, text in sources.items():
        if not text_matches(text, query, exact_match, case_sensitive):
            continue
        quality = match_quality(text, query, case_sensitive)
        if quality > 0:
            matched.append(MatchedSource(source_kind=kind, text=text, quality=quality))
    return matched


def _element_proximity(
    document: DocumentModel,
    element: ElementHandle,
    reference: Rect,
    options: SearchOptions,
    diagnostics: list[Diagnostic],
) -> float:
    try:
        target = document.get_bounding_rect(element)
    except GeometryError as exc:
        _diagnose(
            diagnostics,
            "geometry_unavailable",
            f"tag={document.get_tag_name(element)} reason={exc}",
            level=logging.DEBUG,
        )
        return 0.0
    return proximity_score(target, reference, options.proximity_threshold, options.directions)


def scan(
    document: DocumentModel,
    query: str,
    options: SearchOptions,
    active_type: Optional[str] = None,
    reference: Optional[ElementHandle] = None,
    reference_box: Optional[Rect] = None,
    diagnostics: Optional[list[Diagnostic]] = None,
) -> list[Candidate]:
    """Score every element under the container; no deduplication or truncation."""

    if diagnostics is None:
        diagnostics = []
    near_text = options.near if isinstance(options.near, str) else ""
    query_is_reference = normalize_text(query, options.case_sensitive) == normalize_text(
        near_text, options.case_sensitive
    )

    candidates: list[Candidate] = []
    for element in document.enumerate_descendants(options.container):
        hidden = document.is_hidden(element)
        if hidden and not options.include_hidden:
            continue
        if reference is not None and element is reference and not query_is_reference:
            continue

        sources = extract_text_sources(document, element, options.container)
        matched = collect_matched_sources(sources, query, options.exact_match, options.case_sensitive)
        if not matched:
            continue

        detected_type = detect_element_type(document, element)
        proximity = None
        if reference_box is not None:
            proximity = _element_proximity(document, element, reference_box, options, diagnostics)

        relevance = compute_relevance(
            matched,
            detected_type,
            query,
            active_type=active_type,
            exact_match=options.exact_match,
            interactive=is_interactive(document, element),
            hidden=hidden,
            include_hidden=options.include_hidden,
            proximity=proximity,
        )
        if relevance > 0:
            candidates.append(
                Candidate(
                    element=element,
                    matched_sources=matched,
                    relevance=relevance,
                    detected_type=detected_type,
                    text_sources=sources,
                )
            )
    return candidates


def _locate(
    document: DocumentModel, query: str, options: SearchOptions, diagnostics: list[Diagnostic]
) -> LocateResult:
    query, active_type = prepare_query(query, options.type)

    reference = resolve_reference(document, options, diagnostics)
    reference_box = reference_rect(document, reference, options.near, diagnostics)

    candidates = scan(document, query, options, active_type, reference, reference_box, diagnostics)
    kept = filter_out_ancestors(document, candidates)
    kept.sort(key=lambda c: c.relevance, reverse=True)
    top = kept[: options.max_results]

    logger.debug(
        "locate_done query=%r type=%s candidates=%s kept=%s returned=%s",
        query,
        active_type,
        len(candidates),
        len(kept),
        len(top),
    )
    return LocateResult(
        elements=[c.element for c in top],
        candidates=top,
        diagnostics=diagnostics,
        query=query,
        active_type=active_type,
    )


def locate_detailed(
    document: DocumentModel, query: str, options: Optional[SearchOptions] = None, **overrides: Any
) -> LocateResult:
    if not isinstance(query, str) or not query:
        raise InputError("Search text must be a non-empty string")
    options = merge_options(options, **overrides)
    return _locate(document, query, options, [])


def locate(
    document: DocumentModel, query: str, options: Optional[SearchOptions] = None, **overrides: Any
) -> list[ElementHandle]:
    """Return the most relevant element handles for ``query``, best first."""

    return locate_detailed(document, query, options, **overrides).elements

