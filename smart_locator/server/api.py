from __future__ import annotations

import logging
from typing import Any, List, Literal, Optional

from fastapi import FastAPI, HTTPException, status
from playwright.async_api import Error as PlaywrightError
from pydantic import BaseModel, Field, conlist

from ..config import settings
from ..locator.orchestrator import LocatedElement, locate_in_snapshot, locate_on_page_async
from ..locator.page_snapshot import PageSnapshot, SnapshotNode
from ..locator.search import Diagnostic, InputError, SearchOptions, merge_options

logger = logging.getLogger(__name__)

app = FastAPI(title="smart-locator")

Direction = Literal["right", "below", "left", "above"]


class NodeRef(BaseModel):
    index: int


class SnapshotNodeModel(BaseModel):
    index: int
    node_name: str
    attributes: dict[str, str] = Field(default_factory=dict)
    text: Optional[str] = None
    parent_index: Optional[int] = None
    node_type: int = 1
    bounds: Optional[conlist(float, min_length=4, max_length=4)] = None
    styles: dict[str, str] = Field(default_factory=dict)
    is_clickable: bool = False
    input_value: Optional[str] = None


class SnapshotModel(BaseModel):
    nodes: List[SnapshotNodeModel]


class LocateOptionsModel(BaseModel):
    type: Optional[str] = None
    exact_match: bool = False
    case_sensitive: bool = False
    max_results: Optional[int] = Field(default=None, ge=0)
    include_hidden: Optional[bool] = None
    near: str | NodeRef | None = None
    proximity_threshold: Optional[float] = Field(default=None, ge=0)
    directions: Optional[List[Direction]] = None
    container: Optional[NodeRef] = None


class LocateRequest(BaseModel):
    query: str
    options: LocateOptionsModel = Field(default_factory=LocateOptionsModel)
    snapshot: SnapshotModel


class PageLocateRequest(BaseModel):
    url: str
    query: str
    options: LocateOptionsModel = Field(default_factory=LocateOptionsModel)


class LocatedElementModel(BaseModel):
    index: int
    tag: str
    xpath: str
    text: str
    relevance: float
    detected_type: str
    matched_sources: List[str]
    bounds: Optional[List[float]] = None


class DiagnosticModel(BaseModel):
    kind: str
    message: str


class LocateResponse(BaseModel):
    query: str
    results: List[LocatedElementModel]
    diagnostics: List[DiagnosticModel]


def _build_snapshot(payload: SnapshotModel) -> PageSnapshot:
    nodes = [
        SnapshotNode(
            index=n.index,
            node_name=n.node_name.lower(),
            attributes=dict(n.attributes),
            text_snippet=n.text,
            parent_index=n.parent_index,
            node_type=n.node_type,
            bounds=tuple(n.bounds) if n.bounds else None,
            styles=dict(n.styles),
            is_clickable=n.is_clickable,
            input_value=n.input_value,
        )
        for n in payload.nodes
    ]
    return PageSnapshot.from_nodes(nodes)


def _node_for(snapshot: Optional[PageSnapshot], ref: NodeRef, field_name: str) -> Any:
    node = snapshot.node(ref.index) if snapshot is not None else None
    if node is None:
        raise InputError(f"{field_name} refers to unknown node index {ref.index}")
    return node


def _build_options(payload: LocateOptionsModel, snapshot: Optional[PageSnapshot] = None) -> SearchOptions:
    overrides: dict[str, Any] = payload.model_dump(exclude_none=True, exclude={"near", "container"})
    if isinstance(payload.near, NodeRef):
        overrides["near"] = _node_for(snapshot, payload.near, "near")
    elif payload.near is not None:
        overrides["near"] = payload.near
    if payload.container is not None:
        overrides["container"] = _node_for(snapshot, payload.container, "container")
    return merge_options(SearchOptions.from_settings(settings), **overrides)


def _to_response(query: str, results: List[LocatedElement], diagnostics: List[Diagnostic]) -> LocateResponse:
    return LocateResponse(
        query=query,
        results=[
            LocatedElementModel(
                index=r.index,
                tag=r.tag,
                xpath=r.xpath,
                text=r.text,
                relevance=r.relevance,
                detected_type=r.detected_type,
                matched_sources=r.matched_sources,
                bounds=list(r.bounds) if r.bounds else None,
            )
            for r in results
        ],
        diagnostics=[DiagnosticModel(kind=d.kind, message=d.message) for d in diagnostics],
    )


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/locate", response_model=LocateResponse)
def locate_in_posted_snapshot(payload: LocateRequest):
    """Locate elements inside a snapshot captured elsewhere."""

    try:
        snapshot = _build_snapshot(payload.snapshot)
        options = _build_options(payload.options, snapshot)
        results, diagnostics = locate_in_snapshot(snapshot, payload.query, options)
    except InputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return _to_response(payload.query, results, diagnostics)


@app.post("/locate/page", response_model=LocateResponse)
async def locate_in_live_page(payload: PageLocateRequest):
    """Open the URL in a browser and locate elements in the rendered page."""

    if isinstance(payload.options.near, NodeRef) or payload.options.container is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="node references are only valid with a posted snapshot",
        )
    try:
        options = _build_options(payload.options)
        result = await locate_on_page_async(payload.url, payload.query, options)
    except InputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except (RuntimeError, PlaywrightError) as exc:
        logger.warning("locate_page_failed url=%s reason=%s", payload.url, exc)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return _to_response(payload.query, result.results, result.diagnostics)
