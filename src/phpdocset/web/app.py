"""FastAPI application serving a built docset."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from fastapi import FastAPI, HTTPException, Query
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from phpdocset.docset import documents_dir, get_docset_bundle_name, index_path
from phpdocset.index.storage import SearchIndexStore

LOGGER = logging.getLogger(__name__)

MAX_LIMIT = 100


class SearchHit(BaseModel):
    name: str
    type: str
    path: str


class SearchResponse(BaseModel):
    results: List[SearchHit]


def create_app(docset: Path) -> FastAPI:
    """Build the app for one docset directory."""
    docset = Path(docset)
    title = get_docset_bundle_name(docset) or docset.name
    app = FastAPI(title=title, version="0.1.0")

    @app.get("/search", response_model=SearchResponse)
    async def search_index(
        q: str = Query("", description="Symbol name or part of it"),
        limit: int = 20,
    ) -> SearchResponse:
        query = q.strip()
        if not query:
            raise HTTPException(status_code=400, detail="Empty query")

        db_path = index_path(docset)
        if not db_path.exists():
            raise HTTPException(status_code=404, detail=f"Search index not found at {db_path}")

        store = SearchIndexStore(db_path)
        try:
            entries = store.search(query, limit=max(1, min(limit, MAX_LIMIT)))
        finally:
            store.close()
        return SearchResponse(
            results=[SearchHit(name=e.name, type=e.type.value, path=e.path) for e in entries]
        )

    documents = documents_dir(docset)
    if documents.is_dir():
        app.mount("/manual", StaticFiles(directory=documents, html=True), name="manual")
    else:
        LOGGER.warning("Documents directory not found: %s", documents)

    return app
