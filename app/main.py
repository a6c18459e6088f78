"""Entry point for the FastAPI-powered catalog browser."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .catalog_options import MOVIE_TYPES, SERIES_TYPES, options_payload
from .config import settings
from .database import Database
from .filters import FilterConfiguration
from .membership import ListName, MembershipStore
from .models import Title
from .services.collection import CollectionView, ViewState
from .services.imdb_api import ImdbApiClient
from .services.search import SearchView
from .services.title_detail import load_title_detail
from .storage import DatabaseStorage, StorageError

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app: FastAPI


def build_collections(client: ImdbApiClient) -> dict[str, CollectionView]:
    """Return the browse listings keyed by their route name."""

    return {
        "home": CollectionView(client, label="home"),
        "movies": CollectionView(client, pinned_types=MOVIE_TYPES, label="movies"),
        "series": CollectionView(client, pinned_types=SERIES_TYPES, label="series"),
    }


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    timeout = (
        httpx.Timeout(settings.http_timeout_seconds)
        if settings.http_timeout_seconds is not None
        else httpx.Timeout(None)
    )
    http_client = await exit_stack.enter_async_context(
        httpx.AsyncClient(base_url=settings.metadata_base_url, timeout=timeout)
    )
    database = Database(settings.database_url)
    database.create_all()

    client = ImdbApiClient(settings, http_client)
    fastapi_app.state.client = client
    fastapi_app.state.database = database
    fastapi_app.state.membership = MembershipStore(
        DatabaseStorage(database), namespace=settings.storage_namespace
    )
    fastapi_app.state.collections = build_collections(client)
    fastapi_app.state.search = SearchView(client)

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        database.dispose()
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Browse, filter and shortlist movies and series",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def get_collection(fastapi_app: FastAPI, name: str) -> CollectionView:
    collections: dict[str, CollectionView] = getattr(
        fastapi_app.state, "collections", {}
    )
    collection = collections.get(name)
    if collection is None:
        raise HTTPException(status_code=404, detail=f"Unknown collection: {name}")
    return collection


def get_membership(fastapi_app: FastAPI) -> MembershipStore:
    store = getattr(fastapi_app.state, "membership", None)
    if not isinstance(store, MembershipStore):
        raise RuntimeError("Membership store not initialised")
    return store


def parse_list_name(name: str) -> ListName:
    try:
        return ListName(name)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=f"Unknown list: {name}") from exc


def register_routes(fastapi_app: FastAPI) -> None:
    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.get("/api/options")
    async def list_options() -> dict[str, object]:
        return options_payload()

    @fastapi_app.get("/api/collections/{name}")
    async def collection_state(name: str) -> JSONResponse:
        collection = get_collection(fastapi_app, name)
        if collection.state is ViewState.IDLE:
            await collection.load()
        return JSONResponse(collection.snapshot())

    @fastapi_app.put("/api/collections/{name}/filters")
    async def update_filters(name: str, filters: FilterConfiguration) -> JSONResponse:
        collection = get_collection(fastapi_app, name)
        await collection.set_filters(filters)
        return JSONResponse(collection.snapshot())

    @fastapi_app.delete("/api/collections/{name}/filters")
    async def reset_filters(name: str) -> JSONResponse:
        collection = get_collection(fastapi_app, name)
        await collection.reset_filters()
        return JSONResponse(collection.snapshot())

    @fastapi_app.post("/api/collections/{name}/more")
    async def load_more(name: str) -> JSONResponse:
        collection = get_collection(fastapi_app, name)
        requested = await collection.load_more()
        payload = collection.snapshot()
        payload["requested"] = requested
        return JSONResponse(payload)

    @fastapi_app.get("/api/search")
    async def search(q: str = Query(default="")) -> JSONResponse:
        search_view: SearchView = fastapi_app.state.search
        await search_view.search(q)
        return JSONResponse(search_view.snapshot())

    @fastapi_app.get("/api/titles/{title_id}")
    async def title_detail(title_id: str) -> JSONResponse:
        result = await load_title_detail(fastapi_app.state.client, title_id)
        if not result.success:
            raise HTTPException(status_code=502, detail=result.error)
        store = get_membership(fastapi_app)
        payload: dict[str, Any] = result.data.to_payload()
        payload["favorite"] = store.is_favorite(title_id)
        payload["watchlist"] = store.is_in_watchlist(title_id)
        return JSONResponse(payload)

    @fastapi_app.get("/api/lists")
    async def list_counts() -> dict[str, int]:
        return get_membership(fastapi_app).counts()

    @fastapi_app.get("/api/lists/{name}")
    async def list_entries(name: str) -> JSONResponse:
        list_name = parse_list_name(name)
        entries = get_membership(fastapi_app).entries(list_name)
        return JSONResponse(
            {
                "name": list_name.value,
                "titles": [title.to_record() for title in entries],
                "count": len(entries),
            }
        )

    @fastapi_app.post("/api/lists/{name}")
    async def toggle_entry(name: str, payload: dict[str, Any]) -> JSONResponse:
        list_name = parse_list_name(name)
        try:
            title = Title.model_validate(payload)
        except ValidationError as exc:
            raise HTTPException(status_code=400, detail=exc.errors()) from exc
        try:
            member = get_membership(fastapi_app).toggle(list_name, title)
        except StorageError as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        return JSONResponse({"id": title.id, "list": list_name.value, "member": member})

    @fastapi_app.get("/api/lists/{name}/{title_id}")
    async def list_membership(name: str, title_id: str) -> dict[str, object]:
        list_name = parse_list_name(name)
        member = get_membership(fastapi_app).contains(list_name, title_id)
        return {"id": title_id, "list": list_name.value, "member": member}


app = create_app()
