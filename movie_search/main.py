import logging
import re
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .db import MongoEngine, MovieStore
from .dispatcher import SearchDispatcher
from .errors import EngineUnavailable, RecordNotFound, SearchError
from .models import AutocompleteResponse, Movie, SearchRequest, SearchResponse, TitleWeightSearchRequest
from .normalize import movie_from_document
from .search_service import autocomplete_suggestions, search_movies, search_movies_with_title_weight

logger = logging.getLogger("uvicorn.error")

app = FastAPI(title="Movie Search API", version="1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.cors_origin],
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)


@app.on_event("startup")
async def startup_event():
    if getattr(app.state, "engine", None) is None:
        app.state.engine = MongoEngine(settings)
    logger.info("Search engine ready for %s.%s", settings.db_name, settings.collection_name)


@app.exception_handler(SearchError)
async def search_error_handler(request: Request, exc: SearchError):
    # Engine internals are only echoed back while developing.
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload(include_details=settings.is_development))


def _serialize(value: Any) -> Any:
    """Convert exceptions nested in validation errors to strings."""
    if isinstance(value, Exception):
        return str(value)
    if isinstance(value, dict):
        return {str(k): _serialize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_serialize(item) for item in value]
    return value


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    details = [_serialize(error) for error in exc.errors()]
    return JSONResponse(status_code=422, content={"error": "Invalid search request", "details": details})


def _dispatcher(request: Request) -> SearchDispatcher:
    return SearchDispatcher(request.app.state.engine)


_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _lenient_int(value: Optional[str], default: int) -> int:
    """Parse the leading integer of a query-string value ("5.9" is 5, "10abc" is 10).

    Falls back to ``default`` when the value is absent or does not start with digits.
    """
    if value is None:
        return default
    match = _LEADING_INT.match(str(value))
    if match is None:
        return default
    try:
        return int(match.group(1))
    except ValueError:
        # Beyond the interpreter's integer string length limit.
        return default


@app.post("/api/search", response_model=SearchResponse)
async def search(
    request: Request,
    req: Optional[SearchRequest] = None,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
):
    req = req or SearchRequest()
    try:
        return await search_movies(
            _dispatcher(request),
            req.query,
            req.filters,
            page=_lenient_int(page, 1),
            limit=_lenient_int(limit, settings.default_page_size),
        )
    except EngineUnavailable as exc:
        logger.exception("Search failed")
        raise EngineUnavailable("Error searching movies", details=exc.details) from exc


@app.post("/api/search/title-weight", response_model=SearchResponse)
async def search_title_weight(
    request: Request,
    req: Optional[TitleWeightSearchRequest] = None,
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
):
    req = req or TitleWeightSearchRequest()
    try:
        return await search_movies_with_title_weight(
            _dispatcher(request),
            req.query,
            req.title_weight,
            page=_lenient_int(page, 1),
            limit=_lenient_int(limit, settings.default_page_size),
        )
    except EngineUnavailable as exc:
        logger.exception("Title weight search failed")
        raise EngineUnavailable("Error searching movies with title weight", details=exc.details) from exc


@app.get("/api/autocomplete", response_model=AutocompleteResponse)
async def autocomplete(request: Request, query: str = ""):
    try:
        return await autocomplete_suggestions(_dispatcher(request), query)
    except EngineUnavailable as exc:
        logger.exception("Autocomplete failed")
        raise EngineUnavailable("Error getting suggestions", details=exc.details) from exc


@app.get("/api/movies/{movie_id}", response_model=Movie)
async def get_movie(request: Request, movie_id: str):
    doc = await MovieStore(request.app.state.engine).get_by_id(movie_id)
    if doc is None:
        raise RecordNotFound("Movie not found")
    return Movie(**movie_from_document(doc))


@app.get("/health")
async def health(request: Request):
    try:
        count = await MovieStore(request.app.state.engine).count()
    except EngineUnavailable:
        raise HTTPException(status_code=503, detail="MongoDB unreachable")
    return JSONResponse({"status": "ok", "movies": count})
