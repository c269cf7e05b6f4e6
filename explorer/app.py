"""
HTTP surface of the insight explorer.

Thin FastAPI routes over the block resolver and the date-range paginator.
All node access goes through the services stored on ``app.state``.
"""
import asyncio
import time
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable, Optional

import structlog
from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.responses import PlainTextResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

from cache.block_cache import BlockCache
from chain.errors import BlockNotFoundError, ExplorerError, UpstreamError, ValidationError
from chain.pools import PoolAttributor
from chain.rewards import HourlySubsidyTable, RewardCalculator
from config.logging import log_error
from config.settings import ExplorerSettings, get_settings
from node.base import BlockNode
from node.rpc import DashdRPCNode

from .pagination import DateRangePaginator, utc_now
from .resolver import BlockResolver, parse_height
from .search import search_types_payload

logger = structlog.get_logger()

REQUEST_COUNT = Counter(
    'insight_http_requests_total',
    'Total HTTP requests',
    ['endpoint', 'method', 'status']
)

REQUEST_LATENCY = Histogram(
    'insight_http_request_duration_seconds',
    'HTTP request latency',
    ['endpoint', 'method']
)


def build_node(settings: ExplorerSettings) -> BlockNode:
    return DashdRPCNode(
        settings.RPC_URL,
        user=settings.RPC_USER,
        password=settings.RPC_PASSWORD,
        timeout=settings.RPC_TIMEOUT
    )


def build_reward_calculator(settings: ExplorerSettings) -> RewardCalculator:
    table = settings.REWARD_HOURLY_TABLE
    if table is None:
        table = HourlySubsidyTable.generate(settings.REWARD_TABLE_SEED)
    return RewardCalculator(table)


async def poll_chain_tip(node: BlockNode, interval: float) -> None:
    """Keep the node's tip height current for confirmation counts."""
    while True:
        try:
            height = await node.refresh_height()
            logger.debug("chain_tip_refreshed", height=height)
        except ExplorerError as e:
            log_error(logger, e, {"task": "poll_chain_tip"})
        await asyncio.sleep(interval)


router = APIRouter()


def get_resolver(request: Request) -> BlockResolver:
    return request.app.state.resolver


@router.get("/block/{block_hash}")
async def block(request: Request, block_hash: str):
    """Find block by hash or height."""
    resolver = get_resolver(request)
    block_hash = await resolver.resolve_block_hash(block_hash)
    detail = await resolver.resolve_block(block_hash)
    return detail.model_dump(by_alias=True)


@router.get("/block-header/{block_hash}")
async def block_header(request: Request, block_hash: str):
    """Find block header by hash or height."""
    resolver = get_resolver(request)
    block_hash = await resolver.resolve_block_hash(block_hash)
    header = await resolver.resolve_header(block_hash)
    return header.model_dump(by_alias=True)


@router.get("/block-headers/{block_identifier}")
@router.get("/block-headers/{block_identifier}/{nb_of_block}")
async def block_headers(request: Request, block_identifier: str, nb_of_block: Optional[str] = None):
    """Headers starting at a hash or height, 25 unless a positive count is given."""
    count = None
    if nb_of_block is not None:
        try:
            count = int(nb_of_block)
        except ValueError:
            count = None
    headers = await get_resolver(request).resolve_headers(block_identifier, count)
    return {"headers": [header.model_dump(by_alias=True) for header in headers]}


@router.get("/rawblock/{block_hash}")
async def raw_block(request: Request, block_hash: str):
    """Find raw block by hash or height."""
    resolver = get_resolver(request)
    block_hash = await resolver.resolve_block_hash(block_hash)
    return {"rawblock": await resolver.resolve_raw_block(block_hash)}


@router.get("/block-index/{height}")
async def block_index(request: Request, height: str):
    """Block hash at a height."""
    block_hash = await get_resolver(request).block_index(parse_height(height))
    return {"blockHash": block_hash}


@router.get("/blocks")
async def blocks(
    request: Request,
    block_date: Optional[str] = Query(None, alias="blockDate"),
    start_timestamp: Optional[int] = Query(None, alias="startTimestamp"),
    limit: Optional[int] = Query(None, gt=0)
):
    """List blocks by date."""
    page = await request.app.state.paginator.list_by_date(block_date, start_timestamp, limit)
    return page.to_dict()


@router.get("/search")
@router.get("/search/{searchstr}")
async def search(searchstr: Optional[str] = None):
    """Suggest search target types for a search string."""
    return {"status": 200, "data": search_types_payload(searchstr)}


@router.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


async def not_found_handler(request: Request, exc: BlockNotFoundError) -> PlainTextResponse:
    return PlainTextResponse("Not found", status_code=404)


async def validation_error_handler(request: Request, exc: ValidationError) -> PlainTextResponse:
    return PlainTextResponse(str(exc), status_code=400)


async def upstream_error_handler(request: Request, exc: UpstreamError) -> PlainTextResponse:
    log_error(logger, exc, {"path": request.url.path, "code": exc.code})
    if exc.code is not None:
        return PlainTextResponse(f"{exc.message}. Code:{exc.code}", status_code=400)
    return PlainTextResponse(exc.message, status_code=503)


def create_app(
    settings: Optional[ExplorerSettings] = None,
    node: Optional[BlockNode] = None,
    rewards: Optional[RewardCalculator] = None,
    clock: Callable[[], datetime] = utc_now
) -> FastAPI:
    """
    Build the explorer application.

    Args:
        settings: Configuration, loaded from the environment by default
        node: Node collaborator, a dashd RPC client by default
        rewards: Reward calculator, built from settings by default
        clock: Source of the current UTC time for "today" listings
    """
    settings = settings or get_settings()
    node = node or build_node(settings)
    rewards = rewards or build_reward_calculator(settings)

    cache = BlockCache(
        block_cache_size=settings.BLOCK_CACHE_SIZE,
        summary_cache_size=settings.BLOCK_SUMMARY_CACHE_SIZE,
        min_confirmations=settings.BLOCK_CACHE_CONFIRMATIONS
    )
    resolver = BlockResolver(node, cache, rewards, PoolAttributor.load(settings.POOLS_FILE))
    paginator = DateRangePaginator(node, resolver, settings.BLOCK_LIST_LIMIT, clock)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("explorer_starting", rpc_url=settings.RPC_URL, prefix=settings.API_PREFIX)
        try:
            await node.refresh_height()
        except ExplorerError as e:
            # Left unknown; the first request that needs it asks again
            log_error(logger, e, {"task": "initial_tip_refresh"})
        poller = None
        if settings.TIP_POLL_INTERVAL > 0:
            poller = asyncio.create_task(poll_chain_tip(node, settings.TIP_POLL_INTERVAL))
        try:
            yield
        finally:
            if poller is not None:
                poller.cancel()
                try:
                    await poller
                except asyncio.CancelledError:
                    pass
            await node.close()
            cache.monitor.log_metrics(cache.get_stats())
            logger.info("explorer_stopped")

    app = FastAPI(
        title="Insight Explorer",
        description="Block read path of the insight block explorer API",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.node = node
    app.state.cache = cache
    app.state.resolver = resolver
    app.state.paginator = paginator

    app.add_exception_handler(BlockNotFoundError, not_found_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(UpstreamError, upstream_error_handler)

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        route = request.scope.get("route")
        endpoint = route.path if route is not None else "unmatched"
        REQUEST_COUNT.labels(endpoint=endpoint, method=request.method,
                             status=response.status_code).inc()
        REQUEST_LATENCY.labels(endpoint=endpoint, method=request.method).observe(
            time.time() - start_time
        )
        return response

    app.include_router(router, prefix=settings.API_PREFIX)
    return app
