"""
Hook event server.

Receives Claude Code hook events over HTTP, keeps the most recent ones in
memory and renders them as JSON and HTML views.

Usage:
    hook-monitor-server
    hook-monitor-server --port 3030 --api-key my-secret --max-events 100

Environment Variables:
    HOOK_SERVER_HOST   - Bind address (default: 127.0.0.1)
    HOOK_SERVER_PORT   - Port (default: 3030)
    HOOK_API_KEY       - Key expected in the X-API-Key header (default: demo-key-12345)
    HOOK_MAX_EVENTS    - Number of events kept in memory (default: 50)
    CORS_ORIGINS       - Comma-separated allowed origins (default: none)
    DEBUG_LOGGING      - Verbose logging (true/false)
"""

import argparse
import logging
import time
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, Request, Security
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.security import APIKeyHeader

from ..config import SERVER_VERSION, ServerConfig, is_debug_enabled
from ..errors import AuthError, MalformedInputError
from ..logger import configure_logging
from . import projections, views
from .ingest import EventIngestor
from .models import (
    ChatMessage, FileOperation, HealthResponse, IngestResponse, Stats, TimelineEntry,
)
from .store import EventStore

logger = logging.getLogger(__name__)

VERSION_HEADER = "X-Server-Version"
COUNT_HEADER = "X-Events-Count"

# API key header extractor
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def get_store(request: Request) -> EventStore:
    return request.app.state.store


def get_ingestor(request: Request) -> EventIngestor:
    return request.app.state.ingestor


def create_app(config: Optional[ServerConfig] = None) -> FastAPI:
    """Build the FastAPI app with its own event store."""
    config = config or ServerConfig.from_env()

    app = FastAPI(
        title="Hook Event Monitor",
        version=SERVER_VERSION,
        description="Receives Claude Code hook events and renders recent activity",
    )
    app.state.config = config
    app.state.store = EventStore(capacity=config.max_events)
    app.state.ingestor = EventIngestor(app.state.store, api_key=config.api_key)
    app.state.started_at = time.monotonic()

    if config.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        logger.warning(f"Rejected event from {request.client.host if request.client else 'unknown'}: {exc}")
        return JSONResponse(
            status_code=401,
            content={"success": False, "error": str(exc)},
            headers={VERSION_HEADER: SERVER_VERSION},
        )

    @app.exception_handler(MalformedInputError)
    async def malformed_input_handler(request: Request, exc: MalformedInputError):
        logger.warning(f"Rejected malformed event: {exc}")
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": str(exc)},
            headers={VERSION_HEADER: SERVER_VERSION},
        )

    @app.post("/events", response_model=IngestResponse)
    async def receive_event(
        request: Request,
        api_key: Optional[str] = Security(api_key_header),
        ingestor: EventIngestor = Depends(get_ingestor),
    ):
        """Receive an event from a hook script."""
        body = await request.body()
        result = ingestor.ingest(body, api_key)
        return JSONResponse(
            content=IngestResponse(total_events=result.total_events).model_dump(),
            headers={
                VERSION_HEADER: SERVER_VERSION,
                COUNT_HEADER: str(result.total_events),
            },
        )

    @app.get("/api/events")
    async def list_events(store: EventStore = Depends(get_store)):
        """Full store contents, newest first."""
        return {"events": [record.model_dump() for record in store.snapshot()]}

    @app.get("/api/timeline", response_model=list[TimelineEntry])
    async def get_timeline(store: EventStore = Depends(get_store)):
        return projections.timeline(store.snapshot())

    @app.get("/api/chat", response_model=list[ChatMessage])
    async def get_chat(store: EventStore = Depends(get_store)):
        return projections.chat_messages(store.snapshot())

    @app.get("/api/files", response_model=list[FileOperation])
    async def get_file_operations(store: EventStore = Depends(get_store)):
        return projections.file_operations(store.snapshot())

    @app.get("/api/stats", response_model=Stats)
    async def get_stats(store: EventStore = Depends(get_store)):
        return projections.stats(store.snapshot())

    @app.get("/health", response_model=HealthResponse)
    async def health_check(request: Request, store: EventStore = Depends(get_store)):
        """Health check endpoint for container monitoring."""
        return JSONResponse(
            content=HealthResponse(
                events_count=len(store),
                uptime_seconds=int(time.monotonic() - request.app.state.started_at),
            ).model_dump(),
            headers={VERSION_HEADER: SERVER_VERSION},
        )

    # ---------- HTML views ----------

    def html(content: str) -> HTMLResponse:
        return HTMLResponse(content, headers={VERSION_HEADER: SERVER_VERSION})

    @app.get("/", response_class=HTMLResponse)
    async def dashboard(store: EventStore = Depends(get_store)):
        records = store.snapshot()
        return html(views.render_dashboard(projections.timeline(records), projections.stats(records)))

    @app.get("/chat", response_class=HTMLResponse)
    async def chat_view(store: EventStore = Depends(get_store)):
        return html(views.render_chat(projections.chat_messages(store.snapshot())))

    @app.get("/files", response_class=HTMLResponse)
    async def files_view(store: EventStore = Depends(get_store)):
        return html(views.render_files(projections.file_operations(store.snapshot())))

    @app.get("/transactions", response_class=HTMLResponse)
    async def transactions_view(store: EventStore = Depends(get_store)):
        return html(views.render_transactions(store.snapshot()))

    @app.get("/analytics", response_class=HTMLResponse)
    async def analytics_view(store: EventStore = Depends(get_store)):
        return html(views.render_analytics(projections.stats(store.snapshot())))

    return app


def parse_args(config: ServerConfig):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description="Hook Event Monitor server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run on the default port (3030)
  hook-monitor-server

  # Custom port and key, keep the last 100 events
  hook-monitor-server --port 8080 --api-key my-secret --max-events 100
        """,
    )
    parser.add_argument("--host", type=str, default=config.host,
                        help=f"Host to bind to (default: {config.host})")
    parser.add_argument("--port", type=int, default=config.port,
                        help=f"Port to bind to (default: {config.port})")
    parser.add_argument("--api-key", type=str, default=config.api_key,
                        help="Key expected in the X-API-Key header")
    parser.add_argument("--max-events", type=int, default=config.max_events,
                        help=f"Number of events kept in memory (default: {config.max_events})")
    return parser.parse_args()


def main():
    """Main entry point"""
    env_config = ServerConfig.from_env()
    args = parse_args(env_config)
    configure_logging(debug=is_debug_enabled())

    config = ServerConfig(
        host=args.host,
        port=args.port,
        api_key=args.api_key,
        max_events=args.max_events,
        cors_origins=env_config.cors_origins,
    )
    app = create_app(config)

    logger.info(f"Hook events server running at http://{config.host}:{config.port}")
    logger.info(f"View events at http://{config.host}:{config.port}/")
    logger.info(f"Keeping the last {config.max_events} events in memory")

    uvicorn.run(app, host=config.host, port=config.port, log_level="info")


if __name__ == "__main__":
    main()
