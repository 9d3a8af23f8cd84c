"""
FastAPI application entry point for Tourmail.

Startup: load config, configure logging, open the document store, seed file
templates, wire the engine, subscribe the change feed, start the queue worker.
Shutdown: stop the queue worker.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

log = logging.getLogger("tourmail.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # 1. Load config (singleton, shared with anything calling get_config())
    from .config import get_config
    config = get_config()

    # 2. Configure logging
    from .logging_config import configure_logging
    log_file = configure_logging(config)

    # 3. Store + repositories
    from .core.store import FileDocumentStore
    from .core.template import TemplateRepository
    from .core.trigger import TriggerRegistry
    from .core.email_log import EmailLog
    store = FileDocumentStore(data_dir=config.data_dir)
    templates = TemplateRepository(store)
    registry = TriggerRegistry(store)
    email_log = EmailLog(store)

    seeded = templates.seed(config.templates_dir)

    # 4. Delivery + dispatch
    from .core.auth import StaticAdminPolicy
    from .core.dispatcher import Dispatcher
    from .core.mailer import create_mailer
    from .core.models import Branding, Sender
    mailer = create_mailer(config)
    dispatcher = Dispatcher(
        templates=templates,
        mailer=mailer,
        email_log=email_log,
        sender=Sender(email=config.from_email, name=config.from_name, reply_to=config.reply_to),
        branding=Branding(title=config.brand_title, tagline=config.brand_tagline),
    )
    policy = StaticAdminPolicy(config.admin_ids)

    from .service.manual import ManualDispatch
    from .service.processor import EventProcessor
    manual = ManualDispatch(dispatcher=dispatcher, policy=policy, store=store)
    processor = EventProcessor(registry=registry, dispatcher=dispatcher)

    # 5. Change feed: store writes on watched collections → queue → processor
    from .service.queue import EventQueue
    from .service.watcher import CollectionWatcher
    queue = EventQueue()
    store.subscribe(CollectionWatcher(config.watched_collections, queue))
    queue_task = asyncio.create_task(queue.worker(processor))

    if not mailer.configured:
        log.warning("Mail provider %s is not configured; triggers will not send", mailer.provider_id)
    if not config.admin_ids:
        log.warning("No administrators configured (auth.admin_ids); manual sends are disabled")

    log.info("Started  log=%s mailer=%s", log_file.name, mailer.provider_id)
    log.info("Templates seeded  count=%d", seeded)
    log.info("Watching  collections=%s", ",".join(sorted(config.watched_collections)))

    app.state.config = config
    app.state.store = store
    app.state.templates = templates
    app.state.registry = registry
    app.state.email_log = email_log
    app.state.mailer = mailer
    app.state.dispatcher = dispatcher
    app.state.policy = policy
    app.state.manual = manual
    app.state.processor = processor
    app.state.queue = queue

    yield

    # Shutdown
    log.info("Shutting down...")
    queue.stop()
    queue_task.cancel()
    try:
        await asyncio.wait_for(queue_task, timeout=2.0)
    except (asyncio.CancelledError, asyncio.TimeoutError):
        pass
    log.info("Shutdown complete")


def create_app() -> FastAPI:
    app = FastAPI(title="Tourmail", version="1.0.0", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    from .api.routes.documents import router as documents_router
    from .api.routes.emails import router as emails_router
    from .api.routes.settings import router as settings_router
    from .api.routes.setup import router as setup_router
    from .api.routes.templates import router as templates_router
    from .api.routes.triggers import router as triggers_router

    app.include_router(emails_router, prefix="/api")
    app.include_router(templates_router, prefix="/api")
    app.include_router(triggers_router, prefix="/api")
    app.include_router(documents_router, prefix="/api")
    app.include_router(settings_router, prefix="/api")
    app.include_router(setup_router, prefix="/api")

    return app


app = create_app()


if __name__ == "__main__":
    import os

    import uvicorn

    from .config import get_config

    cfg = get_config()
    uvicorn.run(
        "tourmail.server:app",
        host=str(cfg.get("server.host", "0.0.0.0")),
        port=int(cfg.get("server.port", 8000)),
        reload=os.getenv("DEV_MODE", "").lower() in ("1", "true"),
    )
