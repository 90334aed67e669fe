import asyncio
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Your configuration and DB
from image_loader.config import settings
from image_loader.core.db import init_db, close_db

from image_loader.api.error_handling import register_exception_handlers
from image_loader.api.v1.routers import auth, users, images
from image_loader.services.factory import build_controller, get_object_store, get_token_codec
from image_loader.services.telegram_bot import TelegramBot, TelegramClient

logger = logging.getLogger("uvicorn.error")

app = FastAPI(title=settings.APP_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

def _log_bot_exit(task: asyncio.Task) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error("[telegram] bot stopped: %r", exc)

@app.on_event("startup")
async def on_startup():
    await init_db()
    objects = await get_object_store(settings)
    tokens = get_token_codec(settings)
    controller = build_controller(settings, objects, tokens)
    app.state.controller = controller
    app.state.tokens = tokens

    app.state.bot_task = None
    app.state.telegram = None
    if settings.telegram_bot_token:
        client = TelegramClient(
            settings.telegram_bot_token,
            api_base=settings.telegram_api_base,
            poll_timeout=settings.telegram_poll_timeout,
        )
        bot = TelegramBot(client, controller, poll_timeout=settings.telegram_poll_timeout)
        app.state.telegram = client
        app.state.bot_task = asyncio.create_task(bot.run())
        app.state.bot_task.add_done_callback(_log_bot_exit)
    else:
        logger.warning("[telegram] TELEGRAM_BOT_TOKEN not set -> bot disabled")

@app.on_event("shutdown")
async def on_shutdown():
    task = getattr(app.state, "bot_task", None)
    if task is not None:
        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
    client = getattr(app.state, "telegram", None)
    if client is not None:
        await client.aclose()
    await close_db()

# REST
app.include_router(auth.router, prefix="/api/v1")
app.include_router(users.router, prefix="/api/v1")
app.include_router(images.router, prefix="/api/v1")

@app.get("/healthz")
def healthz():
    return {"ok": True}
