"""
Telegram front end.

A thin Telegram Bot API client over httpx plus the bot loop that drives the
controller. The loop is a single background task: a poller long-polls
getUpdates into a queue and the bot handles queued updates strictly one at a
time. Cancelling the task (application shutdown) stops both.

Chat protocol:
- "/start" -> reply with an inline "Show images" button
- "<login> <password>" -> link this Telegram account to that user
- "Show images" button -> send every image of the linked user as 0.jpg, 1.jpg, ...
"""
import asyncio
import contextlib
import logging
from typing import Any, Optional

import httpx

from image_loader.core.errors import NotFoundError, ServiceError

logger = logging.getLogger("uvicorn.error")

SHOW = "show"
REGISTER = "register"
START_CMD = "/start"
IMAGE_EXTENSION = ".jpg"

MSG_KEYBOARD = "Here is your keyboard"
MSG_USAGE = "Send your login and password separated by a space"
MSG_LINKED = "You are registered"
MSG_LINK_FAILED = "Could not authorize"
MSG_NOT_LINKED = "Link your account first: send your login and password separated by a space"
MSG_NO_IMAGES = "You have no images yet"
MSG_FETCH_FAILED = "Could not load your images, please try again later"


class TelegramAPIError(RuntimeError):
    """Bot API answered with ok=false (or with something that is not JSON)."""


class TelegramClient:
    """Minimal async client for the Telegram Bot API methods the bot needs."""

    def __init__(
        self,
        token: str,
        api_base: str = "https://api.telegram.org",
        poll_timeout: int = 60,
        http: Optional[httpx.AsyncClient] = None,
    ):
        self._base = f"{api_base.rstrip('/')}/bot{token}"
        # long polling holds the request open for poll_timeout seconds
        self._http = http or httpx.AsyncClient(timeout=httpx.Timeout(poll_timeout + 10))

    async def _call(self, method: str, **kwargs) -> Any:
        resp = await self._http.post(f"{self._base}/{method}", **kwargs)
        try:
            body = resp.json()
        except ValueError as exc:
            raise TelegramAPIError(f"{method}: HTTP {resp.status_code}, body is not JSON") from exc
        if not isinstance(body, dict):
            raise TelegramAPIError(f"{method}: HTTP {resp.status_code}, unexpected body")
        if not body.get("ok"):
            raise TelegramAPIError(f"{method}: {body.get('description') or f'HTTP {resp.status_code}'}")
        return body.get("result")

    async def get_me(self) -> dict:
        return await self._call("getMe")

    async def get_updates(self, offset: Optional[int] = None, timeout: int = 60) -> list[dict]:
        payload: dict[str, Any] = {"timeout": timeout, "allowed_updates": ["message", "callback_query"]}
        if offset is not None:
            payload["offset"] = offset
        return await self._call("getUpdates", json=payload)

    async def send_message(
        self,
        chat_id: int,
        text: str,
        reply_to_message_id: Optional[int] = None,
        reply_markup: Optional[dict] = None,
    ) -> dict:
        payload: dict[str, Any] = {"chat_id": chat_id, "text": text}
        if reply_to_message_id is not None:
            payload["reply_to_message_id"] = reply_to_message_id
        if reply_markup is not None:
            payload["reply_markup"] = reply_markup
        return await self._call("sendMessage", json=payload)

    async def send_photo(self, chat_id: int, filename: str, data: bytes) -> dict:
        return await self._call(
            "sendPhoto",
            data={"chat_id": str(chat_id)},
            files={"photo": (filename, data)},
        )

    async def answer_callback_query(self, callback_query_id: str) -> bool:
        return await self._call("answerCallbackQuery", json={"callback_query_id": callback_query_id})

    async def aclose(self) -> None:
        await self._http.aclose()


def _keyboard() -> dict:
    return {"inline_keyboard": [[{"text": "Show images", "callback_data": SHOW}]]}


class TelegramBot:
    def __init__(self, client: TelegramClient, controller, poll_timeout: int = 60,
                 error_backoff: float = 3.0, queue_size: int = 100):
        self._client = client
        self._controller = controller
        self._poll_timeout = poll_timeout
        self._error_backoff = error_backoff
        self._queue_size = queue_size

    async def run(self) -> None:
        """Poll and handle updates until cancelled."""
        me = await self._client.get_me()
        logger.info("[telegram] Authorized on account %s", me.get("username"))

        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_size)
        poller = asyncio.create_task(self._poll(queue))
        try:
            while True:
                update = await queue.get()
                await self.handle_update(update)
                queue.task_done()
        finally:
            poller.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await poller

    async def _poll(self, queue: asyncio.Queue) -> None:
        offset = None
        while True:
            try:
                updates = await self._client.get_updates(offset=offset, timeout=self._poll_timeout)
            except (httpx.HTTPError, TelegramAPIError) as exc:
                logger.error("[telegram] getUpdates failed: %s", exc)
                await asyncio.sleep(self._error_backoff)
                continue
            except Exception:
                # only cancellation stops the poller
                logger.exception("[telegram] getUpdates failed")
                await asyncio.sleep(self._error_backoff)
                continue
            for update in updates or []:
                update_id = update.get("update_id") if isinstance(update, dict) else None
                if not isinstance(update_id, int):
                    logger.warning("[telegram] skipping malformed update %r", update)
                    continue
                offset = update_id + 1
                await queue.put(update)

    async def handle_update(self, update: dict) -> None:
        """Handle one update; a failing update is logged and never stops the loop."""
        try:
            if update.get("message"):
                await self.process_message(update["message"])
            elif update.get("callback_query"):
                await self.process_callback(update["callback_query"])
        except Exception:
            logger.exception("[telegram] failed to handle update %s", update.get("update_id"))

    async def process_message(self, message: dict) -> None:
        chat_id = message["chat"]["id"]
        text = (message.get("text") or "").strip()

        if text == START_CMD:
            await self._client.send_message(
                chat_id,
                MSG_KEYBOARD,
                reply_to_message_id=message.get("message_id"),
                reply_markup=_keyboard(),
            )
            return

        parts = text.split()
        if len(parts) < 2:
            await self._client.send_message(chat_id, MSG_USAGE)
            return

        login, password = parts[0], parts[1]
        reply = MSG_LINKED
        try:
            await self._controller.link_chat_identity(message["from"]["id"], login, password)
        except ServiceError as exc:
            logger.info("[telegram] link failed for chat %s: %s", chat_id, exc.message)
            reply = MSG_LINK_FAILED
        await self._client.send_message(chat_id, reply)

    async def process_callback(self, query: dict) -> None:
        data = query.get("data")
        logger.info("[telegram] callback %s", data)
        await self._client.answer_callback_query(query["id"])

        chat_id = query["message"]["chat"]["id"]
        if data == SHOW:
            await self._send_images(chat_id, query["from"]["id"])
        elif data == REGISTER:
            await self._client.send_message(chat_id, MSG_USAGE)

    async def _send_images(self, chat_id: int, telegram_id: int) -> None:
        try:
            images = await self._controller.fetch_assets_for_chat_identity(telegram_id)
        except NotFoundError:
            await self._client.send_message(chat_id, MSG_NOT_LINKED)
            return
        except ServiceError as exc:
            logger.error("[telegram] fetching images for %s failed: %s", telegram_id, exc.message)
            await self._client.send_message(chat_id, MSG_FETCH_FAILED)
            return

        if not images:
            await self._client.send_message(chat_id, MSG_NO_IMAGES)
            return

        for i, payload in enumerate(images):
            try:
                await self._client.send_photo(chat_id, f"{i}{IMAGE_EXTENSION}", payload)
            except (httpx.HTTPError, TelegramAPIError) as exc:
                logger.error("[telegram] sending image %d to %s failed: %s", i, chat_id, exc)
