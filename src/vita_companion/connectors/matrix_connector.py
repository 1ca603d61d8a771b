# src/vita_companion/connectors/matrix_connector.py

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from nio import (
    AsyncClient,
    DownloadResponse,
    MatrixRoom,
    RoomEncryptedAudio,
    RoomMessageAudio,
    RoomMessageText,
    exceptions,
)
from nio.crypto.attachments import decrypt_attachment

from ..cli.commands import handle_message
from ..core.chat import handle_voice
from ..core.state import AppState
from .matrix_client import create_matrix_client

logger = logging.getLogger(__name__)


def _ms_now() -> int:
    return int(time.time() * 1000)


def _room_allowlist(settings_rooms: list[str]) -> set[str] | None:
    rooms = [r.strip() for r in (settings_rooms or []) if str(r).strip()]
    return set(rooms) if rooms else None


def _audio_mime(event) -> str:
    content = (getattr(event, "source", None) or {}).get("content") or {}
    info = content.get("info") or {}
    return str(info.get("mimetype") or getattr(event, "mimetype", None) or "audio/ogg")


async def _send_text(client: AsyncClient, *, room_id: str, text: str) -> None:
    await client.room_send(
        room_id=room_id,
        message_type="m.room.message",
        content={"msgtype": "m.text", "body": text},
        ignore_unverified_devices=True,
    )


async def download_audio(client: AsyncClient, event) -> bytes | None:
    """Fetch the audio attachment of `event`, decrypting it for encrypted rooms."""
    resp = await client.download(mxc=event.url)
    if not isinstance(resp, DownloadResponse):
        logger.warning("Audio download failed for %s: %r", event.url, resp)
        return None

    if isinstance(event, RoomEncryptedAudio):
        return decrypt_attachment(resp.body, event.key["k"], event.hashes["sha256"], event.iv)
    return resp.body


async def _run_matrix_bot(state: AppState, stop_event: asyncio.Event) -> None:
    """
    Matrix connector (async): init -> callbacks -> sync loop.

    Handlers are synchronous (model calls, SQLite), so they run in a worker
    thread under state.lock; progress messages are posted back to this loop.
    """
    settings = state.settings
    if not settings.matrix_enabled:
        logger.info("Matrix connector disabled via settings.")
        return

    startup_ts = _ms_now()
    allowed_rooms = _room_allowlist(getattr(settings, "matrix_rooms", []) or [])
    logger.info("Matrix allowed_rooms=%s", allowed_rooms if allowed_rooms is not None else "ALL")

    client = await create_matrix_client(settings)
    if client is None:
        logger.error("Matrix client creation failed; connector will stop.")
        return

    logger.info("Matrix client started (user=%s, homeserver=%s).", client.user_id, settings.matrix_homeserver)
    loop = asyncio.get_running_loop()

    def _accept(room: MatrixRoom, event) -> bool:
        ts = getattr(event, "server_timestamp", None)
        if ts is not None and ts <= startup_ts:
            return False
        if event.sender == client.user_id:
            return False
        if allowed_rooms is not None and room.room_id not in allowed_rooms:
            return False
        return True

    def _emitter(room_id: str) -> Callable[[str], None]:
        def emit(text: str) -> None:
            fut = asyncio.run_coroutine_threadsafe(_send_text(client, room_id=room_id, text=text), loop)
            fut.result(timeout=30)

        return emit

    def _locked(fn, *args, **kwargs) -> str:
        with state.lock:
            return fn(*args, **kwargs)

    async def _deliver(room: MatrixRoom, work: Callable[[], str]) -> None:
        try:
            with contextlib.suppress(Exception):
                await client.room_typing(room.room_id, typing_state=True, timeout=30000)
            reply = (await asyncio.to_thread(work) or "").strip()
            with contextlib.suppress(Exception):
                await client.room_typing(room.room_id, typing_state=False, timeout=30000)
            if reply:
                await _send_text(client, room_id=room.room_id, text=reply)
                logger.info("Replied in %s (%s).", room.display_name, room.room_id)
        except exceptions.OlmUnverifiedDeviceError:
            logger.warning("Cannot send reply: unverified device.")
        except Exception:
            logger.exception("Failed to handle Matrix message.")
            with contextlib.suppress(Exception):
                await client.room_typing(room.room_id, typing_state=False, timeout=30000)

    async def text_callback(room: MatrixRoom, event: RoomMessageText) -> None:
        if not _accept(room, event):
            return
        body = (event.body or "").strip()
        if not body:
            return
        logger.info("Matrix <%s> %s: %r", room.display_name, event.sender, body[:200])

        await _deliver(
            room,
            lambda: _locked(
                handle_message,
                state,
                body,
                user_id=event.sender,
                room_id=room.room_id,
                emit=_emitter(room.room_id),
            ),
        )

    async def audio_callback(room: MatrixRoom, event) -> None:
        if not _accept(room, event):
            return
        logger.info("Matrix <%s> %s: voice note %s", room.display_name, event.sender, event.url)

        try:
            audio = await download_audio(client, event)
        except Exception:
            logger.exception("Failed to fetch voice note.")
            audio = None
        if not audio:
            await _deliver(room, lambda: "❌ No pude descargar la nota de voz.")
            return

        filename = (getattr(event, "body", "") or "voice.ogg").strip() or "voice.ogg"
        mime = _audio_mime(event)
        await _deliver(
            room,
            lambda: _locked(
                handle_voice,
                state,
                audio,
                filename=filename,
                mime_type=mime,
                user_id=event.sender,
                room_id=room.room_id,
                emit=_emitter(room.room_id),
            ),
        )

    client.add_event_callback(text_callback, RoomMessageText)
    client.add_event_callback(audio_callback, (RoomMessageAudio, RoomEncryptedAudio))

    try:
        logger.info("Matrix initial sync...")
        await client.sync(timeout=30000, full_state=True)
        logger.info("Matrix initial sync done. Joined rooms: %d", len(client.rooms))

        while not stop_event.is_set():
            await client.sync(timeout=30000, full_state=False)

    except asyncio.CancelledError:
        logger.info("Matrix connector cancelled.")
    except Exception:
        logger.exception("Matrix connector crashed.")
    finally:
        with contextlib.suppress(Exception):
            await client.close()
        logger.info("Matrix connector stopped.")


@dataclass
class MatrixBackgroundRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except RuntimeError:
            logger.debug("Failed to signal Matrix stop.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_matrix_in_background(state: AppState) -> MatrixBackgroundRunner | None:
    """Run the Matrix connector on its own event loop so the console REPL can block on input()."""
    if not state.settings.matrix_enabled:
        logger.info("Matrix connector disabled, not starting.")
        return None

    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(_run_matrix_bot(state, stop_event))
        finally:
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="matrix-connector", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Matrix thread did not initialize properly.")
        return None

    logger.info("Matrix background thread started.")
    return MatrixBackgroundRunner(thread=t, loop=loop, stop_event=stop_event)
