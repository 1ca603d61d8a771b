# src/vita_companion/connectors/matrix_client.py

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from nio import AsyncClient, AsyncClientConfig, LoginResponse

logger = logging.getLogger(__name__)

try:
    import olm  # type: ignore  # noqa: F401

    OLM_AVAILABLE = True
except ImportError:
    OLM_AVAILABLE = False

SESSION_FILE = "session.json"
_SESSION_KEYS = ("access_token", "user_id", "device_id")


def load_session(store_dir: Path) -> dict[str, str] | None:
    """Return the saved session, or None when it is missing or incomplete."""
    path = store_dir / SESSION_FILE
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text("utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Unreadable Matrix session file %s: %r", path, e)
        return None
    if not isinstance(data, dict) or not all(data.get(k) for k in _SESSION_KEYS):
        logger.warning("Matrix session file %s is missing required fields", path)
        return None
    return {k: str(data[k]) for k in _SESSION_KEYS}


def save_session(store_dir: Path, session: dict[str, Any]) -> Path:
    store_dir.mkdir(parents=True, exist_ok=True)
    path = store_dir / SESSION_FILE
    tmp = path.with_suffix(".tmp")
    tmp.write_text(json.dumps({k: session[k] for k in _SESSION_KEYS}, ensure_ascii=False), "utf-8")
    os.replace(tmp, path)
    try:
        os.chmod(path, 0o600)
    except OSError:
        logger.debug("chmod 600 failed for %s", path, exc_info=True)
    return path


async def create_matrix_client(settings) -> AsyncClient | None:
    """
    Build a logged-in AsyncClient.

    The access token is reused from <matrix_store_path>/session.json when present;
    otherwise a password login bootstraps it. Encrypted rooms are only supported
    when python-olm is installed (the `e2ee` extra).
    """
    homeserver = (settings.matrix_homeserver or "").strip()
    user_id = (settings.matrix_user_id or "").strip()
    password = (settings.matrix_password or "").strip()
    store_dir = Path(settings.matrix_store_path)

    if not homeserver or not user_id:
        logger.error("Matrix is not configured: set VITA_MATRIX_HOMESERVER and VITA_MATRIX_USER_ID")
        return None

    store_dir.mkdir(parents=True, exist_ok=True)

    encryption_enabled = OLM_AVAILABLE
    if encryption_enabled:
        logger.info("python-olm detected: E2EE enabled")
    else:
        logger.warning("python-olm not installed: encrypted rooms will be ignored")

    client = AsyncClient(
        homeserver,
        user_id,
        store_path=str(store_dir) if encryption_enabled else None,
        config=AsyncClientConfig(encryption_enabled=encryption_enabled, store_sync_tokens=True),
    )

    session = load_session(store_dir)
    if session is not None:
        client.access_token = session["access_token"]
        client.user_id = session["user_id"]
        client.device_id = session["device_id"]
        if encryption_enabled:
            try:
                client.load_store()
            except Exception as e:
                logger.warning("Failed to load E2EE store: %r", e)
        logger.info("Matrix session restored for %s", client.user_id)
        return client

    if not password:
        logger.error(
            "Matrix session.json not found and password is not set. "
            "Set VITA_MATRIX_PASSWORD once to bootstrap a session."
        )
        await client.close()
        return None

    device_name = f"{settings.app_name} (Python)"
    logger.info("Logging in to Matrix (device_name=%r)...", device_name)
    resp = await client.login(password=password, device_name=device_name)
    if not isinstance(resp, LoginResponse):
        logger.error("Matrix login failed: %r", resp)
        await client.close()
        return None

    try:
        path = save_session(
            store_dir,
            {"access_token": resp.access_token, "user_id": resp.user_id, "device_id": resp.device_id},
        )
        logger.info("Matrix session saved to %s (user=%s)", path, resp.user_id)
    except OSError as e:
        logger.warning("Failed to write Matrix session file: %r", e)

    return client
