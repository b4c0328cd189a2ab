"""
Start and stop the blog service in-process.

run_server() connects to the database, binds the listener on a background
thread and returns a ServerHandle; close_server() takes that handle and
tears both down. Integration tests drive a real socket this way.
"""
import logging
import threading
import time
from dataclasses import dataclass
from typing import Optional

import uvicorn

from apps.blog import config
from apps.blog.main import create_app
from apps.shared.database import Database

logger = logging.getLogger(__name__)

STARTUP_TIMEOUT_SECONDS = 10.0


@dataclass
class ServerHandle:
    server: uvicorn.Server
    thread: threading.Thread
    database: Database
    host: str
    port: int

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"


def _bound_port(server: uvicorn.Server, default: int) -> int:
    for listener in server.servers:
        for sock in listener.sockets:
            return sock.getsockname()[1]
    return default


def run_server(
    database_url: Optional[str] = None,
    port: Optional[int] = None,
    host: str = "127.0.0.1",
) -> ServerHandle:
    """
    Connect to the database and start listening.

    Port 0 picks a free port; the chosen one is on the returned handle.
    Raises RuntimeError if the listener cannot be bound, after
    disconnecting from the database.
    """
    database_url = database_url or config.DATABASE_URL
    port = config.PORT if port is None else port

    database = Database.connect(database_url, timeout=config.STORAGE_TIMEOUT_SECONDS)
    app = create_app(database)

    server = uvicorn.Server(
        uvicorn.Config(app, host=host, port=port, log_config=None, access_log=False)
    )
    thread = threading.Thread(target=server.run, name="blog-server", daemon=True)
    thread.start()

    deadline = time.monotonic() + STARTUP_TIMEOUT_SECONDS
    while not server.started:
        if not thread.is_alive() or time.monotonic() > deadline:
            server.should_exit = True
            thread.join(timeout=STARTUP_TIMEOUT_SECONDS)
            database.dispose()
            raise RuntimeError(f"Blog service could not listen on {host}:{port}")
        time.sleep(0.01)

    handle = ServerHandle(
        server=server,
        thread=thread,
        database=database,
        host=host,
        port=_bound_port(server, port),
    )
    logger.info(f"Blog service listening on {handle.base_url}")
    return handle


def close_server(handle: ServerHandle) -> None:
    """Stop the listener and disconnect from the database."""
    logger.info("Closing server")
    handle.server.should_exit = True
    handle.thread.join(timeout=STARTUP_TIMEOUT_SECONDS)
    handle.database.dispose()
