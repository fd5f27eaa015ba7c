"""
Client settings.

Every ECHO_* variable is optional. With none set the client uses its fixed
defaults: resolved local host, port 7171, payload "Hello",
reply buffer sized to the payload, no timeout.
"""
from __future__ import annotations

from dataclasses import dataclass
import os

from echoclient.transport.udp import resolve_local_host

DEFAULT_PORT = 7171
DEFAULT_PAYLOAD = "Hello"


@dataclass(frozen=True)
class Settings:
    host: str
    port: int
    payload: bytes
    encoding: str
    recv_buf: int | None
    timeout_s: float | None
    log_level: str
    sim_http: str


def _optional(name: str, cast):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return cast(raw)


def get_settings() -> Settings:
    """
    Centralized configuration for the client and the tests.
    Values come from environment variables; with none set the client
    talks to the resolved local host on port 7171 and sends "Hello".
    """
    encoding = os.getenv("ECHO_ENCODING", "utf-8")
    host = os.getenv("ECHO_HOST") or resolve_local_host()
    return Settings(
        host=host,
        port=int(os.getenv("ECHO_PORT", str(DEFAULT_PORT))),
        payload=os.getenv("ECHO_PAYLOAD", DEFAULT_PAYLOAD).encode(encoding),
        encoding=encoding,
        recv_buf=_optional("ECHO_RECV_BUF", int),
        timeout_s=_optional("ECHO_TIMEOUT_S", float),
        log_level=os.getenv("ECHO_LOG_LEVEL", "WARNING").upper(),
        sim_http=os.getenv("ECHO_SIM_HTTP", "http://127.0.0.1:8000"),
    )
