from __future__ import annotations
import sys
from typing import TextIO

from echoclient.config.settings import Settings, get_settings
from echoclient.transport.udp import UdpClient, UdpEndpoint, decode_reply
from echoclient.utils.log import make_logger, set_level

log = make_logger(__name__)


def run(settings: Settings | None = None, out: TextIO | None = None) -> str:
    """
    One exchange: send the payload, block for one reply, print it.
    Errors are not handled here; they end the process.
    """
    if settings is None:
        settings = get_settings()
    if out is None:
        out = sys.stdout

    endpoint = UdpEndpoint(settings.host, settings.port)
    log.debug("endpoint %s:%d", endpoint.host, endpoint.port)

    client = UdpClient(endpoint, timeout_s=settings.timeout_s)
    data = client.request_once(settings.payload, recv_buf=settings.recv_buf)
    received = decode_reply(data, settings.encoding)

    out.write(f"Received: {received}\n")
    out.flush()
    return received


def main() -> None:
    settings = get_settings()
    set_level(settings.log_level)
    run(settings)
