from __future__ import annotations
import socket
from dataclasses import dataclass

from echoclient.utils.log import make_logger

log = make_logger(__name__)


def resolve_local_host() -> str:
    """Address of this machine as the OS resolves its own host name."""
    return socket.gethostbyname(socket.gethostname())


@dataclass(frozen=True)
class UdpEndpoint:
    host: str
    port: int


class UdpClient:
    def __init__(self, endpoint: UdpEndpoint, timeout_s: float | None = None):
        self._endpoint = endpoint
        # None blocks forever on receive
        self._timeout_s = timeout_s

    @property
    def endpoint(self) -> UdpEndpoint:
        return self._endpoint

    def request_once(self, payload: bytes, recv_buf: int | None = None) -> bytes:
        """
        Send one datagram and wait for one reply.
        The reply buffer defaults to the payload length, so longer replies
        come back truncated to len(payload) bytes.
        The silent truncation is POSIX recvfrom behaviour; on Windows an
        oversized datagram raises OSError (WSAEMSGSIZE) instead.
        """
        if recv_buf is None:
            recv_buf = len(payload)
        if recv_buf <= 0:
            raise ValueError("recv_buf must be positive")

        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        sock.settimeout(self._timeout_s)
        try:
            addr = (self._endpoint.host, self._endpoint.port)
            sent = sock.sendto(payload, addr)
            log.debug("sent %d bytes to %s:%d from port %d",
                      sent, addr[0], addr[1], sock.getsockname()[1])
            data, src = sock.recvfrom(recv_buf)
            log.debug("received %d bytes from %s:%d", len(data), src[0], src[1])
        finally:
            sock.close()
        return data


def decode_reply(data: bytes, encoding: str = "utf-8") -> str:
    # a truncated multibyte sequence still decodes
    return data.decode(encoding, errors="replace")
