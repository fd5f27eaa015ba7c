from __future__ import annotations
from dataclasses import dataclass, field
from .state import ReplyMode
from .faults import FaultConfig

@dataclass
class EchoModel:
    mode: ReplyMode = ReplyMode.ECHO
    fixed_reply: bytes = b""
    datagram_count: int = 0
    reset_count: int = 0
    last_datagram: bytes | None = None
    faults: FaultConfig = field(default_factory=FaultConfig)

    def reset(self) -> None:
        self.mode = ReplyMode.ECHO
        self.fixed_reply = b""
        self.datagram_count = 0
        self.last_datagram = None
        self.faults.clear()
        self.reset_count += 1

    def set_reply(self, reply: bytes | None) -> None:
        if reply is None:
            self.mode = ReplyMode.ECHO
            self.fixed_reply = b""
        else:
            self.mode = ReplyMode.FIXED
            self.fixed_reply = reply

    def handle(self, data: bytes) -> bytes | None:
        """Record a datagram and return the reply, or None to stay silent."""
        self.datagram_count += 1
        self.last_datagram = data
        if self.faults.should_drop():
            return None
        if self.mode == ReplyMode.FIXED:
            return self.fixed_reply
        return data
