import asyncio
import os
from fastapi import FastAPI
from pydantic import BaseModel, Field

from services.echo_sim.app.core.model import EchoModel

HTTP_HOST = os.getenv("ECHO_SIM_HTTP_HOST", "127.0.0.1")
HTTP_PORT = int(os.getenv("ECHO_SIM_HTTP_PORT", "8000"))

# any local address, so the client's resolved host name reaches it
UDP_HOST = os.getenv("ECHO_SIM_UDP_HOST", "0.0.0.0")
UDP_PORT = int(os.getenv("ECHO_SIM_UDP_PORT", "7171"))

app = FastAPI(title="Echo Listener", version="0.1.0")

MODEL = EchoModel()

class FaultsIn(BaseModel):
    delay_ms: int = Field(0, ge=0, le=5000)
    drop_rate: float = Field(0.0, ge=0.0, le=1.0)

class ReplyIn(BaseModel):
    text: str | None = None

def _faults() -> dict:
    return {
        "delay_ms": MODEL.faults.delay_ms,
        "drop_rate": MODEL.faults.drop_rate,
    }

@app.get("/health")
def health():
    return {"status": "ok", "mode": MODEL.mode.value}

@app.get("/status")
def status():
    last = MODEL.last_datagram
    return {
        "mode": MODEL.mode.value,
        "datagram_count": MODEL.datagram_count,
        "reset_count": MODEL.reset_count,
        "last_datagram": None if last is None else last.decode("utf-8", errors="replace"),
        "faults": _faults(),
    }

@app.post("/control/reset")
def reset():
    MODEL.reset()
    return {"status": "reset", "reset_count": MODEL.reset_count, "mode": MODEL.mode.value}

@app.post("/control/reply")
def set_reply(r: ReplyIn):
    MODEL.set_reply(None if r.text is None else r.text.encode("utf-8"))
    return {"status": "reply_updated", "mode": MODEL.mode.value}

@app.post("/control/faults")
def set_faults(f: FaultsIn):
    MODEL.faults.delay_ms = f.delay_ms
    MODEL.faults.drop_rate = f.drop_rate
    return {"status": "faults_updated", "faults": f.model_dump()}

@app.get("/control/faults")
def get_faults():
    return _faults()

class UdpEchoProto(asyncio.DatagramProtocol):
    def connection_made(self, transport):
        self.transport = transport

    def datagram_received(self, data: bytes, addr):
        reply = MODEL.handle(data)
        if reply is None:
            return

        delay = MODEL.faults.delay_s
        if delay > 0:
            asyncio.get_running_loop().call_later(delay, self.transport.sendto, reply, addr)
        else:
            self.transport.sendto(reply, addr)

@app.on_event("startup")
async def start_udp():
    loop = asyncio.get_running_loop()
    transport, _ = await loop.create_datagram_endpoint(
        lambda: UdpEchoProto(),
        local_addr=(UDP_HOST, UDP_PORT),
    )
    app.state.udp_transport = transport

@app.on_event("shutdown")
async def stop_udp():
    t = getattr(app.state, "udp_transport", None)
    if t:
        t.close()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=HTTP_HOST, port=HTTP_PORT, reload=False)
