import os
import subprocess
import time
import sys
from pathlib import Path

import pytest
import httpx

REPO_ROOT = Path(__file__).resolve().parents[1]

# the listener answers on every local address; loopback keeps the tests
# independent of how the machine's host name resolves
os.environ.setdefault("ECHO_HOST", "127.0.0.1")

from echoclient.config.settings import get_settings
from echoclient.api.client import SimApiClient
from echoclient.transport.udp import UdpClient, UdpEndpoint


def _wait_for_http_ready(url: str, proc: subprocess.Popen, timeout_s: float = 15.0) -> None:
    """
    Wait for the echo listener to respond at url. If the process exits, surface logs.
    """
    deadline = time.time() + timeout_s

    while time.time() < deadline:
        if proc.poll() is not None:
            out = ""
            if proc.stdout:
                out = proc.stdout.read() or ""
            raise RuntimeError(
                f"Echo listener exited early (code={proc.returncode}).\n"
                f"--- listener output ---\n{out}"
            )

        try:
            r = httpx.get(url, timeout=1.0)
            if r.status_code == 200:
                return
        except httpx.HTTPError:
            pass

        time.sleep(0.2)

    raise RuntimeError(f"Echo listener did not become ready at {url} within {timeout_s}s.")


def client_env() -> dict:
    env = os.environ.copy()
    src = str(REPO_ROOT / "src")
    env["PYTHONPATH"] = os.pathsep.join(p for p in (src, env.get("PYTHONPATH")) if p)
    env["PYTHONIOENCODING"] = "utf-8"
    return env


def _run_client(timeout_s: float = 10.0, **overrides: str) -> subprocess.CompletedProcess:
    """Run `python -m echoclient` the way a user would, with extra env vars."""
    env = client_env()
    env.update(overrides)
    return subprocess.run(
        [sys.executable, "-m", "echoclient"],
        cwd=str(REPO_ROOT),
        env=env,
        capture_output=True,
        text=True,
        encoding="utf-8",
        timeout=timeout_s,
    )


@pytest.fixture(scope="session", autouse=True)
def echo_listener_process():
    """
    Starts the echo listener for the test session.
    Uses `python -m uvicorn ...` from repo root so `services.*` imports resolve.
    """
    settings = get_settings()
    http_host = "127.0.0.1"
    http_port = int(os.getenv("ECHO_SIM_HTTP_PORT", "8000"))
    sim_http = os.getenv("ECHO_SIM_HTTP", f"http://{http_host}:{http_port}")

    env = client_env()
    env["ECHO_SIM_HTTP"] = sim_http
    env["ECHO_SIM_HTTP_HOST"] = http_host
    env["ECHO_SIM_HTTP_PORT"] = str(http_port)
    env["ECHO_SIM_UDP_HOST"] = os.getenv("ECHO_SIM_UDP_HOST", "0.0.0.0")
    env["ECHO_SIM_UDP_PORT"] = str(settings.port)

    cmd = [
        sys.executable, "-m", "uvicorn",
        "services.echo_sim.app.main:app",
        "--host", http_host,
        "--port", str(http_port),
        "--log-level", "warning",
    ]

    p = subprocess.Popen(
        cmd,
        cwd=str(REPO_ROOT),
        env=env,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
    )

    try:
        _wait_for_http_ready(f"{sim_http}/health", p, timeout_s=15.0)
        yield p
    finally:
        p.terminate()
        try:
            p.wait(timeout=5)
        except subprocess.TimeoutExpired:
            p.kill()


@pytest.fixture
def settings():
    return get_settings()

@pytest.fixture
def sim_api(settings):
    client = SimApiClient(settings.sim_http)
    try:
        yield client
    finally:
        client.close()

@pytest.fixture
def echo_udp(settings):
    return UdpClient(UdpEndpoint(settings.host, settings.port))

@pytest.fixture(autouse=True)
def reset_listener(sim_api):
    """
    Ensure each test starts from a plain echo listener.
    """
    sim_api.reset()
    yield

@pytest.fixture
def run_client():
    return _run_client
