"""Plaintext metrics exposition for the /metrics endpoint."""
from __future__ import annotations

CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"

COUNTER_UNREADABLE = -1

_TEMPLATE = """\
# HELP tikky_counter_total Total counter value
# TYPE tikky_counter_total counter
tikky_counter_total {counter}

# HELP tikky_redis_connected Redis connection status (1=connected, 0=disconnected)
# TYPE tikky_redis_connected gauge
tikky_redis_connected {connected}

# HELP tikky_build_info Build information
# TYPE tikky_build_info gauge
tikky_build_info{{version="{version}",service="{service}"}} 1
"""


def _escape_label(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def render_metrics(
    counter: int,
    connected: bool,
    version: str,
    service: str,
    extra: str | None = None,
) -> str:
    """Fixed counter/connectivity/build-info block, then ``extra`` exposition text if any."""
    body = _TEMPLATE.format(
        counter=counter,
        connected=1 if connected else 0,
        version=_escape_label(version),
        service=_escape_label(service),
    )
    if not extra:
        return body
    return body + "\n" + extra
