# orders/config.py
from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class ReceiverSettings:
    """Receiver runtime configuration."""
    host: str = "0.0.0.0"
    port: int = 4000

    heartbeat_s: float = 30.0           # keepalive comment interval on /admin/stream
    queue_max: int = 256                # per-subscriber frame backlog before it is dropped

    static_dir: str = "admin-public"
    dashboard_file: str = "dashboard.html"


def make_settings_from_cfg(cfg: Dict[str, Any]) -> ReceiverSettings:
    defaults = ReceiverSettings()
    server = cfg.get("server") or {}
    stream = cfg.get("stream") or {}
    admin = cfg.get("admin") or {}

    try:
        settings = ReceiverSettings(
            host=str(server.get("host") or defaults.host),
            port=int(server.get("port") or defaults.port),
            heartbeat_s=float(stream.get("heartbeat_s") or defaults.heartbeat_s),
            queue_max=int(stream.get("queue_max") or defaults.queue_max),
            static_dir=str(admin.get("static_dir") or defaults.static_dir),
            dashboard_file=str(admin.get("dashboard_file") or defaults.dashboard_file),
        )
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid receiver cfg: {e}") from e

    if settings.heartbeat_s <= 0:
        raise ValueError(f"Invalid receiver cfg: heartbeat_s must be > 0, got {settings.heartbeat_s}")
    if settings.queue_max < 1:
        raise ValueError(f"Invalid receiver cfg: queue_max must be >= 1, got {settings.queue_max}")
    return settings
