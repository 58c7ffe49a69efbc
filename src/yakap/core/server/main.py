"""Server entry point: ``python -m yakap.core.server.main``."""

from __future__ import annotations

import logging
from ipaddress import ip_address

from yakap.core.config.settings import get_settings
from yakap.core.server.app import create_app


def _is_loopback_host(host: str) -> bool:
    if host == "localhost":
        return True
    try:
        return ip_address(host).is_loopback
    except ValueError:
        return False


def run() -> None:
    """Start the MCP server with Streamable HTTP transport."""
    settings = get_settings()
    logging.basicConfig(level=getattr(logging, settings.yakap_log_level.upper(), logging.INFO))

    logger = logging.getLogger(__name__)
    if not settings.yakap_allow_insecure_bind and not _is_loopback_host(settings.yakap_host):
        raise RuntimeError(
            "Refusing to bind to a non-loopback host without an auth layer. "
            "Set YAKAP_ALLOW_INSECURE_BIND=true to override (unsafe)."
        )
    logger.info("Starting Yakap burnout forecast server on %s:%d", settings.yakap_host, settings.yakap_port)

    mcp = create_app(settings=settings)
    mcp.run(
        transport="streamable-http",
        host=settings.yakap_host,
        port=settings.yakap_port,
    )


if __name__ == "__main__":
    run()
