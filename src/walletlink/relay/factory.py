"""Relay factory.

Creates the relay backend selected by configuration. The adapter calls the
factory once, lazily, through its ensure_relay() accessor.
"""

import logging
from typing import Optional

from walletlink.config import Settings, get_settings
from walletlink.relay.base import RelayTransport, RelayType

logger = logging.getLogger(__name__)


def get_relay_type(settings: Optional[Settings] = None) -> RelayType:
    """Determine which relay to use.

    Returns:
        RelayType from WALLETLINK_RELAY_BACKEND (defaults to local)

    Raises:
        ValueError: If the configured backend is unknown
    """
    settings = settings or get_settings()
    explicit = settings.relay_backend.lower().replace("-", "_")
    try:
        return RelayType(explicit)
    except ValueError:
        raise ValueError(f"Unknown relay backend: {settings.relay_backend}") from None


def create_relay(settings: Optional[Settings] = None) -> RelayTransport:
    """Build a new relay instance from settings."""
    settings = settings or get_settings()
    relay_type = get_relay_type(settings)
    logger.info(f"Initializing {relay_type.value} relay")

    if relay_type == RelayType.DRY_RUN:
        from walletlink.relay.dryrun import DryRunRelay
        return DryRunRelay(link_api_url=settings.link_api_url)

    from walletlink.relay.local import LocalRelay
    return LocalRelay(
        private_keys=settings.private_keys,
        link_api_url=settings.link_api_url,
        auto_approve_chains=settings.auto_approve_chains,
        http_timeout=settings.http_timeout,
    )
