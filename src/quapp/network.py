"""LAN address detection for the dev server."""

import logging
import socket

logger = logging.getLogger(__name__)

LOCALHOST = "localhost"

# Any routable address works; a UDP connect sends no packets
_PROBE_ADDRESS = ("10.255.255.255", 1)


def get_lan_ip() -> str:
    """Return this machine's LAN IPv4 address, or "localhost" when offline."""
    sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        sock.connect(_PROBE_ADDRESS)
        address = sock.getsockname()[0]
    except OSError as e:
        logger.debug(f"LAN address detection failed: {e}")
        return LOCALHOST
    finally:
        sock.close()

    if not address or address.startswith("127.") or address == "0.0.0.0":
        return LOCALHOST
    return address
