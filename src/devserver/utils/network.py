"""Host address helpers."""

from __future__ import annotations

import logging
import socket

from devserver.errors import OutboundIPError

logger = logging.getLogger(__name__)


def get_outbound_ip(probe_host: str = "8.8.8.8", probe_port: int = 80) -> str:
    """Return the local address the OS would use to reach ``probe_host``.

    Connecting a UDP socket only selects a route and binds a source
    address; no datagram is sent. An IPv6 ``probe_host`` yields an IPv6
    address.

    Raises:
        OutboundIPError: If the probe address cannot be resolved or no
            route to it exists.
    """
    try:
        infos = socket.getaddrinfo(
            probe_host, probe_port, type=socket.SOCK_DGRAM, proto=socket.IPPROTO_UDP
        )
        family, sock_type, proto, _, address = infos[0]
        with socket.socket(family, sock_type, proto) as sock:
            sock.connect(address)
            local_ip = sock.getsockname()[0]
    except OSError as e:
        raise OutboundIPError(
            f"cannot determine outbound address via {probe_host}:{probe_port}: {e}"
        ) from e

    logger.debug("Outbound address via %s:%d is %s", probe_host, probe_port, local_ip)
    return local_ip
