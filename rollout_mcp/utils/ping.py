"""Host reachability probing."""

import asyncio


async def check_host_online(hostname: str, port: int, timeout: float = 2.0) -> bool:
    """Check if a host accepts TCP connections on its SSH port.

    Args:
        hostname: Host to check.
        port: Port to connect to.
        timeout: Connection timeout in seconds.

    Returns:
        True if host is reachable, False otherwise.
    """
    try:
        _, writer = await asyncio.wait_for(
            asyncio.open_connection(hostname, port),
            timeout=timeout,
        )
    except (TimeoutError, OSError):
        return False

    writer.close()
    try:
        await writer.wait_closed()
    except OSError:
        pass
    return True


async def check_hosts_online(
    hosts: dict[str, tuple[str, int]],
    timeout: float = 2.0,
) -> dict[str, bool]:
    """Probe several hosts concurrently.

    Args:
        hosts: Dict of {name: (hostname, port)}.
        timeout: Connection timeout per host.

    Returns:
        Dict of {name: is_online}, in input order.
    """
    if not hosts:
        return {}

    names = list(hosts)
    results = await asyncio.gather(
        *(check_host_online(hostname, port, timeout) for hostname, port in hosts.values())
    )
    return dict(zip(names, results))
