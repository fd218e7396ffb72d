"""Hosts resource for listing SSH hosts a rollout can target."""

from rollout_mcp.services import get_config
from rollout_mcp.utils.ping import check_hosts_online


async def list_hosts_resource() -> str:
    """List SSH config hosts with their reachability.

    Returns:
        Formatted host list with online/offline status
    """
    hosts = get_config().get_hosts()

    if not hosts:
        return "No SSH hosts configured."

    online = await check_hosts_online(
        {name: (host.hostname, host.port) for name, host in hosts.items()},
        timeout=2.0,
    )

    lines = ["Available SSH Hosts", "=" * 40, ""]
    for name, host in sorted(hosts.items()):
        status = "online" if online.get(name) else "offline"
        icon = "✓" if online.get(name) else "✗"
        lines.append(f"[{icon}] {name} ({status})")
        lines.append(f"    SSH: {host.address}")

    lines.append("")
    lines.append(f"{sum(online.values())}/{len(hosts)} host(s) reachable")
    return "\n".join(lines)
