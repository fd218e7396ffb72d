"""Rollout tool: install one artifact across a batch of SSH hosts."""

import logging

from rollout_mcp.errors import RolloutError
from rollout_mcp.services import (
    HostFileImport,
    RolloutRequest,
    SSHConfigHosts,
    SSHTransport,
    StaticHostList,
    get_config,
    get_pool,
    render_summary,
    run_rollout,
    set_last_outcome,
)

logger = logging.getLogger(__name__)


async def rollout(
    artifact: str,
    hosts: list[str] | None = None,
    hosts_file: str | None = None,
    host_pattern: str | None = None,
    install_args: str | None = None,
    retries: int | None = None,
    retry_delay: int | None = None,
    staging_root: str | None = None,
) -> str:
    """Install a software artifact on many SSH hosts, retrying failed hosts.

    The artifact's whole folder is copied to each host, the artifact is run
    (package types such as .msi/.deb/.rpm go through their platform
    installer), and the staged folder is removed again. Exit code 0 is
    success. Failed hosts are retried in later rounds; hosts still failing
    when the retry budget runs out are exported to a CSV file that can be
    passed back as ``hosts_file``.

    Args:
        artifact: Local path of the installer or executable.
        hosts: Host names or SSH config aliases.
        hosts_file: CSV file with one host per row (e.g. a previous export).
        host_pattern: Glob over SSH config aliases (e.g. "web-*").
        install_args: Installer arguments; "none" selects the silent defaults.
        retries: Total rounds (>= 1). Defaults to ROLLOUT_RETRIES.
        retry_delay: Seconds between rounds. Defaults to ROLLOUT_RETRY_DELAY.
        staging_root: Remote folder for staging. Defaults to ROLLOUT_STAGING_ROOT.

    Examples:
        rollout("/srv/pkgs/agent/agent.msi", hosts=["win1", "win2"])
        rollout("/srv/pkgs/tool/tool.deb", host_pattern="web-*", retries=5)
        rollout("/srv/pkgs/agent/agent.msi", hosts_file="rollout-reports/failed_hosts_agent.msi_20260101-120000.csv")

    Returns:
        Run summary, or an error message when the run could not start.
    """
    sources = [s for s in (hosts, hosts_file, host_pattern) if s]
    if len(sources) != 1:
        return "Error: Provide exactly one of 'hosts', 'hosts_file' or 'host_pattern'."

    config = get_config()
    settings = config.settings
    probe = settings.probe_hosts

    if hosts:
        discovery = StaticHostList(hosts, config, probe=probe)
    elif hosts_file:
        discovery = HostFileImport(hosts_file, config, probe=probe)
    else:
        discovery = SSHConfigHosts(config, host_pattern or "*", probe=probe)

    request = RolloutRequest(
        artifact=artifact,
        discovery=discovery,
        install_args=install_args,
        retries=retries,
        retry_delay=retry_delay,
        staging_root=staging_root,
    )

    try:
        outcome = await run_rollout(request, settings, SSHTransport(get_pool()))
    except (RolloutError, ValueError) as e:
        logger.error("Rollout of %s not started: %s", artifact, e)
        return f"Error: {e}"

    set_last_outcome(outcome)
    summary = render_summary(outcome)
    if outcome.log_path:
        summary += f"\n\nRun log: {outcome.log_path}"
    return summary
