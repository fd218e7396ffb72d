"""Resource exposing the most recent rollout."""

from rollout_mcp.services import get_last_outcome, render_summary


async def last_run_resource() -> str:
    """Summary of the last rollout run by this server."""
    outcome = get_last_outcome()
    if outcome is None:
        return "No rollout has run yet."
    return render_summary(outcome)
