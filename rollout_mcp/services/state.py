"""Global state management for Rollout MCP."""

from rollout_mcp.config import Config
from rollout_mcp.models import RunOutcome
from rollout_mcp.services.pool import ConnectionPool

# Global state (initialized on first access)
_config: Config | None = None
_pool: ConnectionPool | None = None
_last_outcome: RunOutcome | None = None


def get_config() -> Config:
    """Get or create config."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def get_pool() -> ConnectionPool:
    """Get or create connection pool."""
    global _pool
    if _pool is None:
        settings = get_config().settings
        _pool = ConnectionPool(
            idle_timeout=settings.idle_timeout,
            max_size=settings.max_pool_size,
            known_hosts=settings.known_hosts,
            strict_host_key_checking=settings.strict_host_key_checking,
        )
    return _pool


def get_last_outcome() -> RunOutcome | None:
    """Outcome of the most recent rollout in this process, if any."""
    return _last_outcome


def set_last_outcome(outcome: RunOutcome) -> None:
    """Remember the outcome of the rollout that just finished."""
    global _last_outcome
    _last_outcome = outcome


def reset_state() -> None:
    """Reset global state for testing."""
    global _config, _pool, _last_outcome
    _config = None
    _pool = None
    _last_outcome = None


def set_config(config: Config) -> None:
    """Set the global config instance (test injection)."""
    global _config
    _config = config


def set_pool(pool: ConnectionPool) -> None:
    """Set the global pool instance (test injection)."""
    global _pool
    _pool = pool
