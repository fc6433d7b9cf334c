"""
Staleness Policy
----------------
Decides whether a loaded registry must be rebuilt before it is trusted.

A registry is stale when it is missing, has no commands, or is older
than the freshness window. Pure function of registry state and time.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from .registry import CommandRegistry

FRESHNESS_WINDOW = timedelta(hours=24)


def registry_age(registry: CommandRegistry, now: Optional[datetime] = None) -> timedelta:
    """
    Elapsed time since the registry was generated.

    Negative when `generated_at` lies in the future.

    Raises:
        ValueError: If `generated_at` cannot be parsed
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now - registry.generated_at_datetime


def is_registry_stale(
    registry: Optional[CommandRegistry],
    now: Optional[datetime] = None,
    max_age: timedelta = FRESHNESS_WINDOW,
) -> bool:
    """
    True when the registry must be regenerated.

    A `generated_at` in the future (clock skew) gives a negative age and is
    treated as fresh. An unparseable `generated_at` is treated as stale.
    """
    if registry is None:
        return True

    if registry.is_empty:
        return True

    try:
        age = registry_age(registry, now)
    except ValueError:
        return True

    return age > max_age
