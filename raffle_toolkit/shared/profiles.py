"""
Platform profiles: tuning parameters for constrained vs. unconstrained clients.

A constrained client (mobile browser, narrow viewport, metered network) gets
smaller fetch ceilings, longer timeouts, lower concurrency, longer pauses
between batches, fewer retries and progressive loading.

Selection is a pure function of its inputs. User-agent and viewport sniffing
happen at the caller; only the resulting strings/numbers are passed in.
"""

import re
from dataclasses import dataclass
from typing import Optional

# Viewports narrower than this are treated as constrained
CONSTRAINED_VIEWPORT_WIDTH = 768

CONSTRAINED_USER_AGENT = re.compile(
    r"Android|iPhone|iPad|iPod|BlackBerry|IEMobile|Opera Mini", re.IGNORECASE
)


@dataclass(frozen=True)
class PlatformProfile:
    """Immutable tuning parameters for one fetch session.

    Durations are in seconds.
    """

    name: str
    max_items: int
    timeout: float
    concurrency: int
    batch_delay: float
    retry_count: int
    retry_delay: float
    progressive_loading: bool
    prioritize_recent: bool
    is_constrained: bool


CONSTRAINED_PROFILE = PlatformProfile(
    name="mobile",
    max_items=25,
    timeout=20.0,
    concurrency=2,
    batch_delay=0.2,
    retry_count=2,
    retry_delay=2.0,
    progressive_loading=True,
    prioritize_recent=True,
    is_constrained=True,
)

UNCONSTRAINED_PROFILE = PlatformProfile(
    name="desktop",
    max_items=30,
    timeout=12.0,
    concurrency=4,
    batch_delay=0.1,
    retry_count=3,
    retry_delay=1.0,
    progressive_loading=False,
    prioritize_recent=False,
    is_constrained=False,
)


def is_constrained_client(
    user_agent: Optional[str] = None, viewport_width: Optional[int] = None
) -> bool:
    """True when the user agent or viewport looks like a constrained device."""
    if user_agent and CONSTRAINED_USER_AGENT.search(user_agent):
        return True
    if viewport_width is not None and viewport_width < CONSTRAINED_VIEWPORT_WIDTH:
        return True
    return False


def select_profile(
    is_constrained: bool = False,
    user_agent: Optional[str] = None,
    viewport_width: Optional[int] = None,
) -> PlatformProfile:
    """
    Pick the profile for a fetch session.

    The hint is upgraded to constrained when the user agent or viewport
    matches a constrained device, even if the caller did not ask for it.

    Example:
        >>> select_profile(False, viewport_width=390).name
        'mobile'
    """
    if is_constrained or is_constrained_client(user_agent, viewport_width):
        return CONSTRAINED_PROFILE
    return UNCONSTRAINED_PROFILE


def platform_class(profile: PlatformProfile) -> str:
    """Coarse platform label used in cache keys and metrics buckets."""
    return "mobile" if profile.is_constrained else "desktop"
