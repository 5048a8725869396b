"""
Hashing service generations.

The version number and ``unk25`` constant are echoed into every signed
envelope and must match what the service at ``endpoint`` was built for.
A mismatch is not reported by the service; requests are silently rejected
by the game servers instead.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass


@dataclass(frozen=True)
class HashVersionProfile:
    """One deployed generation of the hashing service."""

    name: str
    endpoint: str
    version: int
    unk25: int

    def with_endpoint(self, endpoint: str) -> HashVersionProfile:
        """Same generation served from a different URL."""
        return dataclasses.replace(self, endpoint=endpoint)


POKEHASH_0_51 = HashVersionProfile(
    name="0.51",
    endpoint="https://pokehash.buddyauth.com/api/v121_2/hash",
    version=5100,
    unk25=-8832040574896607694,
)

PROFILES: dict[str, HashVersionProfile] = {
    profile.name: profile for profile in (POKEHASH_0_51,)
}

DEFAULT_PROFILE = POKEHASH_0_51


def get_profile(name: str) -> HashVersionProfile:
    """Look up a registered profile by name."""
    try:
        return PROFILES[name]
    except KeyError:
        known = ", ".join(sorted(PROFILES))
        msg = f"Unknown hash profile '{name}' (known: {known})"
        raise ValueError(msg) from None
