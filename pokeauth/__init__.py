# pokeauth: PTC login and PokeHash request signing

from pokeauth.auth.ptc import PtcCredentialProvider
from pokeauth.client.client import AuthClient
from pokeauth.common.exceptions import (
    HashError,
    HashLimitExceededError,
    HashUnauthorizedError,
    InvalidCredentialsError,
    LoginFailedError,
    PokeAuthError,
)
from pokeauth.hashing.pokehash import PokeHashProvider
from pokeauth.hashing.rate_limit import QuotaPolicy, RateLimitState

__all__ = [
    "AuthClient",
    "HashError",
    "HashLimitExceededError",
    "HashUnauthorizedError",
    "InvalidCredentialsError",
    "LoginFailedError",
    "PokeAuthError",
    "PokeHashProvider",
    "PtcCredentialProvider",
    "QuotaPolicy",
    "RateLimitState",
]
