# Request signing
from pokeauth.hashing.pokehash import PokeHashProvider as PokeHashProvider
from pokeauth.hashing.profiles import POKEHASH_0_51 as POKEHASH_0_51
from pokeauth.hashing.profiles import HashVersionProfile as HashVersionProfile
from pokeauth.hashing.profiles import get_profile as get_profile
from pokeauth.hashing.rate_limit import QuotaPolicy as QuotaPolicy
from pokeauth.hashing.rate_limit import RateLimitState as RateLimitState

__all__ = [
    "POKEHASH_0_51",
    "HashVersionProfile",
    "PokeHashProvider",
    "QuotaPolicy",
    "RateLimitState",
    "get_profile",
]
