from pokeauth.client.client import AuthClient as AuthClient
from pokeauth.client.config_loader import ConfigLoader as ConfigLoader

__all__ = ["AuthClient", "ConfigLoader"]
