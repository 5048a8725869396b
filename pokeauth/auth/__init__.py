# Credential providers
from pokeauth.auth.login_flow import LoginTicket as LoginTicket
from pokeauth.auth.login_flow import PtcLoginFlow as PtcLoginFlow
from pokeauth.auth.ptc import PtcCredentialProvider as PtcCredentialProvider

__all__ = ["LoginTicket", "PtcCredentialProvider", "PtcLoginFlow"]
