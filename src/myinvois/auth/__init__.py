"""Authentication against the MyInvois identity service"""

from myinvois.auth.token import AuthContext, Token, TokenState
from myinvois.auth.authentication_client import AuthClient
from myinvois.auth.intermediary_client import IntermediaryAuthClient

__all__ = [
    "AuthContext",
    "Token",
    "TokenState",
    "AuthClient",
    "IntermediaryAuthClient",
]
