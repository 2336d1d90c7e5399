"""
Hosting layer: transactions, authorization, configuration
"""

from .auth import (
    AllowAllAuthorizer,
    AuthRequest,
    SignatureAuthorizer,
    StaticAuthorizer,
    sign_auth_request,
)
from .config import HostConfig, load_config
from .host import ContractEvent, Host

__all__ = [
    "AllowAllAuthorizer",
    "AuthRequest",
    "SignatureAuthorizer",
    "StaticAuthorizer",
    "sign_auth_request",
    "HostConfig",
    "load_config",
    "ContractEvent",
    "Host",
]
