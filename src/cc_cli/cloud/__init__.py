"""Cloud provider integration: authentication, instance data and provisioning."""

from .auth import AUTHENTICATORS, get_authenticator, login_all, show_status
from .cache import InstanceCache
from .compute import (
    CheapestResult,
    ProvisionResult,
    fetch_instances,
    find_cheapest,
    provision_instance,
)

__all__ = [
    "AUTHENTICATORS",
    "get_authenticator",
    "login_all",
    "show_status",
    "InstanceCache",
    "CheapestResult",
    "ProvisionResult",
    "fetch_instances",
    "find_cheapest",
    "provision_instance",
]
