"""Tool handlers: each maps validated arguments onto one gateway call."""

from . import account, api, billing, domains, hosting, mail, servers, storage

__all__ = ["account", "api", "billing", "domains", "hosting", "mail", "servers", "storage"]
