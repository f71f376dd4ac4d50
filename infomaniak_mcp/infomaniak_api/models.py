"""
Response shapes returned by the Infomaniak API.

These are documentation only: payloads are passed through untouched and never
checked against these definitions at runtime.
"""

from __future__ import annotations

from typing import Any, Dict, Generic, List, Optional, TypedDict, TypeVar

T = TypeVar("T")


class ApiErrorBody(TypedDict, total=False):
    code: str
    description: str


class ApiResponse(TypedDict, Generic[T], total=False):
    result: str
    data: T
    error: ApiErrorBody


class Account(TypedDict):
    id: int
    name: str
    legal_entity_type: str
    created_at: str


class Domain(TypedDict):
    id: int
    customer_name: str
    registrant: str
    registry_expiration: str
    auto_renew: bool
    status: str


class DnsRecord(TypedDict, total=False):
    id: int
    source: str
    type: str
    target: str
    ttl: int
    priority: Optional[int]


class MailService(TypedDict):
    id: int
    account_id: int
    customer_name: str
    nb_mailbox: int
    max_mailbox: int


class Mailbox(TypedDict):
    id: int
    mail_id: int
    mailbox_name: str
    email: str
    aliases: List[str]
    size_used: int
    max_size: int


class WebHosting(TypedDict):
    id: int
    account_id: int
    customer_name: str
    ip: str
    service_name: str
    quota_used: int
    quota: int


class Site(TypedDict):
    id: int
    fqdn: str
    path: str
    php_version: str
    ssl_enabled: bool


class Database(TypedDict):
    id: int
    name: str
    size: int
    charset: str


class KDrive(TypedDict):
    id: int
    name: str
    account_id: int
    size_used: int
    size: int


class SwissBackupSlot(TypedDict):
    id: int
    name: str
    size_used: int
    max_size: int
    protocol: str


class SwissBackup(TypedDict):
    id: int
    account_id: int
    customer_name: str
    slots: List[SwissBackupSlot]


class Profile(TypedDict):
    id: int
    login: str
    email: str
    first_name: str
    last_name: str
    current_account_id: int


class Product(TypedDict):
    id: int
    service_id: int
    service_name: str
    account_id: int
    customer_name: str


# Shapes the API documents only loosely.
Vps = Dict[str, Any]
DedicatedServer = Dict[str, Any]
Certificate = Dict[str, Any]
Invoice = Dict[str, Any]
