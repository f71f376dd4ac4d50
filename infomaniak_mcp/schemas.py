"""
Declarative input constraints for every Infomaniak tool.

Each tool owns an ``OperationSpec``: an ordered tuple of ``FieldRule`` entries.
``validate`` walks the rules in declaration order and stops at the first
violation, so error messages are deterministic and always name one field.
Absent optional fields stay absent; nothing is ever defaulted or coerced
across types.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple


class FieldKind(str, Enum):
    POSITIVE_INT = "positive_int"
    BOUNDED_INT = "bounded_int"
    STRING = "string"
    NON_EMPTY_STRING = "non_empty_string"
    ENUM = "enum"
    EMAIL = "email"
    PATH = "path"
    OBJECT = "object"
    SCALAR_MAP = "scalar_map"


# Same shape as the email check used by common schema libraries: local part,
# "@", dotted domain with an alphabetic TLD of at least two characters.
EMAIL_REGEX = re.compile(
    r"^(?!\.)(?!.*\.\.)([A-Za-z0-9_'+\-\.]*)[A-Za-z0-9_+\-]@([A-Za-z0-9][A-Za-z0-9\-]*\.)+[A-Za-z]{2,}$"
)

DNS_RECORD_TYPES = ("A", "AAAA", "CNAME", "MX", "TXT", "NS", "SRV", "CAA")
HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")
TTL_MIN, TTL_MAX = 60, 86400
PRIORITY_MIN, PRIORITY_MAX = 0, 65535
PASSWORD_MIN_LENGTH = 8


class ValidationError(Exception):
    """Raised when a raw argument bag violates an operation's rules."""

    def __init__(self, field_name: str, message: str) -> None:
        super().__init__(f"Validation error: {field_name}: {message}")
        self.field = field_name
        self.message = message


@dataclass(frozen=True, slots=True)
class FieldRule:
    name: str
    kind: FieldKind
    required: bool = False
    description: str = ""
    choices: Tuple[str, ...] = ()
    minimum: Optional[int] = None
    maximum: Optional[int] = None
    min_length: Optional[int] = None

    def check(self, value: Any) -> Any:
        """Return the accepted value or raise ``ValidationError``."""
        kind = self.kind
        if kind in (FieldKind.POSITIVE_INT, FieldKind.BOUNDED_INT):
            return self._check_int(value)
        if kind in (FieldKind.STRING, FieldKind.NON_EMPTY_STRING, FieldKind.PATH, FieldKind.EMAIL):
            return self._check_string(value)
        if kind is FieldKind.ENUM:
            if not isinstance(value, str) or value not in self.choices:
                raise ValidationError(
                    self.name, f"{self.name} must be one of: {', '.join(self.choices)}"
                )
            return value
        if kind is FieldKind.OBJECT:
            if not isinstance(value, dict):
                raise ValidationError(self.name, f"{self.name} must be an object")
            return value
        if kind is FieldKind.SCALAR_MAP:
            if not isinstance(value, dict):
                raise ValidationError(self.name, f"{self.name} must be an object")
            for key, item in value.items():
                if not _is_scalar(item):
                    raise ValidationError(
                        f"{self.name}.{key}",
                        f"{self.name}.{key} must be a string, number or boolean",
                    )
            return value
        raise ValueError(f"Unhandled field kind: {kind}")

    def _check_int(self, value: Any) -> int:
        # bool is an int subclass; JSON booleans are never numbers here.
        if isinstance(value, bool):
            raise ValidationError(self.name, f"{self.name} must be a number")
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        if not isinstance(value, int):
            raise ValidationError(self.name, f"{self.name} must be an integer")
        if self.kind is FieldKind.POSITIVE_INT:
            if value <= 0:
                raise ValidationError(self.name, f"{self.name} must be positive")
            return value
        if self.minimum is not None and value < self.minimum:
            raise ValidationError(
                self.name, f"{self.name} must be between {self.minimum} and {self.maximum}"
            )
        if self.maximum is not None and value > self.maximum:
            raise ValidationError(
                self.name, f"{self.name} must be between {self.minimum} and {self.maximum}"
            )
        return value

    def _check_string(self, value: Any) -> str:
        if not isinstance(value, str):
            raise ValidationError(self.name, f"{self.name} must be a string")
        if self.kind is FieldKind.NON_EMPTY_STRING and not value:
            raise ValidationError(self.name, f"{self.name} cannot be empty")
        if self.min_length is not None and len(value) < self.min_length:
            raise ValidationError(
                self.name, f"{self.name} must be at least {self.min_length} characters"
            )
        if self.kind is FieldKind.PATH and not value.startswith("/"):
            raise ValidationError(self.name, f"{self.name} must start with /")
        if self.kind is FieldKind.EMAIL and not EMAIL_REGEX.fullmatch(value):
            raise ValidationError(self.name, f"{self.name} must be a valid email")
        return value

    def json_schema(self) -> Dict[str, Any]:
        schema: Dict[str, Any] = {}
        if self.kind in (FieldKind.POSITIVE_INT, FieldKind.BOUNDED_INT):
            schema["type"] = "integer"
            if self.kind is FieldKind.POSITIVE_INT:
                schema["minimum"] = 1
            else:
                if self.minimum is not None:
                    schema["minimum"] = self.minimum
                if self.maximum is not None:
                    schema["maximum"] = self.maximum
        elif self.kind is FieldKind.ENUM:
            schema["type"] = "string"
            schema["enum"] = list(self.choices)
        elif self.kind in (FieldKind.OBJECT, FieldKind.SCALAR_MAP):
            schema["type"] = "object"
            if self.kind is FieldKind.SCALAR_MAP:
                schema["additionalProperties"] = {"type": ["string", "number", "boolean"]}
        else:
            schema["type"] = "string"
            if self.kind is FieldKind.NON_EMPTY_STRING:
                schema["minLength"] = 1
            elif self.kind is FieldKind.EMAIL:
                schema["format"] = "email"
            elif self.kind is FieldKind.PATH:
                schema["pattern"] = "^/"
            if self.min_length is not None:
                schema["minLength"] = self.min_length
        if self.description:
            schema["description"] = self.description
        return schema


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, int, float, bool))


@dataclass(frozen=True, slots=True)
class OperationSpec:
    """Immutable, ordered rule set for one named operation."""

    name: str
    fields: Tuple[FieldRule, ...] = ()

    def json_schema(self) -> Dict[str, Any]:
        return {
            "type": "object",
            "properties": {rule.name: rule.json_schema() for rule in self.fields},
            "required": [rule.name for rule in self.fields if rule.required],
        }


@dataclass(frozen=True, slots=True, eq=False)
class ValidatedArgs(Mapping[str, Any]):
    """Arguments that passed every rule of ``operation``; read-only."""

    operation: str
    values: Mapping[str, Any] = field(default_factory=dict)

    def __getitem__(self, key: str) -> Any:
        return self.values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def pick(self, *names: str) -> Dict[str, Any]:
        """Return the subset of ``names`` that are present, in the order given."""
        return {name: self.values[name] for name in names if name in self.values}


def validate(spec: OperationSpec, raw_args: Optional[Mapping[str, Any]]) -> ValidatedArgs:
    """
    Apply ``spec`` to ``raw_args``.

    Undeclared keys are ignored. A ``None`` value is treated as absent.
    Raises ``ValidationError`` for the first failing field in declaration order.
    """
    if raw_args is None:
        raw_args = {}
    if not isinstance(raw_args, Mapping):
        raise ValidationError("arguments", "arguments must be an object")

    accepted: Dict[str, Any] = {}
    for rule in spec.fields:
        value = raw_args.get(rule.name)
        if value is None:
            if rule.required:
                raise ValidationError(rule.name, f"{rule.name} is required")
            continue
        accepted[rule.name] = rule.check(value)
    return ValidatedArgs(operation=spec.name, values=MappingProxyType(accepted))


# Reusable rule builders -------------------------------------------------------


def positive_id(name: str, description: str, *, required: bool = True) -> FieldRule:
    return FieldRule(name, FieldKind.POSITIVE_INT, required=required, description=description)


def text(name: str, description: str, *, required: bool = False, non_empty: bool = False) -> FieldRule:
    kind = FieldKind.NON_EMPTY_STRING if non_empty else FieldKind.STRING
    return FieldRule(name, kind, required=required, description=description)


def bounded(name: str, description: str, minimum: int, maximum: int) -> FieldRule:
    return FieldRule(
        name, FieldKind.BOUNDED_INT, description=description, minimum=minimum, maximum=maximum
    )


ACCOUNT_ID = positive_id("account_id", "The account ID")
DOMAIN = text("domain", "The domain name (e.g., example.com)", required=True, non_empty=True)
RECORD_ID = positive_id("record_id", "The DNS record ID")
MAIL_ID = positive_id("mail_id", "The mail service ID")
MAILBOX_ID = positive_id("mailbox_id", "The mailbox ID")
HOSTING_ID = positive_id("hosting_id", "The web hosting ID")
SITE_ID = positive_id("site_id", "The site ID")
DATABASE_ID = positive_id("database_id", "The database ID")
DRIVE_ID = positive_id("drive_id", "The kDrive ID")
BACKUP_ID = positive_id("backup_id", "The Swiss Backup product ID")
VPS_ID = positive_id("vps_id", "The VPS ID")
SERVER_ID = positive_id("server_id", "The dedicated server ID")
CERTIFICATE_ID = positive_id("certificate_id", "The SSL certificate ID")
INVOICE_ID = positive_id("invoice_id", "The invoice ID")

TTL = bounded("ttl", f"Time to live in seconds ({TTL_MIN}-{TTL_MAX})", TTL_MIN, TTL_MAX)
PRIORITY = bounded("priority", "Priority for MX/SRV records", PRIORITY_MIN, PRIORITY_MAX)


def dns_type(*, required: bool) -> FieldRule:
    return FieldRule(
        "type",
        FieldKind.ENUM,
        required=required,
        description=f"DNS record type ({', '.join(DNS_RECORD_TYPES)})",
        choices=DNS_RECORD_TYPES,
    )


def password(*, required: bool) -> FieldRule:
    return FieldRule(
        "password",
        FieldKind.STRING,
        required=required,
        description=f"Mailbox password (at least {PASSWORD_MIN_LENGTH} characters)",
        min_length=PASSWORD_MIN_LENGTH,
    )


MAX_SIZE = positive_id("max_size", "Maximum mailbox size in MB", required=False)
ALIAS = FieldRule("alias", FieldKind.EMAIL, required=True, description="The alias email address")


# Shared shapes ----------------------------------------------------------------

NO_ARGS: Tuple[FieldRule, ...] = ()
ACCOUNT_ARGS = (ACCOUNT_ID,)
DOMAIN_ARGS = (DOMAIN,)
GET_DOMAIN_ARGS = (ACCOUNT_ID, DOMAIN)
CREATE_DNS_RECORD_ARGS = (
    DOMAIN,
    text("source", "The subdomain or @ for root (e.g., www, mail, @)", required=True),
    dns_type(required=True),
    text("target", "The target value (IP address, hostname, or text)", required=True, non_empty=True),
    TTL,
    PRIORITY,
)
UPDATE_DNS_RECORD_ARGS = (
    DOMAIN,
    RECORD_ID,
    text("source", "The subdomain or @ for root"),
    dns_type(required=False),
    text("target", "The target value", non_empty=True),
    TTL,
    PRIORITY,
)
DNS_RECORD_ARGS = (DOMAIN, RECORD_ID)
MAIL_ARGS = (MAIL_ID,)
MAILBOX_ARGS = (MAIL_ID, MAILBOX_ID)
CREATE_MAILBOX_ARGS = (
    MAIL_ID,
    text("mailbox_name", "The mailbox name (local part of email address)", required=True, non_empty=True),
    password(required=True),
    MAX_SIZE,
)
UPDATE_MAILBOX_ARGS = (MAIL_ID, MAILBOX_ID, password(required=False), MAX_SIZE)
MAILBOX_ALIAS_ARGS = (MAIL_ID, MAILBOX_ID, ALIAS)
HOSTING_ARGS = (HOSTING_ID,)
SITE_ARGS = (HOSTING_ID, SITE_ID)
CREATE_SITE_ARGS = (
    HOSTING_ID,
    text("fqdn", "The fully qualified domain name for the site", required=True, non_empty=True),
    text("path", "The document root path"),
    text("php_version", "PHP version to use"),
)
UPDATE_SITE_ARGS = (
    HOSTING_ID,
    SITE_ID,
    text("path", "New document root path"),
    text("php_version", "New PHP version"),
)
DATABASE_ARGS = (HOSTING_ID, DATABASE_ID)
CREATE_DATABASE_ARGS = (
    HOSTING_ID,
    text("name", "Database name", required=True, non_empty=True),
    text("charset", "Character set (e.g., utf8mb4)"),
)
DRIVE_ARGS = (DRIVE_ID,)
BACKUP_ARGS = (BACKUP_ID,)
VPS_ARGS = (VPS_ID,)
SERVER_ARGS = (SERVER_ID,)
CERTIFICATE_ARGS = (CERTIFICATE_ID,)
INVOICE_ARGS = (ACCOUNT_ID, INVOICE_ID)
API_CALL_ARGS = (
    FieldRule("method", FieldKind.ENUM, required=True, description="HTTP method", choices=HTTP_METHODS),
    FieldRule(
        "endpoint",
        FieldKind.PATH,
        required=True,
        description="API endpoint path (e.g., /1/account or /2/drive/123)",
    ),
    FieldRule("body", FieldKind.OBJECT, description="Request body for POST/PUT/PATCH requests"),
    FieldRule("query_params", FieldKind.SCALAR_MAP, description="Query parameters as key-value pairs"),
)
