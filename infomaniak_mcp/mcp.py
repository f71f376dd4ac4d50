"""
Operation catalog and dispatcher for the Infomaniak MCP tools.

The catalog is a registration table built once at import time: each entry pairs
an ``OperationSpec`` with an async handler that issues exactly one gateway call.
``ToolDispatcher`` validates raw arguments, invokes the handler and shapes every
outcome, success or failure, into the MCP content envelope.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple

from infomaniak_mcp import schemas
from infomaniak_mcp.infomaniak_api import InfomaniakApiClient, InfomaniakApiError
from infomaniak_mcp.metrics import MetricsRecorder, default_metrics
from infomaniak_mcp.schemas import FieldRule, OperationSpec, ValidatedArgs, ValidationError, validate
from infomaniak_mcp.tools import account, api, billing, domains, hosting, mail, servers, storage

logger = logging.getLogger(__name__)

ToolHandler = Callable[[ValidatedArgs, InfomaniakApiClient], Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class ToolDefinition:
    name: str
    description: str
    spec: OperationSpec
    handler: ToolHandler

    @property
    def input_schema(self) -> Dict[str, Any]:
        return self.spec.json_schema()


def _tool(
    name: str,
    description: str,
    fields: Tuple[FieldRule, ...],
    handler: ToolHandler,
) -> ToolDefinition:
    return ToolDefinition(
        name=name,
        description=description,
        spec=OperationSpec(name=name, fields=fields),
        handler=handler,
    )


_CATALOG = (
    # Profile & accounts
    _tool("infomaniak_ping", "Test connectivity with the Infomaniak API", schemas.NO_ARGS, account.ping),
    _tool(
        "infomaniak_get_profile",
        "Get the current user profile information",
        schemas.NO_ARGS,
        account.get_profile,
    ),
    _tool(
        "infomaniak_list_accounts",
        "List all accounts accessible by the current user",
        schemas.NO_ARGS,
        account.list_accounts,
    ),
    _tool(
        "infomaniak_get_account",
        "Get detailed information about a specific account",
        schemas.ACCOUNT_ARGS,
        account.get_account,
    ),
    _tool(
        "infomaniak_list_products",
        "List all products for a specific account",
        schemas.ACCOUNT_ARGS,
        account.list_products,
    ),
    # Domains & DNS
    _tool(
        "infomaniak_list_domains",
        "List all domains for an account",
        schemas.ACCOUNT_ARGS,
        domains.list_domains,
    ),
    _tool(
        "infomaniak_get_domain",
        "Get detailed information about a specific domain",
        schemas.GET_DOMAIN_ARGS,
        domains.get_domain,
    ),
    _tool(
        "infomaniak_list_dns_records",
        "List all DNS records for a domain",
        schemas.DOMAIN_ARGS,
        domains.list_dns_records,
    ),
    _tool(
        "infomaniak_create_dns_record",
        "Create a new DNS record for a domain",
        schemas.CREATE_DNS_RECORD_ARGS,
        domains.create_dns_record,
    ),
    _tool(
        "infomaniak_update_dns_record",
        "Update an existing DNS record",
        schemas.UPDATE_DNS_RECORD_ARGS,
        domains.update_dns_record,
    ),
    _tool(
        "infomaniak_delete_dns_record",
        "Delete a DNS record",
        schemas.DNS_RECORD_ARGS,
        domains.delete_dns_record,
    ),
    # Mail
    _tool(
        "infomaniak_list_mail_services",
        "List all mail services for an account",
        schemas.ACCOUNT_ARGS,
        mail.list_mail_services,
    ),
    _tool(
        "infomaniak_get_mail_service",
        "Get detailed information about a mail service",
        schemas.MAIL_ARGS,
        mail.get_mail_service,
    ),
    _tool(
        "infomaniak_list_mailboxes",
        "List all mailboxes for a mail service",
        schemas.MAIL_ARGS,
        mail.list_mailboxes,
    ),
    _tool(
        "infomaniak_get_mailbox",
        "Get detailed information about a specific mailbox",
        schemas.MAILBOX_ARGS,
        mail.get_mailbox,
    ),
    _tool("infomaniak_create_mailbox", "Create a new mailbox", schemas.CREATE_MAILBOX_ARGS, mail.create_mailbox),
    _tool(
        "infomaniak_update_mailbox",
        "Update a mailbox (password or size)",
        schemas.UPDATE_MAILBOX_ARGS,
        mail.update_mailbox,
    ),
    _tool("infomaniak_delete_mailbox", "Delete a mailbox", schemas.MAILBOX_ARGS, mail.delete_mailbox),
    _tool(
        "infomaniak_add_mailbox_alias",
        "Add an email alias to a mailbox",
        schemas.MAILBOX_ALIAS_ARGS,
        mail.add_mailbox_alias,
    ),
    _tool(
        "infomaniak_delete_mailbox_alias",
        "Delete an email alias from a mailbox",
        schemas.MAILBOX_ALIAS_ARGS,
        mail.delete_mailbox_alias,
    ),
    # Web hosting
    _tool(
        "infomaniak_list_web_hostings",
        "List all web hostings for an account",
        schemas.ACCOUNT_ARGS,
        hosting.list_web_hostings,
    ),
    _tool(
        "infomaniak_get_web_hosting",
        "Get detailed information about a web hosting",
        schemas.HOSTING_ARGS,
        hosting.get_web_hosting,
    ),
    _tool("infomaniak_list_sites", "List all sites for a web hosting", schemas.HOSTING_ARGS, hosting.list_sites),
    _tool("infomaniak_get_site", "Get detailed information about a site", schemas.SITE_ARGS, hosting.get_site),
    _tool(
        "infomaniak_create_site",
        "Create a new site on a web hosting",
        schemas.CREATE_SITE_ARGS,
        hosting.create_site,
    ),
    _tool("infomaniak_update_site", "Update a site configuration", schemas.UPDATE_SITE_ARGS, hosting.update_site),
    _tool("infomaniak_delete_site", "Delete a site from web hosting", schemas.SITE_ARGS, hosting.delete_site),
    _tool(
        "infomaniak_list_databases",
        "List all databases for a web hosting",
        schemas.HOSTING_ARGS,
        hosting.list_databases,
    ),
    _tool(
        "infomaniak_get_database",
        "Get detailed information about a database",
        schemas.DATABASE_ARGS,
        hosting.get_database,
    ),
    _tool(
        "infomaniak_create_database",
        "Create a new database",
        schemas.CREATE_DATABASE_ARGS,
        hosting.create_database,
    ),
    _tool("infomaniak_delete_database", "Delete a database", schemas.DATABASE_ARGS, hosting.delete_database),
    # kDrive & Swiss Backup
    _tool("infomaniak_list_kdrives", "List all kDrives for an account", schemas.ACCOUNT_ARGS, storage.list_kdrives),
    _tool("infomaniak_get_kdrive", "Get detailed information about a kDrive", schemas.DRIVE_ARGS, storage.get_kdrive),
    _tool(
        "infomaniak_list_swiss_backups",
        "List all Swiss Backup products for an account",
        schemas.ACCOUNT_ARGS,
        storage.list_swiss_backups,
    ),
    _tool(
        "infomaniak_get_swiss_backup",
        "Get detailed information about a Swiss Backup product",
        schemas.BACKUP_ARGS,
        storage.get_swiss_backup,
    ),
    _tool(
        "infomaniak_list_swiss_backup_slots",
        "List all slots for a Swiss Backup product",
        schemas.BACKUP_ARGS,
        storage.list_swiss_backup_slots,
    ),
    # VPS & dedicated servers
    _tool("infomaniak_list_vps", "List all VPS instances", schemas.NO_ARGS, servers.list_vps),
    _tool("infomaniak_get_vps", "Get detailed information about a VPS", schemas.VPS_ARGS, servers.get_vps),
    _tool("infomaniak_reboot_vps", "Reboot a VPS", schemas.VPS_ARGS, servers.reboot_vps),
    _tool("infomaniak_shutdown_vps", "Shutdown a VPS", schemas.VPS_ARGS, servers.shutdown_vps),
    _tool("infomaniak_boot_vps", "Boot a VPS", schemas.VPS_ARGS, servers.boot_vps),
    _tool(
        "infomaniak_list_dedicated_servers",
        "List all dedicated servers",
        schemas.NO_ARGS,
        servers.list_dedicated_servers,
    ),
    _tool(
        "infomaniak_get_dedicated_server",
        "Get detailed information about a dedicated server",
        schemas.SERVER_ARGS,
        servers.get_dedicated_server,
    ),
    _tool(
        "infomaniak_reboot_dedicated_server",
        "Reboot a dedicated server",
        schemas.SERVER_ARGS,
        servers.reboot_dedicated_server,
    ),
    # Certificates & invoicing
    _tool(
        "infomaniak_list_certificates",
        "List all SSL certificates for an account",
        schemas.ACCOUNT_ARGS,
        billing.list_certificates,
    ),
    _tool(
        "infomaniak_get_certificate",
        "Get detailed information about an SSL certificate",
        schemas.CERTIFICATE_ARGS,
        billing.get_certificate,
    ),
    _tool("infomaniak_list_invoices", "List all invoices for an account", schemas.ACCOUNT_ARGS, billing.list_invoices),
    _tool(
        "infomaniak_get_invoice",
        "Get detailed information about an invoice",
        schemas.INVOICE_ARGS,
        billing.get_invoice,
    ),
    # Passthrough
    _tool(
        "infomaniak_api_call",
        "Make a custom API call to any Infomaniak API endpoint. "
        "Use this for advanced operations not covered by other tools.",
        schemas.API_CALL_ARGS,
        api.api_call,
    ),
)

TOOL_REGISTRY: Dict[str, ToolDefinition] = {tool.name: tool for tool in _CATALOG}


def list_tools() -> List[Dict[str, Any]]:
    """Return the MCP tool listing for every catalog entry."""
    return [
        {
            "name": tool.name,
            "description": tool.description,
            "inputSchema": tool.input_schema,
        }
        for tool in TOOL_REGISTRY.values()
    ]


def _text_result(text: str, *, is_error: bool = False) -> Dict[str, Any]:
    wrapped: Dict[str, Any] = {"content": [{"type": "text", "text": text}]}
    if is_error:
        wrapped["isError"] = True
    return wrapped


def _render(result: Any) -> str:
    return json.dumps(result, indent=2, ensure_ascii=False, default=str)


class ToolDispatcher:
    """Validate, route and wrap tool calls against one gateway client."""

    def __init__(
        self,
        client: InfomaniakApiClient,
        *,
        registry: Optional[Mapping[str, ToolDefinition]] = None,
        metrics: MetricsRecorder = default_metrics,
    ) -> None:
        self.client = client
        self.registry = registry if registry is not None else TOOL_REGISTRY
        self.metrics = metrics

    def _log_outcome(
        self,
        tool_name: str,
        *,
        error: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> None:
        if error is not None:
            logger.warning(
                "tool=%s outcome=error error=%s",
                tool_name,
                error,
                extra={"tool": tool_name, "request_id": request_id, "error": error},
            )
            self.metrics.record_tool(tool_name, success=False)
        else:
            logger.info(
                "tool=%s outcome=success",
                tool_name,
                extra={"tool": tool_name, "request_id": request_id},
            )
            self.metrics.record_tool(tool_name, success=True)

    async def dispatch(
        self,
        tool_name: str,
        raw_args: Optional[Mapping[str, Any]] = None,
        *,
        request_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Run ``tool_name`` with ``raw_args`` and return the MCP content envelope.

        Never raises for validation, unknown-tool or API failures; those come
        back as ``{"content": [...], "isError": True}`` with ``Error: <message>``.
        """
        tool = self.registry.get(tool_name)
        if tool is None:
            message = f"Unknown tool: {tool_name}"
            logger.warning(
                "unknown tool requested tool=%s",
                tool_name,
                extra={"request_id": request_id, "error": message},
            )
            self.metrics.record_unknown_tool()
            return _text_result(f"Error: {message}", is_error=True)

        try:
            args = validate(tool.spec, raw_args)
            result = await tool.handler(args, self.client)
        except (ValidationError, InfomaniakApiError) as exc:
            self._log_outcome(tool_name, error=str(exc), request_id=request_id)
            return _text_result(f"Error: {exc}", is_error=True)
        except Exception as exc:
            logger.exception(
                "tool=%s raised unexpectedly",
                tool_name,
                extra={"tool": tool_name, "request_id": request_id},
            )
            self._log_outcome(tool_name, error=str(exc), request_id=request_id)
            return _text_result(f"Error: {exc}", is_error=True)

        self._log_outcome(tool_name, request_id=request_id)
        return _text_result(_render(result))
