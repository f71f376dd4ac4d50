"""
Thin async HTTP client for the Infomaniak REST API.

Every method issues exactly one request: no retries, no caching, no client-side
throttling. Non-2xx responses raise ``InfomaniakApiError`` whose message is
surfaced verbatim to tool callers.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import quote

import httpx

from infomaniak_mcp.config import InfomaniakMcpConfig
from infomaniak_mcp.infomaniak_api.models import (
    Account,
    ApiResponse,
    Certificate,
    Database,
    DedicatedServer,
    DnsRecord,
    Domain,
    Invoice,
    KDrive,
    Mailbox,
    MailService,
    Product,
    Profile,
    Site,
    SwissBackup,
    SwissBackupSlot,
    Vps,
    WebHosting,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "Infomaniak"
BODY_METHODS = frozenset({"POST", "PUT", "PATCH"})
ALLOWED_METHODS = frozenset({"GET", "POST", "PUT", "PATCH", "DELETE"})

QueryParams = Mapping[str, Any]


class InfomaniakApiError(Exception):
    """Raised for any failed call against the Infomaniak API."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ApiUnreachableError(InfomaniakApiError):
    """Raised when the API cannot be reached (DNS, connect, timeout)."""


def _segment(value: Any) -> str:
    return quote(str(value), safe="")


def _extract_error_description(raw_text: str) -> str:
    try:
        payload = json.loads(raw_text)
    except ValueError:
        return raw_text
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("description"):
            return str(error["description"])
        if payload.get("message"):
            return str(payload["message"])
    return raw_text


class InfomaniakApiClient:
    """Async client covering the Infomaniak API surface exposed as tools."""

    def __init__(
        self,
        config: InfomaniakMcpConfig,
        *,
        async_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.config = config
        self._client: Optional[httpx.AsyncClient] = async_client
        self._owns_client = async_client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url, timeout=self.config.timeout
            )
            self._owns_client = True
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _build_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    @staticmethod
    def _clean_params(query_params: Optional[QueryParams]) -> Optional[Dict[str, Any]]:
        if not query_params:
            return None
        cleaned = {key: value for key, value in query_params.items() if value is not None}
        return cleaned or None

    def _process_response(self, response: httpx.Response) -> Any:
        if not response.is_success:
            description = _extract_error_description(response.text)
            raise InfomaniakApiError(
                f"{SERVICE_NAME} API Error ({response.status_code}): {description}",
                status_code=response.status_code,
            )
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise InfomaniakApiError(
                f"{SERVICE_NAME} API returned a non-JSON response ({response.status_code})",
                status_code=response.status_code,
            ) from exc

    async def request(
        self,
        method: str,
        path: str,
        body: Optional[Any] = None,
        query_params: Optional[QueryParams] = None,
    ) -> Any:
        """Issue one request against ``path`` (relative to the base URL)."""
        method = method.upper()
        client = self._get_client()
        kwargs: Dict[str, Any] = {"headers": self._build_headers()}
        params = self._clean_params(query_params)
        if params is not None:
            kwargs["params"] = params
        if body is not None and method in BODY_METHODS:
            kwargs["json"] = body
        logger.debug("infomaniak request method=%s path=%s", method, path)
        try:
            response = await client.request(method, path, **kwargs)
        except httpx.RequestError as exc:
            logger.warning("Infomaniak API unreachable for %s %s", method, path)
            raise ApiUnreachableError(
                f"{SERVICE_NAME} API unreachable: {exc.__class__.__name__}: {exc}"
            ) from exc
        return self._process_response(response)

    # Profile & authentication

    async def ping(self) -> ApiResponse[Dict[str, str]]:
        return await self.request("GET", "/1/ping")

    async def get_profile(self) -> ApiResponse[Profile]:
        return await self.request("GET", "/1/profile")

    # Accounts

    async def get_accounts(self) -> ApiResponse[List[Account]]:
        return await self.request("GET", "/1/account")

    async def get_account(self, account_id: int) -> ApiResponse[Account]:
        return await self.request("GET", f"/1/account/{account_id}")

    async def get_account_products(self, account_id: int) -> ApiResponse[List[Product]]:
        return await self.request("GET", f"/1/account/{account_id}/product")

    # Domains & DNS

    async def get_domains(self, account_id: int) -> ApiResponse[List[Domain]]:
        return await self.request("GET", f"/1/domain/account/{account_id}")

    async def get_domain(self, account_id: int, domain: str) -> ApiResponse[Domain]:
        return await self.request("GET", f"/1/domain/account/{account_id}/domain/{_segment(domain)}")

    async def get_dns_records(self, domain: str) -> ApiResponse[List[DnsRecord]]:
        return await self.request("GET", f"/1/domain/{_segment(domain)}/dns/record")

    async def create_dns_record(self, domain: str, record: Dict[str, Any]) -> ApiResponse[DnsRecord]:
        return await self.request("POST", f"/1/domain/{_segment(domain)}/dns/record", record)

    async def update_dns_record(
        self, domain: str, record_id: int, record: Dict[str, Any]
    ) -> ApiResponse[DnsRecord]:
        return await self.request("PUT", f"/1/domain/{_segment(domain)}/dns/record/{record_id}", record)

    async def delete_dns_record(self, domain: str, record_id: int) -> ApiResponse[None]:
        return await self.request("DELETE", f"/1/domain/{_segment(domain)}/dns/record/{record_id}")

    # Mail services

    async def get_mail_services(self, account_id: int) -> ApiResponse[List[MailService]]:
        return await self.request("GET", "/1/mail", query_params={"account_id": account_id})

    async def get_mail_service(self, mail_id: int) -> ApiResponse[MailService]:
        return await self.request("GET", f"/1/mail/{mail_id}")

    async def get_mailboxes(self, mail_id: int) -> ApiResponse[List[Mailbox]]:
        return await self.request("GET", f"/1/mail/{mail_id}/mailbox")

    async def get_mailbox(self, mail_id: int, mailbox_id: int) -> ApiResponse[Mailbox]:
        return await self.request("GET", f"/1/mail/{mail_id}/mailbox/{mailbox_id}")

    async def create_mailbox(self, mail_id: int, mailbox: Dict[str, Any]) -> ApiResponse[Mailbox]:
        return await self.request("POST", f"/1/mail/{mail_id}/mailbox", mailbox)

    async def update_mailbox(
        self, mail_id: int, mailbox_id: int, mailbox: Dict[str, Any]
    ) -> ApiResponse[Mailbox]:
        return await self.request("PUT", f"/1/mail/{mail_id}/mailbox/{mailbox_id}", mailbox)

    async def delete_mailbox(self, mail_id: int, mailbox_id: int) -> ApiResponse[None]:
        return await self.request("DELETE", f"/1/mail/{mail_id}/mailbox/{mailbox_id}")

    async def add_mailbox_alias(self, mail_id: int, mailbox_id: int, alias: str) -> ApiResponse[None]:
        return await self.request(
            "POST", f"/1/mail/{mail_id}/mailbox/{mailbox_id}/alias", {"alias": alias}
        )

    async def delete_mailbox_alias(self, mail_id: int, mailbox_id: int, alias: str) -> ApiResponse[None]:
        return await self.request(
            "DELETE", f"/1/mail/{mail_id}/mailbox/{mailbox_id}/alias/{_segment(alias)}"
        )

    # Web hosting

    async def get_web_hostings(self, account_id: int) -> ApiResponse[List[WebHosting]]:
        return await self.request("GET", "/1/web", query_params={"account_id": account_id})

    async def get_web_hosting(self, hosting_id: int) -> ApiResponse[WebHosting]:
        return await self.request("GET", f"/1/web/{hosting_id}")

    async def get_sites(self, hosting_id: int) -> ApiResponse[List[Site]]:
        return await self.request("GET", f"/1/web/{hosting_id}/site")

    async def get_site(self, hosting_id: int, site_id: int) -> ApiResponse[Site]:
        return await self.request("GET", f"/1/web/{hosting_id}/site/{site_id}")

    async def create_site(self, hosting_id: int, site: Dict[str, Any]) -> ApiResponse[Site]:
        return await self.request("POST", f"/1/web/{hosting_id}/site", site)

    async def update_site(self, hosting_id: int, site_id: int, site: Dict[str, Any]) -> ApiResponse[Site]:
        return await self.request("PUT", f"/1/web/{hosting_id}/site/{site_id}", site)

    async def delete_site(self, hosting_id: int, site_id: int) -> ApiResponse[None]:
        return await self.request("DELETE", f"/1/web/{hosting_id}/site/{site_id}")

    # Databases

    async def get_databases(self, hosting_id: int) -> ApiResponse[List[Database]]:
        return await self.request("GET", f"/1/web/{hosting_id}/database")

    async def get_database(self, hosting_id: int, database_id: int) -> ApiResponse[Database]:
        return await self.request("GET", f"/1/web/{hosting_id}/database/{database_id}")

    async def create_database(self, hosting_id: int, database: Dict[str, Any]) -> ApiResponse[Database]:
        return await self.request("POST", f"/1/web/{hosting_id}/database", database)

    async def delete_database(self, hosting_id: int, database_id: int) -> ApiResponse[None]:
        return await self.request("DELETE", f"/1/web/{hosting_id}/database/{database_id}")

    # kDrive

    async def get_kdrives(self, account_id: int) -> ApiResponse[List[KDrive]]:
        return await self.request("GET", "/2/drive", query_params={"account_id": account_id})

    async def get_kdrive(self, drive_id: int) -> ApiResponse[KDrive]:
        return await self.request("GET", f"/2/drive/{drive_id}")

    # Swiss Backup

    async def get_swiss_backups(self, account_id: int) -> ApiResponse[List[SwissBackup]]:
        return await self.request("GET", "/1/swiss_backup", query_params={"account_id": account_id})

    async def get_swiss_backup(self, backup_id: int) -> ApiResponse[SwissBackup]:
        return await self.request("GET", f"/1/swiss_backup/{backup_id}")

    async def get_swiss_backup_slots(self, backup_id: int) -> ApiResponse[List[SwissBackupSlot]]:
        return await self.request("GET", f"/1/swiss_backup/{backup_id}/slot")

    # VPS

    async def get_vps_list(self) -> ApiResponse[List[Vps]]:
        return await self.request("GET", "/1/vps")

    async def get_vps(self, vps_id: int) -> ApiResponse[Vps]:
        return await self.request("GET", f"/1/vps/{vps_id}")

    async def reboot_vps(self, vps_id: int) -> ApiResponse[None]:
        return await self.request("POST", f"/1/vps/{vps_id}/reboot")

    async def shutdown_vps(self, vps_id: int) -> ApiResponse[None]:
        return await self.request("POST", f"/1/vps/{vps_id}/shutdown")

    async def boot_vps(self, vps_id: int) -> ApiResponse[None]:
        return await self.request("POST", f"/1/vps/{vps_id}/boot")

    # Dedicated servers

    async def get_dedicated_servers(self) -> ApiResponse[List[DedicatedServer]]:
        return await self.request("GET", "/1/dedicated")

    async def get_dedicated_server(self, server_id: int) -> ApiResponse[DedicatedServer]:
        return await self.request("GET", f"/1/dedicated/{server_id}")

    async def reboot_dedicated_server(self, server_id: int) -> ApiResponse[None]:
        return await self.request("POST", f"/1/dedicated/{server_id}/reboot")

    # SSL certificates

    async def get_certificates(self, account_id: int) -> ApiResponse[List[Certificate]]:
        return await self.request("GET", "/1/certificate", query_params={"account_id": account_id})

    async def get_certificate(self, certificate_id: int) -> ApiResponse[Certificate]:
        return await self.request("GET", f"/1/certificate/{certificate_id}")

    # Invoicing

    async def get_invoices(self, account_id: int) -> ApiResponse[List[Invoice]]:
        return await self.request("GET", f"/1/invoicing/{account_id}/invoice/list")

    async def get_invoice(self, account_id: int, invoice_id: int) -> ApiResponse[Invoice]:
        return await self.request("GET", f"/1/invoicing/{account_id}/invoice/{invoice_id}")

    # Generic passthrough

    async def call(
        self,
        method: str,
        endpoint: str,
        body: Optional[Any] = None,
        query_params: Optional[QueryParams] = None,
    ) -> Any:
        """Call any endpoint not covered by a named method."""
        if method.upper() not in ALLOWED_METHODS:
            raise InfomaniakApiError(f"Unsupported HTTP method: {method}")
        if not endpoint.startswith("/"):
            raise InfomaniakApiError("endpoint must start with /")
        return await self.request(method, endpoint, body, query_params)
