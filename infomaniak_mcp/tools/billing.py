"""SSL certificate and invoicing tools."""

from __future__ import annotations

from typing import Any

from infomaniak_mcp.infomaniak_api import InfomaniakApiClient
from infomaniak_mcp.schemas import ValidatedArgs


async def list_certificates(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_certificates(args["account_id"])


async def get_certificate(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_certificate(args["certificate_id"])


async def list_invoices(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_invoices(args["account_id"])


async def get_invoice(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_invoice(args["account_id"], args["invoice_id"])
