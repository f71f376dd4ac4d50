"""Domain and DNS zone tools."""

from __future__ import annotations

from typing import Any

from infomaniak_mcp.infomaniak_api import InfomaniakApiClient
from infomaniak_mcp.schemas import ValidatedArgs

DNS_RECORD_FIELDS = ("source", "type", "target", "ttl", "priority")


async def list_domains(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_domains(args["account_id"])


async def get_domain(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_domain(args["account_id"], args["domain"])


async def list_dns_records(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_dns_records(args["domain"])


async def create_dns_record(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    """Create a record; ``ttl`` and ``priority`` are sent only when supplied."""
    return await client.create_dns_record(args["domain"], args.pick(*DNS_RECORD_FIELDS))


async def update_dns_record(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.update_dns_record(
        args["domain"], args["record_id"], args.pick(*DNS_RECORD_FIELDS)
    )


async def delete_dns_record(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.delete_dns_record(args["domain"], args["record_id"])
