"""Web hosting, site and database tools."""

from __future__ import annotations

from typing import Any

from infomaniak_mcp.infomaniak_api import InfomaniakApiClient
from infomaniak_mcp.schemas import ValidatedArgs


async def list_web_hostings(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_web_hostings(args["account_id"])


async def get_web_hosting(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_web_hosting(args["hosting_id"])


async def list_sites(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_sites(args["hosting_id"])


async def get_site(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_site(args["hosting_id"], args["site_id"])


async def create_site(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.create_site(args["hosting_id"], args.pick("fqdn", "path", "php_version"))


async def update_site(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.update_site(
        args["hosting_id"], args["site_id"], args.pick("path", "php_version")
    )


async def delete_site(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.delete_site(args["hosting_id"], args["site_id"])


async def list_databases(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_databases(args["hosting_id"])


async def get_database(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_database(args["hosting_id"], args["database_id"])


async def create_database(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.create_database(args["hosting_id"], args.pick("name", "charset"))


async def delete_database(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.delete_database(args["hosting_id"], args["database_id"])
