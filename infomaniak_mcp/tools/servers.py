"""VPS and dedicated server tools, including power actions."""

from __future__ import annotations

from typing import Any

from infomaniak_mcp.infomaniak_api import InfomaniakApiClient
from infomaniak_mcp.schemas import ValidatedArgs


async def list_vps(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_vps_list()


async def get_vps(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_vps(args["vps_id"])


async def reboot_vps(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.reboot_vps(args["vps_id"])


async def shutdown_vps(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.shutdown_vps(args["vps_id"])


async def boot_vps(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.boot_vps(args["vps_id"])


async def list_dedicated_servers(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_dedicated_servers()


async def get_dedicated_server(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_dedicated_server(args["server_id"])


async def reboot_dedicated_server(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.reboot_dedicated_server(args["server_id"])
