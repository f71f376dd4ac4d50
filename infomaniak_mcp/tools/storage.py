"""kDrive and Swiss Backup tools."""

from __future__ import annotations

from typing import Any

from infomaniak_mcp.infomaniak_api import InfomaniakApiClient
from infomaniak_mcp.schemas import ValidatedArgs


async def list_kdrives(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_kdrives(args["account_id"])


async def get_kdrive(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_kdrive(args["drive_id"])


async def list_swiss_backups(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_swiss_backups(args["account_id"])


async def get_swiss_backup(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_swiss_backup(args["backup_id"])


async def list_swiss_backup_slots(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_swiss_backup_slots(args["backup_id"])
