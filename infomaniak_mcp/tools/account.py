"""Connectivity, profile and account tools."""

from __future__ import annotations

from typing import Any

from infomaniak_mcp.infomaniak_api import InfomaniakApiClient
from infomaniak_mcp.schemas import ValidatedArgs


async def ping(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.ping()


async def get_profile(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_profile()


async def list_accounts(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_accounts()


async def get_account(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_account(args["account_id"])


async def list_products(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_account_products(args["account_id"])
