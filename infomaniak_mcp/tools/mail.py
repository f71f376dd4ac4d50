"""Mail service, mailbox and alias tools."""

from __future__ import annotations

from typing import Any

from infomaniak_mcp.infomaniak_api import InfomaniakApiClient
from infomaniak_mcp.schemas import ValidatedArgs


async def list_mail_services(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_mail_services(args["account_id"])


async def get_mail_service(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_mail_service(args["mail_id"])


async def list_mailboxes(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_mailboxes(args["mail_id"])


async def get_mailbox(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.get_mailbox(args["mail_id"], args["mailbox_id"])


async def create_mailbox(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.create_mailbox(
        args["mail_id"], args.pick("mailbox_name", "password", "max_size")
    )


async def update_mailbox(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.update_mailbox(
        args["mail_id"], args["mailbox_id"], args.pick("password", "max_size")
    )


async def delete_mailbox(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.delete_mailbox(args["mail_id"], args["mailbox_id"])


async def add_mailbox_alias(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.add_mailbox_alias(args["mail_id"], args["mailbox_id"], args["alias"])


async def delete_mailbox_alias(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.delete_mailbox_alias(args["mail_id"], args["mailbox_id"], args["alias"])
