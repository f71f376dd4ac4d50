"""Raw passthrough for endpoints without a dedicated tool."""

from __future__ import annotations

from typing import Any

from infomaniak_mcp.infomaniak_api import InfomaniakApiClient
from infomaniak_mcp.schemas import ValidatedArgs


async def api_call(args: ValidatedArgs, client: InfomaniakApiClient) -> Any:
    return await client.call(
        args["method"],
        args["endpoint"],
        body=args.get("body"),
        query_params=args.get("query_params"),
    )
