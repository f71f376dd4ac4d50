import json

import pytest

from infomaniak_mcp.mcp import TOOL_REGISTRY, ToolDispatcher

# tool, arguments, HTTP method, raw path, JSON body (None = no body), query params
ROUTES = [
    ("infomaniak_ping", {}, "GET", "/1/ping", None, {}),
    ("infomaniak_get_profile", {}, "GET", "/1/profile", None, {}),
    ("infomaniak_list_accounts", {}, "GET", "/1/account", None, {}),
    ("infomaniak_get_account", {"account_id": 7}, "GET", "/1/account/7", None, {}),
    ("infomaniak_list_products", {"account_id": 7}, "GET", "/1/account/7/product", None, {}),
    ("infomaniak_list_domains", {"account_id": 7}, "GET", "/1/domain/account/7", None, {}),
    (
        "infomaniak_get_domain",
        {"account_id": 7, "domain": "example.com"},
        "GET",
        "/1/domain/account/7/domain/example.com",
        None,
        {},
    ),
    ("infomaniak_list_dns_records", {"domain": "example.com"}, "GET", "/1/domain/example.com/dns/record", None, {}),
    (
        "infomaniak_create_dns_record",
        {"domain": "example.com", "source": "mail", "type": "MX", "target": "mx.example.com", "ttl": 3600, "priority": 10},
        "POST",
        "/1/domain/example.com/dns/record",
        {"source": "mail", "type": "MX", "target": "mx.example.com", "ttl": 3600, "priority": 10},
        {},
    ),
    (
        "infomaniak_update_dns_record",
        {"domain": "example.com", "record_id": 99, "target": "5.6.7.8"},
        "PUT",
        "/1/domain/example.com/dns/record/99",
        {"target": "5.6.7.8"},
        {},
    ),
    (
        "infomaniak_delete_dns_record",
        {"domain": "example.com", "record_id": 99},
        "DELETE",
        "/1/domain/example.com/dns/record/99",
        None,
        {},
    ),
    ("infomaniak_list_mail_services", {"account_id": 7}, "GET", "/1/mail", None, {"account_id": "7"}),
    ("infomaniak_get_mail_service", {"mail_id": 3}, "GET", "/1/mail/3", None, {}),
    ("infomaniak_list_mailboxes", {"mail_id": 3}, "GET", "/1/mail/3/mailbox", None, {}),
    ("infomaniak_get_mailbox", {"mail_id": 3, "mailbox_id": 4}, "GET", "/1/mail/3/mailbox/4", None, {}),
    (
        "infomaniak_create_mailbox",
        {"mail_id": 3, "mailbox_name": "info", "password": "s3cret-pass", "max_size": 1024},
        "POST",
        "/1/mail/3/mailbox",
        {"mailbox_name": "info", "password": "s3cret-pass", "max_size": 1024},
        {},
    ),
    (
        "infomaniak_update_mailbox",
        {"mail_id": 3, "mailbox_id": 4, "max_size": 2048},
        "PUT",
        "/1/mail/3/mailbox/4",
        {"max_size": 2048},
        {},
    ),
    ("infomaniak_delete_mailbox", {"mail_id": 3, "mailbox_id": 4}, "DELETE", "/1/mail/3/mailbox/4", None, {}),
    (
        "infomaniak_add_mailbox_alias",
        {"mail_id": 3, "mailbox_id": 4, "alias": "sales@example.com"},
        "POST",
        "/1/mail/3/mailbox/4/alias",
        {"alias": "sales@example.com"},
        {},
    ),
    (
        "infomaniak_delete_mailbox_alias",
        {"mail_id": 3, "mailbox_id": 4, "alias": "sales@example.com"},
        "DELETE",
        "/1/mail/3/mailbox/4/alias/sales%40example.com",
        None,
        {},
    ),
    ("infomaniak_list_web_hostings", {"account_id": 7}, "GET", "/1/web", None, {"account_id": "7"}),
    ("infomaniak_get_web_hosting", {"hosting_id": 5}, "GET", "/1/web/5", None, {}),
    ("infomaniak_list_sites", {"hosting_id": 5}, "GET", "/1/web/5/site", None, {}),
    ("infomaniak_get_site", {"hosting_id": 5, "site_id": 6}, "GET", "/1/web/5/site/6", None, {}),
    (
        "infomaniak_create_site",
        {"hosting_id": 5, "fqdn": "blog.example.com", "php_version": "8.3"},
        "POST",
        "/1/web/5/site",
        {"fqdn": "blog.example.com", "php_version": "8.3"},
        {},
    ),
    (
        "infomaniak_update_site",
        {"hosting_id": 5, "site_id": 6, "path": "/web/blog"},
        "PUT",
        "/1/web/5/site/6",
        {"path": "/web/blog"},
        {},
    ),
    ("infomaniak_delete_site", {"hosting_id": 5, "site_id": 6}, "DELETE", "/1/web/5/site/6", None, {}),
    ("infomaniak_list_databases", {"hosting_id": 5}, "GET", "/1/web/5/database", None, {}),
    ("infomaniak_get_database", {"hosting_id": 5, "database_id": 8}, "GET", "/1/web/5/database/8", None, {}),
    (
        "infomaniak_create_database",
        {"hosting_id": 5, "name": "shop", "charset": "utf8mb4"},
        "POST",
        "/1/web/5/database",
        {"name": "shop", "charset": "utf8mb4"},
        {},
    ),
    ("infomaniak_delete_database", {"hosting_id": 5, "database_id": 8}, "DELETE", "/1/web/5/database/8", None, {}),
    ("infomaniak_list_kdrives", {"account_id": 7}, "GET", "/2/drive", None, {"account_id": "7"}),
    ("infomaniak_get_kdrive", {"drive_id": 11}, "GET", "/2/drive/11", None, {}),
    ("infomaniak_list_swiss_backups", {"account_id": 7}, "GET", "/1/swiss_backup", None, {"account_id": "7"}),
    ("infomaniak_get_swiss_backup", {"backup_id": 12}, "GET", "/1/swiss_backup/12", None, {}),
    ("infomaniak_list_swiss_backup_slots", {"backup_id": 12}, "GET", "/1/swiss_backup/12/slot", None, {}),
    ("infomaniak_list_vps", {}, "GET", "/1/vps", None, {}),
    ("infomaniak_get_vps", {"vps_id": 13}, "GET", "/1/vps/13", None, {}),
    ("infomaniak_reboot_vps", {"vps_id": 13}, "POST", "/1/vps/13/reboot", None, {}),
    ("infomaniak_shutdown_vps", {"vps_id": 13}, "POST", "/1/vps/13/shutdown", None, {}),
    ("infomaniak_boot_vps", {"vps_id": 13}, "POST", "/1/vps/13/boot", None, {}),
    ("infomaniak_list_dedicated_servers", {}, "GET", "/1/dedicated", None, {}),
    ("infomaniak_get_dedicated_server", {"server_id": 14}, "GET", "/1/dedicated/14", None, {}),
    ("infomaniak_reboot_dedicated_server", {"server_id": 14}, "POST", "/1/dedicated/14/reboot", None, {}),
    ("infomaniak_list_certificates", {"account_id": 7}, "GET", "/1/certificate", None, {"account_id": "7"}),
    ("infomaniak_get_certificate", {"certificate_id": 15}, "GET", "/1/certificate/15", None, {}),
    ("infomaniak_list_invoices", {"account_id": 7}, "GET", "/1/invoicing/7/invoice/list", None, {}),
    ("infomaniak_get_invoice", {"account_id": 7, "invoice_id": 16}, "GET", "/1/invoicing/7/invoice/16", None, {}),
    (
        "infomaniak_api_call",
        {"method": "PATCH", "endpoint": "/1/custom/thing", "body": {"enabled": False}, "query_params": {"lang": "fr"}},
        "PATCH",
        "/1/custom/thing",
        {"enabled": False},
        {"lang": "fr"},
    ),
]


def test_every_catalog_entry_has_a_route_case():
    assert {case[0] for case in ROUTES} == set(TOOL_REGISTRY)


@pytest.mark.asyncio
@pytest.mark.parametrize("tool,arguments,method,raw_path,body,params", ROUTES, ids=[case[0] for case in ROUTES])
async def test_tool_issues_exactly_one_request(api_client, transport, tool, arguments, method, raw_path, body, params):
    dispatcher = ToolDispatcher(api_client)
    result = await dispatcher.dispatch(tool, arguments)

    assert "isError" not in result, result
    assert len(transport.requests) == 1
    request = transport.requests[0]
    assert request.method == method
    assert request.url.raw_path.split(b"?")[0] == raw_path.encode()
    assert dict(request.url.params) == params
    if body is None:
        assert request.content == b""
    else:
        assert json.loads(request.content) == body
