import json

import httpx
import pytest

from backend.src.models.mcp import GoogleProxyRequest, MCPServerCreate, MCPToolRequest
from backend.src.services.errors import (
    ConfigurationError,
    InvalidRequestError,
    NotFoundError,
    UpstreamError,
)
from backend.src.services.google_proxy import (
    CUSTOM_SEARCH_URL,
    GoogleProxyService,
    get_google_proxy_service,
)
from backend.src.services.interaction_service import InteractionService
from backend.src.services.mcp_service import MCPService, get_mcp_service

ENDPOINT = "https://mcp.test/rpc"


def build(db, make_config, handler=None, **config) -> MCPService:
    transport = httpx.MockTransport(handler) if handler else None
    interactions = InteractionService(db)
    proxy = GoogleProxyService(
        make_config(**config), interactions=interactions, transport=transport
    )
    return MCPService(db, google_proxy=proxy, interactions=interactions, transport=transport)


def server(service, name="Files", endpoint=ENDPOINT):
    return service.create_server("alice", MCPServerCreate(name=name, endpoint=endpoint))


class TestConnect:
    @pytest.mark.asyncio
    async def test_connect_stores_capabilities(self, db, make_config):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, json={"resources": [{"uri": "file://a"}], "tools": [{"name": "read"}]}
            )

        service = build(db, make_config, handler)
        created = server(service)
        assert created.status == "disconnected"

        result = await service.connect("alice", created.id)

        assert result.status == "connected"
        stored = service.get_server("alice", created.id)
        assert stored.tools == [{"name": "read"}]
        assert stored.resources == [{"uri": "file://a"}]
        assert stored.last_connected_at is not None

    @pytest.mark.asyncio
    async def test_non_json_endpoint_gets_sample_capabilities(self, db, make_config):
        service = build(db, make_config, lambda request: httpx.Response(200, text="ok"))
        created = server(service)

        result = await service.connect("alice", created.id)

        assert [tool["name"] for tool in result.tools] == ["sample_tool"]
        assert result.resources[0]["uri"] == f"{ENDPOINT}/resource1"

    @pytest.mark.asyncio
    async def test_non_list_capabilities_are_dropped(self, db, make_config):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200, json={"resources": {"uri": "file://a"}, "tools": "read,write"}
            )

        service = build(db, make_config, handler)
        created = server(service)

        result = await service.connect("alice", created.id)

        assert (result.resources, result.tools) == ([], [])
        stored = service.get_server("alice", created.id)
        assert (stored.resources, stored.tools) == ([], [])

    @pytest.mark.asyncio
    async def test_failed_probe_marks_server_failed(self, db, make_config):
        service = build(db, make_config, lambda request: httpx.Response(503))
        created = server(service)

        with pytest.raises(UpstreamError) as excinfo:
            await service.connect("alice", created.id)

        assert excinfo.value.message == "Connection failed: Server responded with status: 503"
        stored = service.get_server("alice", created.id)
        assert stored.status == "failed"
        assert stored.tools == []

    @pytest.mark.asyncio
    async def test_disconnect_clears_capabilities(self, db, make_config):
        service = build(
            db, make_config, lambda request: httpx.Response(200, json={"tools": [{"name": "x"}]})
        )
        created = server(service)
        await service.connect("alice", created.id)

        result = service.disconnect("alice", created.id)

        assert result.status == "disconnected"
        assert service.get_server("alice", created.id).tools == []

    @pytest.mark.asyncio
    async def test_other_users_server(self, db, make_config):
        service = build(db, make_config)
        created = server(service)

        with pytest.raises(NotFoundError):
            await service.connect("bob", created.id)


class TestExecuteTool:
    @pytest.mark.asyncio
    async def test_live_server_gets_json_rpc_call(self, db, make_config):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                return httpx.Response(200, json={"tools": [{"name": "read"}]})
            calls.append(request)
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": {"text": "hi"}})

        service = build(db, make_config, handler)
        created = server(service)
        await service.connect("alice", created.id)

        result = await service.execute_tool(
            "alice", created.id, MCPToolRequest(tool_name="read", parameters={"path": "a"})
        )

        rpc = json.loads(calls[0].content)
        assert rpc["method"] == "tools/call"
        assert rpc["params"] == {"name": "read", "arguments": {"path": "a"}}
        assert result.result["data"] == {"text": "hi"}
        assert result.result["real_execution"] is True

        logged = InteractionService(db).list_recent("alice")[0]
        assert logged["input"] == "MCP Tool: read on Files"
        assert logged["metadata"]["execution_type"] == "mcp_tool"

    @pytest.mark.asyncio
    async def test_unknown_tool_lists_available(self, db, make_config):
        service = build(
            db, make_config, lambda request: httpx.Response(200, json={"tools": [{"name": "read"}]})
        )
        created = server(service)
        await service.connect("alice", created.id)

        with pytest.raises(InvalidRequestError) as excinfo:
            await service.execute_tool("alice", created.id, MCPToolRequest(tool_name="write"))

        assert "Available tools: read" in excinfo.value.message

    @pytest.mark.asyncio
    async def test_json_rpc_error_is_reported(self, db, make_config):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "GET":
                return httpx.Response(200, json={"tools": [{"name": "read"}]})
            return httpx.Response(200, json={"error": {"code": -32602, "message": "bad args"}})

        service = build(db, make_config, handler)
        created = server(service)
        await service.connect("alice", created.id)

        with pytest.raises(UpstreamError) as excinfo:
            await service.execute_tool("alice", created.id, MCPToolRequest(tool_name="read"))

        assert excinfo.value.message.endswith("MCP server error: bad args")

    @pytest.mark.asyncio
    async def test_disconnected_server_gets_demo_result(self, db, make_config):
        service = build(db, make_config)
        created = server(service, name="Notes", endpoint="demo")

        result = await service.execute_tool(
            "alice", created.id, MCPToolRequest(tool_name="lookup", parameters={"id": 1})
        )

        assert result.result["demo_execution"] is True
        assert result.result["data"]["message"] == "Demo execution of lookup on Notes"

    @pytest.mark.asyncio
    async def test_brave_demo(self, db, make_config):
        service = build(db, make_config)
        created = server(service, name="Brave Search", endpoint="")

        result = await service.execute_tool(
            "alice", created.id, MCPToolRequest(tool_name="search", parameters={"q": "rust"})
        )

        assert result.result["data"]["query"] == "rust"
        assert result.result["data"]["result_count"] == 2

    @pytest.mark.asyncio
    async def test_google_server_goes_through_proxy(self, db, make_config):
        service = build(db, make_config, google_api_key="g-key")
        created = server(service, name="Google Workspace", endpoint="google-mcp-proxy")

        result = await service.execute_tool(
            "alice",
            created.id,
            MCPToolRequest(tool_name="search", parameters={"service": "maps", "address": "SF"}),
        )

        assert result.result["data"]["status"] == "OK"
        assert result.result["server_name"] == "Google Workspace"

    @pytest.mark.asyncio
    async def test_google_server_without_key(self, db, make_config):
        service = build(db, make_config)
        created = server(service, name="Google", endpoint="google-mcp-proxy")

        with pytest.raises(UpstreamError) as excinfo:
            await service.execute_tool("alice", created.id, MCPToolRequest(tool_name="search"))

        assert excinfo.value.message == "Google proxy error: Google API key not configured"


class TestGoogleProxy:
    def proxy(self, db, make_config, handler=None, **config):
        transport = httpx.MockTransport(handler) if handler else None
        return GoogleProxyService(
            make_config(**config), interactions=InteractionService(db), transport=transport
        )

    @pytest.mark.asyncio
    async def test_requires_api_key(self, db, make_config):
        with pytest.raises(ConfigurationError):
            await self.proxy(db, make_config).call("alice", GoogleProxyRequest())

    @pytest.mark.asyncio
    async def test_search_without_engine_returns_demo(self, db, make_config):
        proxy = self.proxy(db, make_config, google_api_key="g-key")

        result = await proxy.call(
            "alice", GoogleProxyRequest(parameters={"query": "solar"})
        )

        assert result.data["items"][0]["title"] == "Search results for: solar"
        logged = InteractionService(db).list_recent("alice")[0]
        assert logged["metadata"]["execution_type"] == "google_mcp_proxy"

    @pytest.mark.asyncio
    async def test_search_with_engine_calls_custom_search(self, db, make_config):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"items": [{"title": "real"}]})

        proxy = self.proxy(
            db, make_config, handler, google_api_key="g-key", google_search_engine_id="cx-1"
        )

        result = await proxy.call("alice", GoogleProxyRequest(parameters={"q": "solar"}))

        assert result.data == {"items": [{"title": "real"}]}
        url = seen[0].url
        assert str(url).startswith(CUSTOM_SEARCH_URL)
        assert url.params["cx"] == "cx-1"
        assert url.params["q"] == "solar"

    @pytest.mark.asyncio
    async def test_unsupported_method(self, db, make_config):
        proxy = self.proxy(db, make_config, google_api_key="g-key")

        with pytest.raises(InvalidRequestError) as excinfo:
            await proxy.call("alice", GoogleProxyRequest(service="calendar", method="delete"))

        assert excinfo.value.message == "Unsupported calendar method: delete"

    @pytest.mark.asyncio
    async def test_calendar_create_event(self, db, make_config):
        proxy = self.proxy(db, make_config, google_api_key="g-key")

        result = await proxy.call(
            "alice",
            GoogleProxyRequest(
                service="calendar", method="create_event", parameters={"summary": "Standup"}
            ),
        )

        assert result.data["summary"] == "Standup"
        assert result.data["status"] == "confirmed"


class TestMCPRoutes:
    def test_server_crud_and_demo_tool(self, client, override, db, make_config):
        override(get_mcp_service, build(db, make_config))

        created = client.post("/api/mcp/servers", json={"name": "Notes", "endpoint": "demo"})
        assert created.status_code == 201
        server_id = created.json()["id"]

        executed = client.post(
            f"/api/mcp/servers/{server_id}/tools/execute",
            json={"tool_name": "lookup", "parameters": {}},
        )
        assert executed.status_code == 200
        assert executed.json()["tool_name"] == "lookup"

        assert client.delete(f"/api/mcp/servers/{server_id}").status_code == 204
        assert client.get(f"/api/mcp/servers/{server_id}").status_code == 404

    def test_google_proxy_route(self, client, override, db, make_config):
        proxy = GoogleProxyService(
            make_config(google_api_key="g-key"), interactions=InteractionService(db)
        )
        override(get_google_proxy_service, proxy)

        response = client.post(
            "/api/google/proxy",
            json={"service": "youtube", "method": "search", "parameters": {"q": "jazz"}},
        )

        assert response.status_code == 200
        assert response.json()["data"]["items"][1]["snippet"]["title"] == "jazz Tutorial"

    def test_google_proxy_unknown_service(self, client, override, db, make_config):
        proxy = GoogleProxyService(
            make_config(google_api_key="g-key"), interactions=InteractionService(db)
        )
        override(get_google_proxy_service, proxy)

        response = client.post("/api/google/proxy", json={"service": "drive"})

        assert response.status_code == 400
        assert response.json()["message"] == "Unsupported service: drive"
