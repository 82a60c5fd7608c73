import httpx
import pytest

from backend.src.models.agent import AgentCreate
from backend.src.models.integration import IntegrationCreate, IntegrationUpdate
from backend.src.models.workflow import WorkflowCreate, WorkflowUpdate
from backend.src.services.agent_service import AgentService
from backend.src.services.completion_client import CompletionClient
from backend.src.services.errors import InvalidRequestError, NotFoundError, UpstreamError
from backend.src.services.integration_service import (
    IntegrationService,
    get_integration_service,
)
from backend.src.services.interaction_service import InteractionService
from backend.src.services.workflow_service import WorkflowService, get_workflow_service


def build(db, config, recorder, api_handler=None) -> WorkflowService:
    agents = AgentService(
        db,
        config=config,
        completion_client=CompletionClient(config, transport=httpx.MockTransport(recorder)),
    )
    transport = httpx.MockTransport(api_handler) if api_handler else None
    return WorkflowService(db, agent_service=agents, transport=transport)


def workflow(service, steps, **fields):
    return service.create_workflow(
        "alice", WorkflowCreate(name="Digest", config={"steps": steps}, **fields)
    )


class TestWorkflowCrud:
    def test_toggle_flips_active(self, db, make_config, recorder):
        service = build(db, make_config(), recorder)
        created = workflow(service, [])

        assert service.toggle_workflow("alice", created.id).active is False
        assert service.toggle_workflow("alice", created.id).active is True

    def test_update_keeps_json_config(self, db, make_config, recorder):
        service = build(db, make_config(), recorder)
        created = workflow(service, [{"type": "notification", "message": "hi"}])

        updated = service.update_workflow(
            "alice", created.id, WorkflowUpdate(trigger_config={"cron": "0 9 * * *"})
        )

        assert updated.trigger_config == {"cron": "0 9 * * *"}
        assert updated.config == {"steps": [{"type": "notification", "message": "hi"}]}

    def test_other_users_workflow_is_hidden(self, db, make_config, recorder):
        service = build(db, make_config(), recorder)
        created = workflow(service, [])

        assert service.list_workflows("bob") == []
        with pytest.raises(NotFoundError):
            service.toggle_workflow("bob", created.id)


class TestExecuteWorkflow:
    @pytest.mark.asyncio
    async def test_mixed_steps(self, db, make_config, recorder, completion):
        recorder.queue(completion("Here is your digest"))

        def api(request: httpx.Request) -> httpx.Response:
            return httpx.Response(201, json={"received": True})

        service = build(db, make_config(openai_api_key="sk-test"), recorder, api)
        agent_id = service.agents.create_agent(
            "alice", AgentCreate(name="Digest bot", description="digests")
        ).agent.id
        created = workflow(
            service,
            [
                {"type": "agent_interaction", "agentId": agent_id, "message": "digest"},
                {"type": "data_processing", "config": {"source": "crm"}},
                {"type": "notification", "message": "Digest ready"},
                {"type": "external_api", "url": "https://hooks.test/in", "method": "POST"},
                {"type": "agent_interaction", "message": "no agent"},
                {"type": "mystery"},
            ],
        )

        result = await service.execute_workflow("alice", created.id)

        assert result.success is True
        assert [(s.step, s.status) for s in result.steps] == [
            (1, "completed"),
            (2, "logged"),
            (3, "logged"),
            (4, "completed"),
            (5, "skipped"),
            (6, "skipped"),
        ]
        assert result.steps[0].detail == "Here is your digest"
        assert result.steps[3].detail == {"status": 201, "response": {"received": True}}

        execution = [
            row
            for row in InteractionService(db).list_recent("alice")
            if row["metadata"].get("execution_type") == "workflow"
        ]
        assert execution[0]["input"] == "Workflow executed: Digest"
        assert execution[0]["metadata"]["trigger_type"] == "manual"

    @pytest.mark.asyncio
    async def test_inactive_workflow_is_rejected(self, db, make_config, recorder):
        service = build(db, make_config(), recorder)
        created = workflow(service, [], active=False)

        with pytest.raises(InvalidRequestError) as excinfo:
            await service.execute_workflow("alice", created.id)

        assert excinfo.value.message == "Workflow is not active"

    @pytest.mark.asyncio
    async def test_agent_failure_aborts_run(self, db, make_config, recorder):
        service = build(db, make_config(), recorder)
        created = workflow(
            service, [{"type": "agent_interaction", "agentId": "missing", "message": "x"}]
        )

        with pytest.raises(UpstreamError) as excinfo:
            await service.execute_workflow("alice", created.id)

        assert excinfo.value.message == "Agent interaction failed: Agent not found"
        assert InteractionService(db).list_recent("alice") == []

    @pytest.mark.asyncio
    async def test_external_api_transport_error(self, db, make_config, recorder):
        def api(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        service = build(db, make_config(), recorder, api)
        created = workflow(
            service, [{"type": "external_api", "url": "https://down.test", "method": "GET"}]
        )

        with pytest.raises(UpstreamError) as excinfo:
            await service.execute_workflow("alice", created.id)

        assert excinfo.value.message.startswith("External API call failed:")


class TestIntegrations:
    def test_crud_and_toggle(self, db):
        service = IntegrationService(db)
        created = service.create_integration(
            "alice", IntegrationCreate(service_name="slack", config={"channel": "#ops"})
        )

        assert created.active is True
        assert service.toggle_integration("alice", created.id).active is False

        updated = service.update_integration(
            "alice", created.id, IntegrationUpdate(config={"channel": "#alerts"})
        )
        assert updated.config == {"channel": "#alerts"}

        service.delete_integration("alice", created.id)
        assert service.list_integrations("alice") == []

    def test_scoped_to_owner(self, db):
        service = IntegrationService(db)
        created = service.create_integration("alice", IntegrationCreate(service_name="notion"))

        with pytest.raises(NotFoundError):
            service.get_integration("bob", created.id)


class TestRoutes:
    def test_workflow_execute_route(self, client, override, db, make_config, recorder):
        override(get_workflow_service, build(db, make_config(), recorder))

        created = client.post(
            "/api/workflows",
            json={"name": "Ping", "config": {"steps": [{"type": "notification", "message": "x"}]}},
        )
        assert created.status_code == 201
        workflow_id = created.json()["id"]

        run = client.post(f"/api/workflows/{workflow_id}/execute")
        assert run.status_code == 200
        assert run.json()["message"] == "Workflow executed successfully"

        client.post(f"/api/workflows/{workflow_id}/toggle")
        inactive = client.post(f"/api/workflows/{workflow_id}/execute")
        assert inactive.status_code == 400

    def test_integration_routes(self, client, override, db):
        override(get_integration_service, IntegrationService(db))

        created = client.post("/api/integrations", json={"service_name": "slack"})
        assert created.status_code == 201
        integration_id = created.json()["id"]

        toggled = client.post(f"/api/integrations/{integration_id}/toggle")
        assert toggled.json()["active"] is False
        assert client.delete(f"/api/integrations/{integration_id}").status_code == 204
