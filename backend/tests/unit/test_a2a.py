import httpx
import pytest

from backend.src.models.a2a import A2AMessageCreate, A2AWorkflowCreate
from backend.src.models.agent import AgentCreate
from backend.src.services.a2a_service import A2A_MAX_TOKENS, A2AService, get_a2a_service
from backend.src.services.agent_service import AgentService
from backend.src.services.completion_client import CompletionClient
from backend.src.services.errors import (
    ConfigurationError,
    InvalidRequestError,
    NotFoundError,
    UpstreamError,
)
from backend.src.services.interaction_service import InteractionService


def build(db, config, recorder, api_handler=None) -> A2AService:
    agents = AgentService(
        db,
        config=config,
        completion_client=CompletionClient(config, transport=httpx.MockTransport(recorder)),
    )
    transport = httpx.MockTransport(api_handler) if api_handler else None
    return A2AService(db, agent_service=agents, transport=transport)


def agent(service: A2AService, name: str, framework: str = "llamaindex") -> str:
    created = service.agents.create_agent(
        "alice", AgentCreate(name=name, description="testing", framework=framework)
    )
    return created.agent.id


class TestMessages:
    @pytest.mark.asyncio
    async def test_llamaindex_receiver_replies(self, db, make_config, recorder):
        service = build(db, make_config(), recorder)
        alpha, beta = agent(service, "Alpha"), agent(service, "Beta")

        result = await service.send_message(
            "alice",
            A2AMessageCreate(sender_agent_id=alpha, receiver_agent_id=beta, content="status?"),
        )

        assert result.response == 'LlamaIndex A2A Response from Beta: Processing message "status?" from Alpha'
        messages = {m.id: m for m in service.list_messages("alice")}
        original = messages[result.message_id]
        reply = messages[result.response_message_id]
        assert original.status == "completed"
        assert original.message_type == "direct"
        assert (reply.sender_agent_id, reply.receiver_agent_id) == (beta, alpha)
        assert reply.message_type == "response"

        logged = InteractionService(db).list_recent("alice")[0]
        assert logged["input"] == "A2A message from Alpha: status?"
        assert logged["metadata"]["a2a_communication"] is True

    @pytest.mark.asyncio
    async def test_openai_receiver_uses_receiver_prompt(
        self, db, make_config, recorder, completion
    ):
        recorder.queue(completion("All good"))
        service = build(db, make_config(openai_api_key="sk-test"), recorder)
        alpha = agent(service, "Alpha", "openai")
        beta = agent(service, "Beta", "openai")

        result = await service.send_message(
            "alice",
            A2AMessageCreate(sender_agent_id=alpha, receiver_agent_id=beta, content="status?"),
        )

        assert result.response == "All good"
        body = recorder.body()
        assert body["max_tokens"] == A2A_MAX_TOKENS
        assert body["messages"][0]["content"].startswith("You are Beta.")
        assert "(Alpha)" in body["messages"][0]["content"]
        assert body["messages"][1]["content"] == "status?"

    @pytest.mark.asyncio
    async def test_missing_provider_marks_message_failed(self, db, make_config, recorder):
        service = build(db, make_config(), recorder)
        alpha = agent(service, "Alpha", "langchain")
        beta = agent(service, "Beta", "langchain")

        with pytest.raises(ConfigurationError):
            await service.send_message(
                "alice",
                A2AMessageCreate(sender_agent_id=alpha, receiver_agent_id=beta, content="hi"),
            )

        [message] = service.list_messages("alice")
        assert message.status == "failed"

    @pytest.mark.asyncio
    async def test_non_json_reply_marks_message_failed(self, db, make_config, recorder):
        recorder.queue(
            httpx.Response(200, text="<html>oops</html>", headers={"content-type": "text/html"})
        )
        service = build(db, make_config(openai_api_key="sk-test"), recorder)
        alpha = agent(service, "Alpha", "openai")
        beta = agent(service, "Beta", "openai")

        with pytest.raises(UpstreamError):
            await service.send_message(
                "alice",
                A2AMessageCreate(sender_agent_id=alpha, receiver_agent_id=beta, content="hi"),
            )

        assert [m.status for m in service.list_messages("alice")] == ["failed"]

    @pytest.mark.asyncio
    async def test_unknown_receiver(self, db, make_config, recorder):
        service = build(db, make_config(), recorder)
        alpha = agent(service, "Alpha")

        with pytest.raises(NotFoundError) as excinfo:
            await service.send_message(
                "alice",
                A2AMessageCreate(sender_agent_id=alpha, receiver_agent_id="nope", content="hi"),
            )

        assert excinfo.value.message == "Receiver agent not found"
        assert service.list_messages("alice") == []


class TestWorkflows:
    @pytest.mark.asyncio
    async def test_steps_run_in_order_and_errors_are_captured(self, db, make_config, recorder):
        def api(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"echo": request.method})

        service = build(db, make_config(), recorder, api)
        alpha, beta = agent(service, "Alpha"), agent(service, "Beta")
        workflow = service.create_workflow(
            "alice",
            A2AWorkflowCreate(
                name="Daily sync",
                agent_ids=[alpha, beta],
                steps=[
                    {
                        "action": "send_message",
                        "sender_agent_id": alpha,
                        "receiver_agent_id": beta,
                        "content": "report",
                    },
                    {"action": "process_data", "data_source": "sales"},
                    {"action": "external_api", "url": "https://api.test/x", "method": "post"},
                    {"action": "external_api", "url": "https://api.test/x"},
                    {"action": "send_message", "sender_agent_id": alpha, "receiver_agent_id": "gone"},
                    {"action": "teleport"},
                ],
            ),
        )

        run = await service.execute_workflow("alice", workflow.id)

        assert run.workflow_name == "Daily sync"
        assert run.steps_executed == 5
        assert [r["step"] for r in run.results] == [1, 2, 3, 5, 6]
        assert run.results[0]["success"] is True
        assert run.results[0]["response"].startswith("LlamaIndex A2A Response from Beta")
        assert run.results[1]["processed"] is True
        assert run.results[2]["response"] == {"echo": "POST"}
        assert run.results[2]["status"] == 200
        assert run.results[3] == {
            "step": 5,
            "action": "send_message",
            "success": False,
            "error": "Receiver agent not found",
        }
        assert run.results[4]["error"] == "Unknown action type"

        workflow_messages = [m for m in service.list_messages("alice") if m.workflow_id]
        assert [m.message_type for m in workflow_messages] == ["workflow"]

    @pytest.mark.asyncio
    async def test_bad_delay_and_bad_reply_fail_only_their_steps(
        self, db, make_config, recorder
    ):
        recorder.queue(
            httpx.Response(200, text="<html>oops</html>", headers={"content-type": "text/html"})
        )
        service = build(db, make_config(openai_api_key="sk-test"), recorder)
        alpha, beta = agent(service, "Alpha"), agent(service, "Beta", "openai")
        workflow = service.create_workflow(
            "alice",
            A2AWorkflowCreate(
                name="Fragile",
                steps=[
                    {
                        "action": "send_message",
                        "sender_agent_id": alpha,
                        "receiver_agent_id": beta,
                        "content": "first",
                        "delay_ms": "soon",
                    },
                    {
                        "action": "send_message",
                        "sender_agent_id": alpha,
                        "receiver_agent_id": beta,
                        "content": "second",
                    },
                    {"action": "process_data", "data_source": "sales"},
                ],
            ),
        )

        run = await service.execute_workflow("alice", workflow.id)

        assert run.steps_executed == 3
        assert [r["success"] for r in run.results] == [False, False, True]
        assert run.results[0]["error"] == "Invalid delay_ms: 'soon'"
        assert run.results[1]["error"] == "Invalid completion response: body is not JSON"
        assert [m.status for m in service.list_messages("alice")] == ["failed"]

    @pytest.mark.asyncio
    async def test_inactive_workflow_is_rejected(self, db, make_config, recorder):
        service = build(db, make_config(), recorder)
        workflow = service.create_workflow(
            "alice", A2AWorkflowCreate(name="Paused", is_active=False)
        )

        with pytest.raises(InvalidRequestError):
            await service.execute_workflow("alice", workflow.id)

    def test_workflow_owned_by_other_user(self, db, make_config, recorder):
        service = build(db, make_config(), recorder)
        workflow = service.create_workflow("alice", A2AWorkflowCreate(name="Mine"))

        with pytest.raises(NotFoundError) as excinfo:
            service.get_workflow("bob", workflow.id)

        assert excinfo.value.message == "Workflow not found or access denied"


class TestA2ARoutes:
    def test_send_message_and_list(self, client, override, db, make_config, recorder):
        service = build(db, make_config(), recorder)
        override(get_a2a_service, service)
        alpha, beta = agent(service, "Alpha"), agent(service, "Beta")

        sent = client.post(
            "/api/a2a/messages",
            json={"sender_agent_id": alpha, "receiver_agent_id": beta, "content": "hello"},
        )

        assert sent.status_code == 200
        assert sent.json()["success"] is True
        assert len(client.get("/api/a2a/messages").json()) == 2

    def test_workflow_crud_and_execute(self, client, override, db, make_config, recorder):
        service = build(db, make_config(), recorder)
        override(get_a2a_service, service)

        created = client.post(
            "/api/a2a/workflows",
            json={"name": "Data", "steps": [{"action": "process_data", "data_source": "crm"}]},
        )
        assert created.status_code == 201
        workflow_id = created.json()["id"]

        run = client.post(f"/api/a2a/workflows/{workflow_id}/execute")
        assert run.status_code == 200
        assert run.json()["steps_executed"] == 1

        assert client.delete(f"/api/a2a/workflows/{workflow_id}").status_code == 204
        assert client.get(f"/api/a2a/workflows/{workflow_id}").status_code == 404
