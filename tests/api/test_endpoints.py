"""Tests for the HTTP surface: envelopes, status mapping and actor header."""

from datetime import datetime, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

from fastapi.testclient import TestClient

from dossier_engine.api.deps import (
    get_dossier_service,
    get_graph_service,
    get_merge_service,
    get_person_service,
    get_relationship_service,
)
from dossier_engine.core.exceptions import (
    ConflictError,
    NotFoundError,
    StoreUnavailable,
    ValidationError,
)
from dossier_engine.main import app
from dossier_engine.schemas.dossier import DossierResponse
from dossier_engine.schemas.graph import GraphEdge, GraphNode, GraphResponse
from dossier_engine.schemas.merge import MergeResponse


def make_dossier(**overrides) -> DossierResponse:
    now = datetime.now(timezone.utc)
    values = {
        "id": uuid4(),
        "title": "Harbour contracts",
        "description": None,
        "status": "active",
        "created_by": "investigator-1",
        "created_at": now,
    }
    values.update(overrides)
    return DossierResponse(**values)


class TestAuthentication:
    def test_missing_actor_header_is_rejected(self, test_client: TestClient) -> None:
        app.dependency_overrides[get_dossier_service] = lambda: AsyncMock()

        response = test_client.get("/api/v1/dossiers/")

        assert response.status_code == 401

    def test_actor_is_recorded_as_creator(self, test_client: TestClient, actor_headers) -> None:
        mock_service = AsyncMock()
        mock_service.create_dossier.return_value = make_dossier()
        app.dependency_overrides[get_dossier_service] = lambda: mock_service

        response = test_client.post(
            "/api/v1/dossiers/", json={"title": "Harbour contracts"}, headers=actor_headers
        )

        assert response.status_code == 201
        assert mock_service.create_dossier.await_args.kwargs["created_by"] == "investigator-1"
        body = response.json()
        assert body["status"] is True
        assert body["data"]["dossier"]["title"] == "Harbour contracts"
        assert "request_id" in body["meta"]


class TestErrorMapping:
    def test_merge_of_missing_person_is_404(self, test_client: TestClient, actor_headers) -> None:
        mock_service = AsyncMock()
        mock_service.merge.side_effect = NotFoundError("One or both persons not found")
        app.dependency_overrides[get_merge_service] = lambda: mock_service

        response = test_client.post(
            f"/api/v1/persons/{uuid4()}/merge",
            json={"merged_person_id": str(uuid4())},
            headers=actor_headers,
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "One or both persons not found"

    def test_self_merge_is_400(self, test_client: TestClient, actor_headers) -> None:
        mock_service = AsyncMock()
        mock_service.merge.side_effect = ValidationError("cannot merge a person with itself")
        app.dependency_overrides[get_merge_service] = lambda: mock_service
        person_id = uuid4()

        response = test_client.post(
            f"/api/v1/persons/{person_id}/merge",
            json={"merged_person_id": str(person_id)},
            headers=actor_headers,
        )

        assert response.status_code == 400
        assert response.json()["title"] == "Validation Error"

    def test_duplicate_relationship_is_409(self, test_client: TestClient, actor_headers) -> None:
        mock_service = AsyncMock()
        mock_service.create_relationship.side_effect = ConflictError("This relationship already exists")
        app.dependency_overrides[get_relationship_service] = lambda: mock_service

        response = test_client.post(
            f"/api/v1/dossiers/{uuid4()}/relationships",
            json={
                "person_a_id": str(uuid4()),
                "person_b_id": str(uuid4()),
                "relationship_type": "colleague",
            },
            headers=actor_headers,
        )

        assert response.status_code == 409

    def test_store_outage_is_503(self, test_client: TestClient, actor_headers) -> None:
        mock_service = AsyncMock()
        mock_service.list_dossiers.side_effect = StoreUnavailable("Relational store unavailable")
        app.dependency_overrides[get_dossier_service] = lambda: mock_service

        response = test_client.get("/api/v1/dossiers/", headers=actor_headers)

        assert response.status_code == 503

    def test_unknown_dossier_is_404(self, test_client: TestClient, actor_headers) -> None:
        mock_service = AsyncMock()
        mock_service.get_dossier.return_value = None
        app.dependency_overrides[get_dossier_service] = lambda: mock_service

        response = test_client.get(f"/api/v1/dossiers/{uuid4()}", headers=actor_headers)

        assert response.status_code == 404

    def test_malformed_person_id_is_422(self, test_client: TestClient, actor_headers) -> None:
        app.dependency_overrides[get_person_service] = lambda: AsyncMock()

        response = test_client.get("/api/v1/persons/not-a-uuid", headers=actor_headers)

        assert response.status_code == 422


class TestMergeAndGraph:
    def test_merge_passes_actor_and_reason(self, test_client: TestClient, actor_headers) -> None:
        primary_id, merged_id = uuid4(), uuid4()
        mock_service = AsyncMock()
        mock_service.merge.return_value = MergeResponse(
            primary_person_id=primary_id, merged_person_id=merged_id
        )
        app.dependency_overrides[get_merge_service] = lambda: mock_service

        response = test_client.post(
            f"/api/v1/persons/{primary_id}/merge",
            json={"merged_person_id": str(merged_id), "reason": "Same passport"},
            headers=actor_headers,
        )

        assert response.status_code == 200
        mock_service.merge.assert_awaited_once_with(
            primary_person_id=primary_id,
            merged_person_id=merged_id,
            reason="Same passport",
            actor="investigator-1",
        )
        assert response.json()["data"]["success"] is True

    def test_graph_edges_use_from_key(self, test_client: TestClient, actor_headers) -> None:
        a, b = uuid4(), uuid4()
        mock_service = AsyncMock()
        mock_service.build_graph.return_value = GraphResponse(
            nodes=[
                GraphNode(id=a, name="Robert Keane", confidence_score=0.9),
                GraphNode(id=b, name="Carla Dunn", confidence_score=0.6),
            ],
            edges=[
                GraphEdge(
                    id=uuid4(),
                    from_=a,
                    to=b,
                    relationship_type="colleague",
                    confidence_score=0.5,
                )
            ],
        )
        app.dependency_overrides[get_graph_service] = lambda: mock_service
        dossier_id = uuid4()

        response = test_client.get(
            f"/api/v1/dossiers/{dossier_id}/relationship-graph",
            params={"focus": str(a)},
            headers=actor_headers,
        )

        assert response.status_code == 200
        mock_service.build_graph.assert_awaited_once_with(dossier_id, focus=a)
        edge = response.json()["data"]["edges"][0]
        assert edge["from"] == str(a)
        assert edge["to"] == str(b)
        assert "from_" not in edge


class TestRoot:
    def test_root(self, test_client: TestClient) -> None:
        response = test_client.get("/")

        assert response.status_code == 200
        assert response.json()["message"] == "Server is running"

    def test_correlation_id_is_echoed(self, test_client: TestClient) -> None:
        response = test_client.get("/", headers={"X-Correlation-ID": "trace-42"})

        assert response.headers["X-Correlation-ID"] == "trace-42"
