"""
Tests for the /providers and /models routes.
"""

from unittest.mock import AsyncMock, patch

AZURE = {
    "name": "Azure East",
    "type": "azure",
    "endpoint": "https://east.openai.azure.com/",
    "apiKey": "secret",
}


def _create_provider(client, payload=None):
    response = client.post("/providers", json=payload or AZURE)
    assert response.status_code == 201, response.text
    return response.json()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_create_provider_camel_case(client):
    provider = _create_provider(client)

    assert provider["apiKey"] == "secret"
    assert provider["isActive"] is True
    assert provider["createdAt"] == provider["updatedAt"]
    assert "api_key" not in provider


def test_create_provider_validation(client):
    response = client.post("/providers", json={"name": "Azure", "type": "azure"})

    assert response.status_code == 422
    assert response.json()["detail"] == (
        "endpoint is required for azure providers; api_key is required for azure providers"
    )


def test_create_provider_unknown_type(client):
    response = client.post("/providers", json={"name": "X", "type": "bedrock"})

    assert response.status_code == 422
    assert isinstance(response.json()["detail"], str)


def test_provider_crud(client):
    provider = _create_provider(client)
    provider_id = provider["id"]

    assert [p["id"] for p in client.get("/providers").json()] == [provider_id]

    fetched = client.get(f"/providers/{provider_id}").json()
    assert fetched["models"] == []

    updated = client.put(f"/providers/{provider_id}", json={
        "name": "Local", "type": "ollama", "endpoint": "http://localhost:11434", "isActive": False,
    })
    assert updated.status_code == 200
    assert updated.json()["type"] == "ollama"
    assert updated.json()["apiKey"] is None
    assert client.get("/providers", params={"isActive": "false"}).json()[0]["id"] == provider_id

    assert client.delete(f"/providers/{provider_id}").status_code == 204
    assert client.get(f"/providers/{provider_id}").status_code == 404
    assert client.delete(f"/providers/{provider_id}").status_code == 404


def test_unknown_provider_is_404(client):
    assert client.get("/providers/missing").status_code == 404
    response = client.put("/providers/missing", json=AZURE)
    assert response.status_code == 404
    assert response.json() == {"detail": "Provider missing not found"}


def test_model_crud(client):
    provider = _create_provider(client)
    created = client.post("/models", json={
        "providerId": provider["id"],
        "name": "gpt-4o",
        "displayName": "GPT-4o",
        "parameters": {"deployment_name": "prod-gpt4o", "temperature": 0.2},
    })
    assert created.status_code == 201
    model = created.json()
    assert model["providerId"] == provider["id"]
    assert model["parameters"] == {"deployment_name": "prod-gpt4o", "temperature": 0.2}

    assert [m["id"] for m in client.get("/models", params={"providerId": provider["id"]}).json()] == [
        model["id"]
    ]
    assert client.get("/models", params={"providerId": "other"}).json() == []
    assert [m["id"] for m in client.get(f"/providers/{provider['id']}/models").json()] == [
        model["id"]
    ]
    assert client.get(f"/providers/{provider['id']}").json()["models"][0]["id"] == model["id"]

    updated = client.put(f"/models/{model['id']}", json={
        "providerId": provider["id"], "name": "gpt-4o-mini", "displayName": "Mini",
    })
    assert updated.json()["name"] == "gpt-4o-mini"
    assert updated.json()["parameters"] is None

    assert client.delete(f"/models/{model['id']}").status_code == 204
    assert client.get(f"/models/{model['id']}").status_code == 404


def test_model_requires_existing_provider(client):
    response = client.post("/models", json={
        "providerId": "missing", "name": "m", "displayName": "M",
    })
    assert response.status_code == 422
    assert response.json()["detail"] == "provider missing does not exist"


def test_model_missing_field_is_422(client):
    provider = _create_provider(client)
    response = client.post("/models", json={"providerId": provider["id"], "name": "m"})

    assert response.status_code == 422
    assert "displayName" in response.json()["detail"]


def test_provider_models_listing_unknown_provider(client):
    assert client.get("/providers/missing/models").status_code == 404


def test_validate_provider_connection(client):
    check = AsyncMock(return_value=True)
    with patch("llm_leaderboard.api.routers.providers.validate_provider_connection", check):
        response = client.post("/providers/validate/ollama", json={
            "endpoint": "http://localhost:11434",
        })

    assert response.status_code == 200
    assert response.json() == {"type": "ollama", "valid": True}
    check.assert_awaited_once_with("ollama", "http://localhost:11434", None)


def test_validate_provider_failure_is_400(client):
    check = AsyncMock(return_value=False)
    with patch("llm_leaderboard.api.routers.providers.validate_provider_connection", check):
        response = client.post("/providers/validate/openai", json={"apiKey": "sk-bad"})

    assert response.status_code == 400
    assert response.json() == {"detail": "Connection check failed for openai provider"}
    check.assert_awaited_once_with("openai", None, "sk-bad")


def test_validate_without_inputs_fails(client):
    response = client.post("/providers/validate/huggingface", json={})
    assert response.status_code == 400
    assert "huggingface" in response.json()["detail"]


def test_validate_unknown_type_is_404(client):
    assert client.post("/providers/validate/custom", json={}).status_code == 404


def test_timestamps_are_utc_on_every_read(client):
    provider = _create_provider(client)

    fetched = client.get(f"/providers/{provider['id']}").json()
    listed = client.get("/providers").json()[0]

    assert provider["createdAt"].endswith("+00:00")
    assert fetched["createdAt"] == provider["createdAt"]
    assert fetched["updatedAt"] == provider["updatedAt"]
    assert listed["createdAt"] == provider["createdAt"]
