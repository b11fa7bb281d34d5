"""
Tests for error responses: malformed bodies, storage failures, the
not-found mapping and the delete-failure policy.
"""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from customers_api.main import create_app
from customers_api.storage.database import CustomerStorageError


def drop_customers_table(client: TestClient) -> None:
    conn = client.app.state.customer_db._get_connection()
    conn.execute("DROP TABLE customers")
    conn.commit()


class TestMalformedBody:
    def test_unparsable_json_on_create(self, client):
        response = client.post(
            "/customers",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Malformed request body"
        assert response.json()["error"]

    def test_wrong_field_type_on_create(self, client):
        response = client.post("/customers", json={"name": 123})

        assert response.status_code == 400
        assert "name" in response.json()["error"]

    def test_non_object_body_on_create(self, client):
        response = client.post("/customers", json=["Ann"])

        assert response.status_code == 400

    def test_missing_body_on_create(self, client):
        response = client.post("/customers")

        assert response.status_code == 400

    def test_malformed_body_does_not_touch_storage(self, client):
        client.post(
            "/customers",
            content="{",
            headers={"Content-Type": "application/json"},
        )

        assert client.get("/customers").json() == []

    def test_unparsable_json_on_update(self, client, ann):
        client.post("/customers", json=ann)

        response = client.put(
            "/customers/1",
            content="status=inactive",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert client.get("/customers/1").json()["status"] == "active"

    def test_wrong_field_type_on_update(self, client, ann):
        client.post("/customers", json=ann)

        response = client.put("/customers/1", json={"status": ["inactive"]})

        assert response.status_code == 400


class TestStorageFailure:
    def test_create_on_broken_storage(self, client, ann):
        drop_customers_table(client)

        response = client.post("/customers", json=ann)

        assert response.status_code == 500
        assert response.json() == {
            "detail": "Customer storage error",
            "error": "no such table: customers",
        }

    def test_list_on_broken_storage(self, client):
        drop_customers_table(client)

        response = client.get("/customers")

        assert response.status_code == 500
        assert "no such table" in response.json()["error"]

    def test_update_on_broken_storage(self, client, ann):
        client.post("/customers", json=ann)
        drop_customers_table(client)

        response = client.put("/customers/1", json={"status": "x"})

        assert response.status_code == 500

    def test_delete_failure_is_contained_by_default(self, client):
        drop_customers_table(client)

        with patch("customers_api.routers.customers.terminate_process") as terminate:
            response = client.delete("/customers/1")

        assert response.status_code == 500
        assert "no such table" in response.json()["error"]
        terminate.assert_not_called()

    def test_delete_unparsable_id_is_server_error(self, client):
        response = client.delete("/customers/abc")

        assert response.status_code == 500

    @pytest.mark.parametrize("method", ["get", "put", "delete"])
    def test_out_of_range_id_is_json_server_error(self, client, method):
        kwargs = {"json": {"status": "x"}} if method == "put" else {}

        response = client.request(method.upper(), "/customers/99999999999999999999", **kwargs)

        assert response.status_code == 500
        assert response.json()["detail"] == "Customer storage error"
        assert "out of range" in response.json()["error"]

    def test_non_ascii_digit_id_is_server_error(self, client, ann):
        client.post("/customers", json=ann)

        response = client.get("/customers/١")

        assert response.status_code == 500
        assert "invalid customer id" in response.json()["error"]

    def test_storage_handle_missing(self, test_settings):
        """Requests served without a running lifespan have no storage handle."""
        app = create_app(test_settings)
        response = TestClient(app).get("/customers")

        assert response.status_code == 500
        assert response.json()["error"] == "customer database is not initialized"


class TestNotFoundAs404:
    def test_get_missing_customer(self, strict_client):
        response = strict_client.get("/customers/5")

        assert response.status_code == 404
        assert response.json() == {"detail": "Customer not found", "error": "customer 5 not found"}

    def test_update_missing_customer(self, strict_client):
        response = strict_client.put("/customers/5", json={"name": "x"})

        assert response.status_code == 404

    def test_unparsable_id_stays_server_error(self, strict_client):
        response = strict_client.get("/customers/abc")

        assert response.status_code == 500

    def test_existing_customer_unaffected(self, strict_client, ann):
        strict_client.post("/customers", json=ann)

        assert strict_client.get("/customers/1").status_code == 200


class TestFatalDelete:
    def test_delete_failure_terminates_process(self, fatal_delete_client):
        drop_customers_table(fatal_delete_client)

        with patch("customers_api.routers.customers.terminate_process") as terminate:
            fatal_delete_client.delete("/customers/1")

        terminate.assert_called_once_with(1)

    def test_out_of_range_id_terminates_process(self, fatal_delete_client):
        with patch("customers_api.routers.customers.terminate_process") as terminate:
            fatal_delete_client.delete("/customers/99999999999999999999")

        terminate.assert_called_once_with(1)

    def test_successful_delete_does_not_terminate(self, fatal_delete_client, ann):
        fatal_delete_client.post("/customers", json=ann)

        with patch("customers_api.routers.customers.terminate_process") as terminate:
            response = fatal_delete_client.delete("/customers/1")

        assert response.status_code == 200
        terminate.assert_not_called()


def test_startup_fails_without_schema(tmp_path, settings_factory):
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("")
    app = create_app(settings_factory(blocker / "customers.db"))

    with pytest.raises(CustomerStorageError, match="can't create table customers"):
        with TestClient(app):
            pass
