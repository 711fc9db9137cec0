import pytest
from fastapi.testclient import TestClient

from task_api.main import create_app
from task_api.repositories import InMemoryRepository
from task_api.schemas import TaskCreate
from task_api.settings import Settings

BASE = "/api/v1/tasks"
HEADER = "X-User-Id"


def make_settings(**overrides) -> Settings:
    values = dict(
        cors_allow_origins=["*"],
        enable_basic_auth=False,
        basic_auth_username=None,
        basic_auth_password=None,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def repo():
    return InMemoryRepository()


@pytest.fixture()
def client(repo):
    return TestClient(create_app(make_settings(), repo))


def as_user(user_id):
    return {HEADER: user_id}


def create_task_payload(title="Test Task", description="Do something", status=None):
    payload = {"title": title, "description": description}
    if status is not None:
        payload["status"] = status
    return payload


def create(client, user="u1", **kwargs):
    res = client.post(f"{BASE}/", json=create_task_payload(**kwargs), headers=as_user(user))
    assert res.status_code == 201
    return res.json()


def assert_task_shape(task: dict):
    assert set(task) == {"id", "status", "title", "description", "userId"}
    assert isinstance(task["id"], str) and task["id"]
    assert task["status"] in ("TODO", "IN_PROGRESS", "DONE")


class TestHealth:
    def test_health_check(self, client):
        res = client.get("/")
        assert res.status_code == 200
        assert res.json() == {"message": "Healthy", "backend": "memory"}

    def test_health_does_not_reveal_tasks(self, client):
        before = client.get("/").json()
        create(client, user="u1")
        create(client, user="u2")
        assert client.get("/").json() == before


class TestTasksCRUD:
    def test_create_task_defaults_status(self, client):
        task = create(client, title="Buy milk", description="2 litres")
        assert_task_shape(task)
        assert task["title"] == "Buy milk"
        assert task["description"] == "2 litres"
        assert task["status"] == "TODO"
        assert task["userId"] == "u1"

    def test_create_task_null_status_defaults_to_todo(self, client):
        res = client.post(
            f"{BASE}/", json={"title": "x", "description": "y", "status": None}, headers=as_user("u1")
        )
        assert res.status_code == 201
        assert res.json()["status"] == "TODO"

    @pytest.mark.parametrize("status", ["IN_PROGRESS", "DONE"])
    def test_create_task_with_status(self, client, status):
        assert create(client, status=status)["status"] == status

    def test_list_tasks_scoped_and_ordered(self, client):
        assert client.get(f"{BASE}/", headers=as_user("u1")).json() == []
        first = create(client, title="Task 1")
        create(client, user="u2", title="Other")
        second = create(client, title="Task 2", status="IN_PROGRESS")

        res = client.get(f"{BASE}/", headers=as_user("u1"))
        assert res.status_code == 200
        assert res.json() == [first, second]

    def test_get_task_and_not_found(self, client):
        task = create(client, title="Read book")
        res_get = client.get(f"{BASE}/{task['id']}", headers=as_user("u1"))
        assert res_get.status_code == 200
        assert res_get.json() == task

        res_404 = client.get(f"{BASE}/999999", headers=as_user("u1"))
        assert res_404.status_code == 404
        assert res_404.json()["detail"] == 'Task with ID "999999" not found'

    def test_put_merges_fields(self, client):
        task = create(client, title="Initial", description="A")
        res_put = client.put(f"{BASE}/{task['id']}", json={"status": "DONE"}, headers=as_user("u1"))
        assert res_put.status_code == 200
        assert res_put.json() == {**task, "status": "DONE"}

    def test_patch_partial_update(self, client):
        task = create(client, title="Partial", description="X")
        res_patch = client.patch(
            f"{BASE}/{task['id']}",
            json={"title": "Partial Updated", "status": "IN_PROGRESS"},
            headers=as_user("u1"),
        )
        assert res_patch.status_code == 200
        patched = res_patch.json()
        assert patched["title"] == "Partial Updated"
        assert patched["status"] == "IN_PROGRESS"
        assert patched["description"] == "X"

    def test_empty_update_returns_unchanged(self, client):
        task = create(client)
        res = client.put(f"{BASE}/{task['id']}", json={}, headers=as_user("u1"))
        assert res.status_code == 200
        assert res.json() == task

    def test_update_ignores_identity_fields(self, client):
        task = create(client)
        res = client.patch(
            f"{BASE}/{task['id']}",
            json={"id": "hijack", "userId": "u2", "title": "Renamed"},
            headers=as_user("u1"),
        )
        assert res.status_code == 200
        assert res.json() == {**task, "title": "Renamed"}
        assert client.get(f"{BASE}/", headers=as_user("u2")).json() == []

    def test_update_not_found(self, client):
        res = client.put(f"{BASE}/424242", json={"title": "Nope"}, headers=as_user("u1"))
        assert res.status_code == 404
        assert res.json()["detail"] == 'Task with ID "424242" not found'

    def test_delete_task(self, client):
        task = create(client, title="ToDelete")
        res_del = client.delete(f"{BASE}/{task['id']}", headers=as_user("u1"))
        assert res_del.status_code == 204
        assert res_del.text == ""

        assert client.get(f"{BASE}/{task['id']}", headers=as_user("u1")).status_code == 404
        res_del_again = client.delete(f"{BASE}/{task['id']}", headers=as_user("u1"))
        assert res_del_again.status_code == 404
        assert client.get(f"{BASE}/", headers=as_user("u1")).json() == []


class TestOwnership:
    @pytest.mark.parametrize(
        "method, body",
        [("get", None), ("put", {"title": "x"}), ("patch", {"title": "x"}), ("delete", None)],
    )
    def test_foreign_task_is_not_found(self, client, method, body):
        task = create(client, user="u1")
        kwargs = {"headers": as_user("u2")}
        if body is not None:
            kwargs["json"] = body
        res = getattr(client, method)(f"{BASE}/{task['id']}", **kwargs)
        assert res.status_code == 404
        assert res.json()["detail"] == f'Task with ID "{task["id"]}" not found'
        # Untouched for the owner
        assert client.get(f"{BASE}/{task['id']}", headers=as_user("u1")).json() == task

    def test_default_owner_when_header_missing(self, client):
        res = client.post(f"{BASE}/", json=create_task_payload())
        assert res.status_code == 201
        assert res.json()["userId"] == "anonymous"
        assert len(client.get(f"{BASE}/").json()) == 1
        assert client.get(f"{BASE}/", headers=as_user("u1")).json() == []

    def test_empty_header_is_its_own_owner(self, client):
        task = create(client, user="")
        assert task["userId"] == ""
        assert client.get(f"{BASE}/", headers=as_user("")).json() == [task]
        assert client.get(f"{BASE}/").json() == []

    def test_custom_header_and_default(self, repo):
        settings = make_settings(user_id_header="X-Owner", default_user_id="guest")
        client = TestClient(create_app(settings, repo))
        created = client.post(f"{BASE}/", json=create_task_payload(), headers={"X-Owner": "alice"}).json()
        assert created["userId"] == "alice"
        assert repo.list("alice")[0]["id"] == created["id"]
        anon = client.post(f"{BASE}/", json=create_task_payload(), headers=as_user("bob")).json()
        assert anon["userId"] == "guest"


class TestValidationErrors:
    def assert_validation_error(self, res, field):
        assert res.status_code == 400
        body = res.json()
        assert body.get("error") == "ValidationError"
        assert body.get("message") == "Request validation failed"
        assert isinstance(body.get("detail"), list)
        assert any(field in err["loc"] for err in body["detail"])

    def test_missing_title(self, client):
        res = client.post(f"{BASE}/", json={"description": "x"})
        self.assert_validation_error(res, "title")

    def test_blank_title(self, client):
        res = client.post(f"{BASE}/", json={"title": "  ", "description": "x"})
        self.assert_validation_error(res, "title")

    def test_missing_description(self, client):
        res = client.post(f"{BASE}/", json={"title": "x"})
        self.assert_validation_error(res, "description")

    def test_invalid_status(self, client):
        res = client.post(f"{BASE}/", json={"title": "x", "description": "y", "status": "INVALID"})
        self.assert_validation_error(res, "status")

    def test_null_field_on_update(self, client):
        task = create(client)
        res = client.patch(f"{BASE}/{task['id']}", json={"title": None}, headers=as_user("u1"))
        self.assert_validation_error(res, "title")
        assert client.get(f"{BASE}/{task['id']}", headers=as_user("u1")).json() == task

    def test_invalid_status_on_update(self, client):
        task = create(client)
        res = client.put(f"{BASE}/{task['id']}", json={"status": "done"}, headers=as_user("u1"))
        self.assert_validation_error(res, "status")

    def test_title_length_checked_after_strip(self, client):
        res = client.post(
            f"{BASE}/", json={"title": " " + "a" * 200 + "  ", "description": "y"}, headers=as_user("u1")
        )
        assert res.status_code == 201
        task = res.json()
        assert task["title"] == "a" * 200

        res_patch = client.patch(
            f"{BASE}/{task['id']}", json={"title": "\t" + "b" * 200 + " "}, headers=as_user("u1")
        )
        assert res_patch.status_code == 200
        assert res_patch.json()["title"] == "b" * 200

    def test_title_too_long(self, client):
        res = client.post(f"{BASE}/", json={"title": "a" * 201, "description": "y"})
        self.assert_validation_error(res, "title")
        task = create(client)
        res_patch = client.patch(f"{BASE}/{task['id']}", json={"title": " " + "a" * 201}, headers=as_user("u1"))
        self.assert_validation_error(res_patch, "title")


class TestBasicAuth:
    @pytest.fixture()
    def auth_client(self, repo):
        settings = make_settings(enable_basic_auth=True, basic_auth_username="admin", basic_auth_password="secret")
        return TestClient(create_app(settings, repo))

    def test_missing_credentials(self, auth_client):
        res = auth_client.get(f"{BASE}/")
        assert res.status_code == 401
        assert res.headers["www-authenticate"] == "Basic"

    def test_wrong_credentials(self, auth_client):
        res = auth_client.get(f"{BASE}/", auth=("admin", "nope"))
        assert res.status_code == 401
        assert res.json()["detail"] == "Invalid authentication credentials"

    def test_valid_credentials(self, auth_client):
        res = auth_client.get(f"{BASE}/", auth=("admin", "secret"))
        assert res.status_code == 200
        assert res.json() == []

    def test_health_is_open_but_leaks_nothing(self, auth_client, repo):
        repo.create("victim", TaskCreate(title="Secret", description="hidden"))
        res = auth_client.get("/")
        assert res.status_code == 200
        assert res.json() == {"message": "Healthy", "backend": "memory"}

    def test_credentials_do_not_widen_ownership(self, auth_client):
        res = auth_client.post(
            f"{BASE}/", json=create_task_payload(), headers=as_user("u1"), auth=("admin", "secret")
        )
        assert res.status_code == 201
        task_id = res.json()["id"]
        res_other = auth_client.get(f"{BASE}/{task_id}", headers=as_user("u2"), auth=("admin", "secret"))
        assert res_other.status_code == 404
