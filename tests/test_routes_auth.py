from conftest import PASSWORD


class TestRegister:
    def test_creates_user_and_default_list(self, anon_client):
        resp = anon_client.post("/api/auth/register", json={"username": "carol", "password": "hunter22"})
        assert resp.status_code == 201
        data = resp.json()
        assert data["user"]["username"] == "carol"

        lists = anon_client.get("/api/lists", headers={"Authorization": f"Bearer {data['token']}"}).json()
        assert [(lst["name"], lst["is_default"]) for lst in lists] == [("My Day", True)]

    def test_duplicate_username(self, anon_client, alice):
        resp = anon_client.post("/api/auth/register", json={"username": "alice", "password": "hunter22"})
        assert resp.status_code == 409

    def test_short_password(self, anon_client):
        resp = anon_client.post("/api/auth/register", json={"username": "carol", "password": "123"})
        assert resp.status_code == 422


class TestLogin:
    def test_returns_token(self, anon_client, alice):
        resp = anon_client.post("/api/auth/login", json={"username": "alice", "password": PASSWORD})
        assert resp.status_code == 200
        token = resp.json()["token"]
        me = anon_client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.json()["id"] == alice.id

    def test_wrong_password(self, anon_client, alice):
        resp = anon_client.post("/api/auth/login", json={"username": "alice", "password": "wrong-one"})
        assert resp.status_code == 401

    def test_unknown_user(self, anon_client):
        resp = anon_client.post("/api/auth/login", json={"username": "nobody", "password": "whatever"})
        assert resp.status_code == 401


class TestMe:
    def test_returns_user(self, client, alice):
        data = client.get("/api/auth/me").json()
        assert data == {"id": alice.id, "username": "alice", "created_at": data["created_at"]}

    def test_requires_token(self, anon_client):
        assert anon_client.get("/api/auth/me").status_code == 401


def test_health(anon_client):
    assert anon_client.get("/api/health").json() == {"ok": True}
