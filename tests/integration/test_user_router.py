"""Integration tests for user, regulator and company endpoints."""


async def _create_user(client, headers, email, **extra):
    return await client.post("/users", json={"email": email, **extra}, headers=headers)


class TestUserEndpoints:
    async def test_create_user(self, client, super_admin_headers):
        resp = await _create_user(client, super_admin_headers, "Issuer@Example.com", name="Issuer")
        assert resp.status_code == 201
        data = resp.json()
        assert data["email"] == "issuer@example.com"
        assert data["role"] == "company_admin"
        assert data["is_active"] is True

    async def test_invalid_email(self, client, super_admin_headers):
        resp = await _create_user(client, super_admin_headers, "not-an-email")
        assert resp.status_code == 422

    async def test_duplicate_email(self, client, super_admin_headers):
        await _create_user(client, super_admin_headers, "a@example.com")
        resp = await _create_user(client, super_admin_headers, "a@example.com")
        assert resp.status_code == 409

    async def test_company_admin_cannot_create(self, client, company_admin_headers):
        resp = await _create_user(client, company_admin_headers, "a@example.com")
        assert resp.status_code == 403

    async def test_get_user(self, client, super_admin_headers, regulator_headers):
        user_id = (await _create_user(client, super_admin_headers, "a@example.com")).json()["id"]
        resp = await client.get(f"/users/{user_id}", headers=regulator_headers)
        assert resp.status_code == 200
        assert resp.json()["id"] == user_id

    async def test_get_user_not_found(self, client, super_admin_headers):
        resp = await client.get("/users/missing", headers=super_admin_headers)
        assert resp.status_code == 404

    async def test_promote_and_demote(self, client, super_admin_headers):
        user_id = (await _create_user(client, super_admin_headers, "a@example.com")).json()["id"]
        resp = await client.post(
            "/regulators/promote", json={"user_id": user_id}, headers=super_admin_headers,
        )
        assert resp.status_code == 200
        assert resp.json()["role"] == "regulator_admin"

        resp = await client.post(
            "/regulators/demote", json={"user_id": user_id}, headers=super_admin_headers,
        )
        assert resp.json()["role"] == "company_admin"

    async def test_regulator_cannot_promote(self, client, super_admin_headers, regulator_headers):
        user_id = (await _create_user(client, super_admin_headers, "a@example.com")).json()["id"]
        resp = await client.post(
            "/regulators/promote", json={"user_id": user_id}, headers=regulator_headers,
        )
        assert resp.status_code == 403

    async def test_grouped(self, client, super_admin_headers):
        company = (await client.post(
            "/companies", json={"name": "Acme"}, headers=super_admin_headers,
        )).json()
        await _create_user(client, super_admin_headers, "co@example.com", company_id=company["id"])
        await _create_user(client, super_admin_headers, "reg@example.com", role="regulator_admin")
        resp = await client.get("/users/grouped", headers=super_admin_headers)
        assert resp.status_code == 200
        data = resp.json()
        assert [u["email"] for u in data["regulator_admins"]] == ["reg@example.com"]
        assert data["regulator_admins"][0]["is_regulator"] is True
        assert data["company_admins"][0]["company"]["name"] == "Acme"


class TestCompanyEndpoints:
    async def test_create_and_get(self, client, super_admin_headers):
        resp = await client.post("/companies", json={
            "name": "Acme", "contact_email": "info@acme.test", "metadata": {"tier": "gold"},
        }, headers=super_admin_headers)
        assert resp.status_code == 201
        company = resp.json()
        assert company["metadata"] == {"tier": "gold"}

        resp = await client.get(f"/companies/{company['id']}", headers=super_admin_headers)
        assert resp.status_code == 200
        assert resp.json()["name"] == "Acme"

    async def test_list(self, client, super_admin_headers, regulator_headers):
        await client.post("/companies", json={"name": "Acme"}, headers=super_admin_headers)
        await client.post("/companies", json={"name": "Globex"}, headers=super_admin_headers)
        resp = await client.get("/companies", params={"q": "glo"}, headers=regulator_headers)
        assert resp.status_code == 200
        assert [c["name"] for c in resp.json()] == ["Globex"]

    async def test_not_found(self, client, super_admin_headers):
        resp = await client.get("/companies/missing", headers=super_admin_headers)
        assert resp.status_code == 404

    async def test_company_admin_cannot_create(self, client, company_admin_headers):
        resp = await client.post("/companies", json={"name": "Acme"}, headers=company_admin_headers)
        assert resp.status_code == 403
