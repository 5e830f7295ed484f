"""Team administration API."""
from feedplanner.models.profile import GlobalRole
from tests.factories import PASSWORD, agency_setup, create_user


# --- GET /api/v1/users (admin only) ---

async def test_list_users_as_admin(client, db_session):
    setup = await agency_setup(db_session)
    _, headers = setup["admin"]
    resp = await client.get("/api/v1/users", headers=headers)
    assert resp.status_code == 200
    emails = [u["email"] for u in resp.json()["data"]]
    assert emails == sorted(emails)
    assert "casey@client.io" in emails


async def test_list_users_forbidden_for_manager(client, db_session):
    setup = await agency_setup(db_session)
    _, headers = setup["manager"]
    resp = await client.get("/api/v1/users", headers=headers)
    assert resp.status_code == 403


# --- POST /api/v1/users ---

async def test_invite_client_into_workspace(client, db_session):
    setup = await agency_setup(db_session)
    _, admin = setup["admin"]
    resp = await client.post("/api/v1/users", json={
        "email": "New.Client@client.io",
        "password": "welcome-aboard",
        "name": "New Client",
        "workspace_id": str(setup["workspace"].id),
        "workspace_role": "client_viewer",
    }, headers=admin)
    assert resp.status_code == 201
    assert resp.json()["data"]["role"] == "user"

    resp = await client.post("/api/v1/auth/login", json={"email": "new.client@client.io", "password": "welcome-aboard"})
    token = resp.json()["data"]["access_token"]
    resp = await client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.json()["data"]["role"] == "client_viewer"


async def test_invite_duplicate_email(client, db_session):
    setup = await agency_setup(db_session)
    _, admin = setup["admin"]
    resp = await client.post("/api/v1/users", json={
        "email": "casey@client.io", "password": PASSWORD, "name": "Dup",
    }, headers=admin)
    assert resp.status_code == 409


async def test_invite_needs_both_workspace_fields(client, db_session):
    setup = await agency_setup(db_session)
    _, admin = setup["admin"]
    resp = await client.post("/api/v1/users", json={
        "email": "half@client.io", "password": PASSWORD, "name": "Half",
        "workspace_id": str(setup["workspace"].id),
    }, headers=admin)
    assert resp.status_code == 400


# --- PATCH /api/v1/users/{id}/role ---

async def test_promote_to_admin(client, db_session):
    setup = await agency_setup(db_session)
    _, admin = setup["admin"]
    approver, approver_headers = setup["approver"]
    resp = await client.patch(f"/api/v1/users/{approver.id}/role", json={"role": "admin"}, headers=admin)
    assert resp.status_code == 200
    resp = await client.get("/api/v1/auth/me", headers=approver_headers)
    assert resp.json()["data"]["role"] == "admin"


async def test_role_change_creates_missing_profile(client, db_session):
    setup = await agency_setup(db_session)
    _, admin = setup["admin"]
    bare, _ = await create_user(db_session, "Bare", "bare@agency.io", global_role=None)
    resp = await client.patch(f"/api/v1/users/{bare.id}/role", json={"role": GlobalRole.ADMIN.value}, headers=admin)
    assert resp.json()["data"]["role"] == "admin"


async def test_role_change_forbidden_for_client(client, db_session):
    setup = await agency_setup(db_session)
    _, headers = setup["approver"]
    manager, _ = setup["manager"]
    resp = await client.patch(f"/api/v1/users/{manager.id}/role", json={"role": "admin"}, headers=headers)
    assert resp.status_code == 403
