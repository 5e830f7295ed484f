"""Posts API: visibility, editing and the approval workflow end to end."""
import pytest
from sqlalchemy import func, select

from feedplanner.exceptions import PreconditionFailed
from feedplanner.middleware.metrics import transition_count
from feedplanner.models.audit_log import AuditAction, AuditLog
from feedplanner.models.comment import Comment
from feedplanner.models.post import ApprovalStatus, PostStatus
from feedplanner.services import approval_workflow, post_service
from feedplanner.services.role_engine import AccessContext
from feedplanner.services.session_resolver import resolve_identity
from tests.factories import agency_setup, create_account, create_post, create_user, create_workspace


async def _audit_rows(db, post) -> list[AuditLog]:
    result = await db.execute(
        select(AuditLog).where(AuditLog.entity_id == post.id).order_by(AuditLog.created_at)
    )
    return list(result.scalars().all())


class TestListAndGet:
    async def test_client_never_sees_drafts(self, client, db_session):
        setup = await agency_setup(db_session)
        await create_post(db_session, setup["account"], PostStatus.DRAFT, caption="secret draft")
        sent = await create_post(
            db_session, setup["account"], PostStatus.SENT_TO_CLIENT, ApprovalStatus.PENDING
        )
        _, headers = setup["viewer"]

        resp = await client.get("/api/v1/posts", headers=headers)
        assert resp.status_code == 200
        assert [p["id"] for p in resp.json()["data"]] == [str(sent.id)]

    async def test_staff_see_drafts(self, client, db_session):
        setup = await agency_setup(db_session)
        await create_post(db_session, setup["account"], PostStatus.DRAFT)
        for who in ("manager", "admin"):
            _, headers = setup[who]
            resp = await client.get("/api/v1/posts", headers=headers)
            assert resp.json()["pagination"]["total"] == 1

    async def test_invisible_post_is_not_found(self, client, db_session):
        setup = await agency_setup(db_session)
        draft = await create_post(db_session, setup["account"], PostStatus.DRAFT)
        for who in ("viewer", "approver", "outsider"):
            _, headers = setup[who]
            resp = await client.get(f"/api/v1/posts/{draft.id}", headers=headers)
            assert resp.status_code == 404

    async def test_internal_notes_hidden_from_clients(self, client, db_session):
        setup = await agency_setup(db_session)
        post = await create_post(
            db_session, setup["account"], PostStatus.SENT_TO_CLIENT, ApprovalStatus.PENDING,
            internal_notes="client is picky about fonts",
        )
        _, approver_headers = setup["approver"]
        _, manager_headers = setup["manager"]

        resp = await client.get(f"/api/v1/posts/{post.id}", headers=approver_headers)
        assert resp.json()["data"]["internal_notes"] is None
        resp = await client.get(f"/api/v1/posts/{post.id}", headers=manager_headers)
        assert resp.json()["data"]["internal_notes"] == "client is picky about fonts"
        assert resp.json()["data"]["status_label"] == "Awaiting Approval"

    async def test_outsider_gets_empty_list(self, client, db_session):
        setup = await agency_setup(db_session)
        await create_post(db_session, setup["account"], PostStatus.APPROVED, ApprovalStatus.APPROVED)
        _, headers = setup["outsider"]
        resp = await client.get("/api/v1/posts", headers=headers)
        assert resp.json()["data"] == []

    async def test_filter_and_paginate(self, client, db_session):
        setup = await agency_setup(db_session)
        for _ in range(3):
            await create_post(db_session, setup["account"], PostStatus.INTERNAL_REVIEW)
        await create_post(db_session, setup["account"], PostStatus.DRAFT)
        _, headers = setup["admin"]

        resp = await client.get(
            "/api/v1/posts", params={"status": "internal_review", "per_page": 2}, headers=headers
        )
        body = resp.json()
        assert len(body["data"]) == 2
        assert body["pagination"]["total"] == 3
        assert body["pagination"]["has_next"] is True

    async def test_pagination_totals_are_role_scoped(self, client, db_session):
        setup = await agency_setup(db_session)
        other = await create_account(db_session, setup["workspace"], manager_email="else@agency.io")
        for _ in range(3):
            await create_post(db_session, setup["account"], PostStatus.SENT_TO_CLIENT, ApprovalStatus.PENDING)
        await create_post(db_session, setup["account"], PostStatus.DRAFT)
        for _ in range(4):
            await create_post(db_session, other, PostStatus.INTERNAL_REVIEW)

        _, manager_headers = setup["manager"]
        resp = await client.get("/api/v1/posts", params={"per_page": 3}, headers=manager_headers)
        body = resp.json()
        assert len(body["data"]) == 3
        assert body["pagination"]["total"] == 4
        assert body["pagination"]["has_next"] is True

        _, viewer_headers = setup["viewer"]
        resp = await client.get("/api/v1/posts", params={"per_page": 2, "page": 2}, headers=viewer_headers)
        body = resp.json()
        # Clients see every non-draft post in their workspace
        assert body["pagination"]["total"] == 7
        assert len(body["data"]) == 2
        assert all(p["status"] != "draft" for p in body["data"])


    async def test_requires_auth(self, client):
        resp = await client.get("/api/v1/posts")
        assert resp.status_code == 401


class TestCreateAndEdit:
    async def test_manager_creates_draft_on_assigned_account(self, client, db_session):
        setup = await agency_setup(db_session)
        _, headers = setup["manager"]
        resp = await client.post("/api/v1/posts", json={
            "social_account_id": str(setup["account"].id),
            "caption": "Pumpkin spice is back",
            "scheduled_date": "2026-11-03",
            "asset_urls": ["https://cdn.test/p.jpg"],
            "asset_types": ["image"],
        }, headers=headers)
        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["status"] == "draft"
        assert data["approval_status"] is None
        assert data["workspace_id"] == str(setup["workspace"].id)
        assert data["platform"] == "instagram"

    async def test_manager_cannot_use_unassigned_account(self, client, db_session):
        setup = await agency_setup(db_session)
        other = await create_account(db_session, setup["workspace"], manager_email="else@agency.io")
        _, headers = setup["manager"]
        resp = await client.post(
            "/api/v1/posts", json={"social_account_id": str(other.id)}, headers=headers
        )
        assert resp.status_code == 403

    async def test_clients_cannot_create(self, client, db_session):
        setup = await agency_setup(db_session)
        _, headers = setup["approver"]
        resp = await client.post(
            "/api/v1/posts", json={"social_account_id": str(setup["account"].id)}, headers=headers
        )
        assert resp.status_code == 403

    async def test_mismatched_assets_rejected(self, client, db_session):
        setup = await agency_setup(db_session)
        _, headers = setup["manager"]
        resp = await client.post("/api/v1/posts", json={
            "social_account_id": str(setup["account"].id),
            "asset_urls": ["https://cdn.test/a.jpg", "https://cdn.test/b.jpg"],
            "asset_types": ["image"],
        }, headers=headers)
        assert resp.status_code == 422

    async def test_null_for_required_field_rejected(self, client, db_session):
        setup = await agency_setup(db_session)
        post = await create_post(db_session, setup["account"], caption="keep me")
        _, headers = setup["manager"]
        resp = await client.put(f"/api/v1/posts/{post.id}", json={"caption": None}, headers=headers)
        assert resp.status_code == 422
        resp = await client.put(
            f"/api/v1/posts/{post.id}", json={"asset_urls": None, "asset_types": None}, headers=headers
        )
        assert resp.status_code == 422

        resp = await client.put(f"/api/v1/posts/{post.id}", json={"internal_notes": None}, headers=headers)
        assert resp.status_code == 200
        assert resp.json()["data"]["caption"] == "keep me"


    async def test_approved_post_is_locked(self, client, db_session):
        setup = await agency_setup(db_session)
        post = await create_post(db_session, setup["account"], PostStatus.APPROVED, ApprovalStatus.APPROVED)
        _, headers = setup["manager"]
        resp = await client.put(f"/api/v1/posts/{post.id}", json={"caption": "late edit"}, headers=headers)
        assert resp.status_code == 409

    async def test_client_cannot_edit(self, client, db_session):
        setup = await agency_setup(db_session)
        post = await create_post(db_session, setup["account"], PostStatus.SENT_TO_CLIENT, ApprovalStatus.PENDING)
        _, headers = setup["approver"]
        resp = await client.put(f"/api/v1/posts/{post.id}", json={"caption": "mine now"}, headers=headers)
        assert resp.status_code == 403

    async def test_only_admin_deletes(self, client, db_session):
        setup = await agency_setup(db_session)
        post = await create_post(db_session, setup["account"])
        _, manager_headers = setup["manager"]
        _, admin_headers = setup["admin"]
        assert (await client.delete(f"/api/v1/posts/{post.id}", headers=manager_headers)).status_code == 403
        assert (await client.delete(f"/api/v1/posts/{post.id}", headers=admin_headers)).status_code == 200
        assert (await client.get(f"/api/v1/posts/{post.id}", headers=admin_headers)).status_code == 404


class TestApprovalWorkflow:
    async def test_denied_approval_changes_nothing(self, client, db_session):
        setup = await agency_setup(db_session)
        post = await create_post(db_session, setup["account"], PostStatus.SENT_TO_CLIENT, ApprovalStatus.PENDING)
        denied_before = transition_count("approve", "denied")

        _, headers = setup["viewer"]
        resp = await client.post(f"/api/v1/posts/{post.id}/approve", headers=headers)
        assert resp.status_code == 403
        assert resp.json()["type"] == "authorization-denied"

        await db_session.refresh(post)
        assert post.status == PostStatus.SENT_TO_CLIENT
        assert post.approval_status == ApprovalStatus.PENDING
        assert post.approved_by is None
        assert await _audit_rows(db_session, post) == []
        assert transition_count("approve", "denied") == denied_before + 1

    async def test_approval_stamps_post_and_writes_one_audit_row(self, client, db_session):
        setup = await agency_setup(db_session)
        post = await create_post(db_session, setup["account"], PostStatus.SENT_TO_CLIENT, ApprovalStatus.PENDING)
        _, headers = setup["approver"]

        resp = await client.post(f"/api/v1/posts/{post.id}/approve", headers=headers)
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["status"] == "approved"
        assert data["approval_status"] == "approved"
        assert data["approved_by"] == "casey@client.io"
        assert data["approved_at"] is not None

        rows = await _audit_rows(db_session, post)
        assert [r.action for r in rows] == [AuditAction.APPROVED]
        assert rows[0].actor_email == "casey@client.io"
        assert rows[0].workspace_id == setup["workspace"].id

    async def test_second_decision_conflicts(self, client, db_session):
        setup = await agency_setup(db_session)
        post = await create_post(db_session, setup["account"], PostStatus.SENT_TO_CLIENT, ApprovalStatus.PENDING)
        _, headers = setup["approver"]

        assert (await client.post(f"/api/v1/posts/{post.id}/approve", headers=headers)).status_code == 200
        resp = await client.post(
            f"/api/v1/posts/{post.id}/request-changes", json={"reason": "wait"}, headers=headers
        )
        assert resp.status_code == 409
        assert len(await _audit_rows(db_session, post)) == 1

    async def test_manager_cannot_approve_on_clients_behalf(self, client, db_session):
        setup = await agency_setup(db_session)
        post = await create_post(db_session, setup["account"], PostStatus.SENT_TO_CLIENT, ApprovalStatus.PENDING)
        _, headers = setup["manager"]
        resp = await client.post(f"/api/v1/posts/{post.id}/approve", headers=headers)
        assert resp.status_code == 403

    async def test_request_changes_keeps_status_and_comments(self, client, db_session):
        setup = await agency_setup(db_session)
        post = await create_post(db_session, setup["account"], PostStatus.SENT_TO_CLIENT, ApprovalStatus.PENDING)
        _, headers = setup["approver"]

        resp = await client.post(
            f"/api/v1/posts/{post.id}/request-changes", json={"reason": "Brighter photo please"}, headers=headers
        )
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["status"] == "sent_to_client"
        assert data["approval_status"] == "changes_requested"

        comments = (await db_session.execute(select(Comment).where(Comment.post_id == post.id))).scalars().all()
        assert [(c.content, c.is_internal) for c in comments] == [("Changes requested: Brighter photo please", False)]
        rows = await _audit_rows(db_session, post)
        assert [r.action for r in rows] == [AuditAction.REJECTED]
        assert rows[0].details == {"reason": "Brighter photo please"}

    async def test_client_cannot_change_status(self, client, db_session):
        setup = await agency_setup(db_session)
        post = await create_post(db_session, setup["account"], PostStatus.SENT_TO_CLIENT, ApprovalStatus.PENDING)
        _, headers = setup["approver"]
        resp = await client.patch(
            f"/api/v1/posts/{post.id}/status", json={"to_status": "approved"}, headers=headers
        )
        assert resp.status_code == 403

    async def test_full_lifecycle(self, client, db_session):
        setup = await agency_setup(db_session)
        post = await create_post(db_session, setup["account"])
        _, manager = setup["manager"]
        _, approver = setup["approver"]
        url = f"/api/v1/posts/{post.id}"

        resp = await client.patch(f"{url}/status", json={"to_status": "internal_review"}, headers=manager)
        assert resp.json()["data"]["status"] == "internal_review"
        resp = await client.patch(f"{url}/status", json={"to_status": "sent_to_client"}, headers=manager)
        assert resp.json()["data"]["approval_status"] == "pending"

        # A pending post cannot be resubmitted.
        resp = await client.patch(f"{url}/status", json={"to_status": "sent_to_client"}, headers=manager)
        assert resp.status_code == 409

        await client.post(f"{url}/request-changes", json={"reason": "New caption"}, headers=approver)
        resp = await client.get(f"{url}/approval", headers=manager)
        assert resp.json()["data"]["display"] == "changes_requested"
        assert "sent_to_client" in resp.json()["data"]["allowed_status_targets"]

        resp = await client.put(url, json={"caption": "New caption, as asked"}, headers=manager)
        assert resp.status_code == 200
        resp = await client.patch(f"{url}/status", json={"to_status": "sent_to_client"}, headers=manager)
        assert resp.json()["data"]["approval_status"] == "pending"

        resp = await client.get(f"{url}/approval", headers=approver)
        assert resp.json()["data"]["display"] == "controls"
        assert resp.json()["data"]["allowed_status_targets"] == []

        assert (await client.post(f"{url}/approve", headers=approver)).status_code == 200
        resp = await client.post(f"{url}/mark-posted", headers=manager)
        data = resp.json()["data"]
        assert data["status"] == "posted"
        assert data["posted_by"] == "morgan@agency.io"

        resp = await client.get(f"{url}/audit-logs", headers=manager)
        assert [r["action"] for r in resp.json()["data"]] == [
            "status_changed", "status_changed", "rejected", "status_changed", "approved", "posted",
        ]

    async def test_clients_cannot_read_audit_logs(self, client, db_session):
        setup = await agency_setup(db_session)
        post = await create_post(db_session, setup["account"], PostStatus.SENT_TO_CLIENT, ApprovalStatus.PENDING)
        _, headers = setup["approver"]
        resp = await client.get(f"/api/v1/posts/{post.id}/audit-logs", headers=headers)
        assert resp.status_code == 403

    async def test_mark_posted_requires_approval(self, client, db_session):
        setup = await agency_setup(db_session)
        post = await create_post(db_session, setup["account"], PostStatus.INTERNAL_REVIEW)
        _, headers = setup["admin"]
        resp = await client.post(f"/api/v1/posts/{post.id}/mark-posted", headers=headers)
        assert resp.status_code == 409


class TestStaleWrites:
    async def test_outcome_against_changed_post_is_rejected(self, db_session):
        setup = await agency_setup(db_session)
        manager, _ = setup["manager"]
        post = await create_post(db_session, setup["account"], PostStatus.DRAFT)
        access = AccessContext.from_facts(await resolve_identity(db_session, manager.id))

        outcome = approval_workflow.change_status(post, PostStatus.INTERNAL_REVIEW, access)
        post.status = PostStatus.SENT_TO_CLIENT
        post.approval_status = ApprovalStatus.PENDING
        await db_session.commit()

        with pytest.raises(PreconditionFailed):
            await post_service.apply_outcome(db_session, post, outcome)
        await db_session.rollback()
        await db_session.refresh(post)
        assert post.status == PostStatus.SENT_TO_CLIENT
        count = await db_session.scalar(select(func.count()).select_from(AuditLog))
        assert count == 0


class TestAssets:
    async def test_upload_url_layout(self, client, db_session):
        setup = await agency_setup(db_session)
        post = await create_post(db_session, setup["account"])
        _, headers = setup["manager"]
        resp = await client.post(
            f"/api/v1/posts/{post.id}/upload-url",
            json={"filename": "Reel Cut 1.mp4", "content_type": "video/mp4"},
            headers=headers,
        )
        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["storage_path"].startswith(f"{setup['workspace'].id}/{setup['account'].id}/")
        assert data["storage_path"].endswith("-Reel_Cut_1.mp4")
        assert data["asset_type"] == "video"
        assert data["public_url"].endswith(data["storage_path"])

    async def test_add_and_remove_keep_lists_aligned(self, client, db_session):
        setup = await agency_setup(db_session)
        post = await create_post(
            db_session, setup["account"],
            asset_urls=["https://cdn.test/a.jpg"], asset_types=["image"],
        )
        _, headers = setup["manager"]

        resp = await client.post(
            f"/api/v1/posts/{post.id}/assets",
            json={"url": "https://cdn.test/b.mp4", "content_type": "video/mp4"},
            headers=headers,
        )
        data = resp.json()["data"]
        assert data["asset_urls"] == ["https://cdn.test/a.jpg", "https://cdn.test/b.mp4"]
        assert data["asset_types"] == ["image", "video"]

        resp = await client.delete(f"/api/v1/posts/{post.id}/assets/0", headers=headers)
        data = resp.json()["data"]
        assert data["asset_urls"] == ["https://cdn.test/b.mp4"]
        assert data["asset_types"] == ["video"]

        resp = await client.delete(f"/api/v1/posts/{post.id}/assets/5", headers=headers)
        assert resp.status_code == 400

    async def test_reorder_moves_url_and_type_together(self, client, db_session):
        setup = await agency_setup(db_session)
        post = await create_post(
            db_session, setup["account"],
            asset_urls=["https://cdn.test/a.jpg", "https://cdn.test/b.mp4", "https://cdn.test/c.jpg"],
            asset_types=["image", "video", "image"],
        )
        _, headers = setup["manager"]

        resp = await client.patch(
            f"/api/v1/posts/{post.id}/assets/order", json={"from_index": 2, "to_index": 0}, headers=headers
        )
        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["asset_urls"] == ["https://cdn.test/c.jpg", "https://cdn.test/a.jpg", "https://cdn.test/b.mp4"]
        assert data["asset_types"] == ["image", "image", "video"]

        resp = await client.patch(
            f"/api/v1/posts/{post.id}/assets/order", json={"from_index": 0, "to_index": 3}, headers=headers
        )
        assert resp.status_code == 400

        _, approver_headers = setup["approver"]
        resp = await client.patch(
            f"/api/v1/posts/{post.id}/assets/order", json={"from_index": 0, "to_index": 1},
            headers=approver_headers,
        )
        assert resp.status_code == 404


    async def test_clients_cannot_touch_assets(self, client, db_session):
        setup = await agency_setup(db_session)
        post = await create_post(db_session, setup["account"], PostStatus.SENT_TO_CLIENT, ApprovalStatus.PENDING)
        _, headers = setup["approver"]
        resp = await client.post(
            f"/api/v1/posts/{post.id}/assets", json={"url": "https://cdn.test/x.jpg"}, headers=headers
        )
        assert resp.status_code == 403


class TestCrossWorkspace:
    async def test_manager_of_other_workspace_sees_nothing(self, client, db_session):
        setup = await agency_setup(db_session)
        post = await create_post(db_session, setup["account"], PostStatus.INTERNAL_REVIEW)
        other_ws = await create_workspace(db_session, "Globex")
        _, headers = await create_user(db_session, "Riley", "riley@agency.io")
        await create_account(db_session, other_ws, manager_email="riley@agency.io")

        resp = await client.get(f"/api/v1/posts/{post.id}", headers=headers)
        assert resp.status_code == 404
        resp = await client.get("/api/v1/posts", headers=headers)
        assert resp.json()["data"] == []
