"""Visibility filters over workspaces, accounts, posts and comments."""
import uuid
from types import SimpleNamespace

from feedplanner.models.post import PostStatus
from feedplanner.services.visibility import (
    can_view_post,
    filter_accounts,
    filter_comments,
    filter_posts,
    filter_workspaces,
)
from tests.identity_builders import W1, W2, access, account, admin, approver, client_viewer, manager, post


def _workspaces():
    return [SimpleNamespace(id=W1, name="Acme"), SimpleNamespace(id=W2, name="Globex")]


def _comments():
    return [
        SimpleNamespace(content="Looks great", is_internal=False),
        SimpleNamespace(content="Swap the photo before sending", is_internal=True),
        SimpleNamespace(content="Can we add the promo code?", is_internal=False),
    ]


class TestWorkspaces:
    def test_admin_sees_all(self):
        ctx = admin()
        assert filter_workspaces(_workspaces(), ctx.role, ctx.facts) == _workspaces()

    def test_manager_sees_workspaces_with_their_accounts(self):
        ctx = manager(account(W2))
        assert [w.id for w in filter_workspaces(_workspaces(), ctx.role, ctx.facts)] == [W2]

    def test_client_approver_sees_only_their_workspace(self):
        ctx = approver(W1)
        assert [w.id for w in filter_workspaces(_workspaces(), ctx.role, ctx.facts)] == [W1]

    def test_viewer_sees_nothing(self):
        ctx = access()
        assert filter_workspaces(_workspaces(), ctx.role, ctx.facts) == []

    def test_input_is_not_mutated(self):
        candidates = _workspaces()
        ctx = approver(W1)
        filter_workspaces(candidates, ctx.role, ctx.facts)
        assert [w.id for w in candidates] == [W1, W2]


class TestAccounts:
    def test_admin_sees_all_and_can_narrow_by_workspace(self):
        a1, a2 = account(W1), account(W2)
        ctx = admin()
        assert filter_accounts([a1, a2], ctx.role, ctx.facts) == [a1, a2]
        assert filter_accounts([a1, a2], ctx.role, ctx.facts, workspace_id=W2) == [a2]

    def test_manager_sees_exactly_visible_accounts(self):
        mine, other = account(W1, manager="morgan@agency.io"), account(W1)
        ctx = manager(mine)
        assert filter_accounts([other, mine], ctx.role, ctx.facts) == [mine]

    def test_client_sees_no_accounts(self):
        ctx = client_viewer(W1)
        assert filter_accounts([account(W1)], ctx.role, ctx.facts) == []


class TestPosts:
    def test_client_viewer_never_sees_drafts(self):
        draft = post(PostStatus.DRAFT)
        sent = post(PostStatus.SENT_TO_CLIENT)
        ctx = client_viewer(W1)
        assert filter_posts([draft, sent], ctx.role, ctx.facts) == [sent]

    def test_staff_see_drafts(self):
        mine = account(W1, manager="morgan@agency.io")
        draft = post(PostStatus.DRAFT, social_account_id=mine.id)
        for ctx in (manager(mine), admin()):
            assert filter_posts([draft], ctx.role, ctx.facts) == [draft]

    def test_manager_only_sees_posts_of_visible_accounts(self):
        mine = account(W1, manager="morgan@agency.io")
        own, foreign = post(social_account_id=mine.id), post(social_account_id=uuid.uuid4())
        ctx = manager(mine)
        assert filter_posts([foreign, own], ctx.role, ctx.facts) == [own]

    def test_client_only_sees_their_workspace(self):
        here = post(PostStatus.APPROVED, workspace_id=W1)
        there = post(PostStatus.APPROVED, workspace_id=W2)
        ctx = approver(W1)
        assert filter_posts([there, here], ctx.role, ctx.facts) == [here]
        assert can_view_post(here, ctx.role, ctx.facts)
        assert not can_view_post(there, ctx.role, ctx.facts)

    def test_viewer_sees_nothing(self):
        ctx = access()
        assert filter_posts([post(PostStatus.POSTED)], ctx.role, ctx.facts) == []


class TestComments:
    def test_client_gets_exactly_non_internal_in_order(self):
        ctx = client_viewer(W1)
        visible = filter_comments(_comments(), ctx.role, ctx.facts)
        assert [c.content for c in visible] == ["Looks great", "Can we add the promo code?"]

    def test_staff_get_everything(self):
        ctx = manager()
        assert len(filter_comments(_comments(), ctx.role, ctx.facts)) == 3

    def test_viewer_gets_nothing(self):
        ctx = access()
        assert filter_comments(_comments(), ctx.role, ctx.facts) == []

    def test_filtering_twice_is_identical(self):
        ctx = approver(W1)
        comments = _comments()
        assert filter_comments(comments, ctx.role, ctx.facts) == filter_comments(comments, ctx.role, ctx.facts)
