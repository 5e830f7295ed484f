"""Who may comment on a post, with what visibility, and who may resolve."""
from feedplanner.services.role_engine import EffectiveRole, is_account_manager, is_client


def can_post_comment(role: EffectiveRole) -> bool:
    """Anyone who can see the post may comment on it."""
    return True


def resolve_is_internal(role: EffectiveRole, requested: bool | None = None) -> bool:
    # Clients have no internal-only option.
    if is_client(role):
        return False
    return bool(requested)


def can_resolve(role: EffectiveRole) -> bool:
    return is_account_manager(role)
