"""
Reconcile identity-provider sign-ins with stored user records.

Users are keyed by e-mail. A first sign-in creates the user with the
provider's subject id and adopts any e-mail-only invitations; later sign-ins
refresh the profile and keep the stored id, which may differ from the
provider's id (see the fix-user endpoint).
"""

from __future__ import annotations

from typing import List, Optional

from wip_planner.schemas.api.auth import ProviderProfile, SessionUser
from wip_planner.services.database_manager.operations import UserOperations
from wip_planner.utils.logger import get_logger
from wip_planner.utils.settings import get_settings

logger = get_logger(__name__)


class SignInRejected(Exception):
    """The profile may not sign in"""


def is_email_allowed(email: Optional[str], allowed_domains: List[str]) -> bool:
    if not email or "@" not in email:
        return False
    if not allowed_domains:
        return True
    domain = email.rsplit("@", 1)[1].lower()
    return domain in allowed_domains


async def reconcile_sign_in(profile: ProviderProfile) -> SessionUser:
    """Return the session identity for a provider profile, creating or refreshing the user"""
    settings = get_settings()

    if not profile.email:
        raise SignInRejected("Identity provider did not return an e-mail address")
    if not is_email_allowed(profile.email, settings.allowed_domains):
        raise SignInRejected(f"E-mail domain not allowed: {profile.email}")

    session_user = SessionUser(
        id=profile.subject,
        email=profile.email,
        name=profile.name,
        image=profile.image,
    )

    try:
        existing = await UserOperations.get_user_by_email(profile.email)
        if existing is None:
            user = await UserOperations.create_user(
                user_id=profile.subject,
                email=profile.email,
                name=profile.name or "Unknown User",
                image=profile.image,
            )
            linked = await UserOperations.link_pending_attendances(profile.email, user.id)
            logger.info(f"Created user {user.id} for {profile.email}, linked {linked} attendance records")
            session_user.name = user.name
        else:
            user = await UserOperations.update_profile(existing.id, name=profile.name, image=profile.image)
            # Keep the stored id so foreign keys stay valid
            session_user.id = user.id
            session_user.name = user.name
            session_user.image = user.image
    except Exception as e:
        # Database trouble must not block sign-in
        logger.error(f"Error during sign-in reconciliation for {profile.email}: {e}")

    return session_user
