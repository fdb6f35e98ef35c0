"""
Organization scope resolution.

Maps the caller's identity (resolved upstream by the session layer) to
the organization whose rows a report may read.
"""

from typing import Optional
import structlog

from config import get_supabase_client
from exceptions import DatabaseError, ScopeResolutionError

logger = structlog.get_logger(__name__)


class OrganizationService:
    """Looks up the organization owned by a user."""

    def __init__(self):
        self.db = get_supabase_client()

    def resolve_org_id(self, user_id: Optional[str]) -> str:
        """
        Get the organization id for a user.

        Args:
            user_id: Caller identity from the session layer

        Returns:
            Organization id

        Raises:
            ScopeResolutionError: If the user has no organization
            DatabaseError: If the lookup fails
        """
        if not user_id:
            raise ScopeResolutionError(user_id)

        try:
            result = self.db.table("organizations").select(
                "id"
            ).eq("user_id", user_id).limit(1).execute()
        except Exception as e:
            logger.error("resolve_org_failed", user_id=user_id, error=str(e))
            raise DatabaseError("select", str(e))

        if not result.data:
            logger.warning("organization_not_found", user_id=user_id)
            raise ScopeResolutionError(user_id)

        return result.data[0]["id"]
