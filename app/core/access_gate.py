"""
Access Control Gate: per-row authorization for profiles and messages.

Reads never raise; rows the requester may not see are dropped so a denied read
looks exactly like an empty one. Writes raise ForbiddenError when denied.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from app.config.policies_config import OWNER_FIELDS, Operation, Resource, Rule, get_rule
from app.core.errors import ForbiddenError

logger = logging.getLogger(__name__)


class AccessGate:
    def is_allowed(
        self,
        resource: Resource,
        operation: Operation,
        requester_id: Optional[str],
        owner_id: Optional[str],
    ) -> bool:
        rule = get_rule(resource, operation)
        if rule == Rule.PUBLIC:
            return True
        if rule == Rule.OWNER:
            # An anonymous requester never owns anything
            return bool(requester_id) and str(requester_id) == str(owner_id)
        return False

    def can_read_owner(self, resource: Resource, requester_id: Optional[str], owner_id: Optional[str]) -> bool:
        """True if rows owned by owner_id are visible to requester_id."""
        return self.is_allowed(resource, Operation.READ, requester_id, owner_id)

    def authorize_write(
        self,
        resource: Resource,
        operation: Operation,
        requester_id: Optional[str],
        owner_id: Optional[str],
    ) -> None:
        if Operation(operation) == Operation.READ:
            raise ValueError("authorize_write does not handle reads; use filter_rows")
        if not self.is_allowed(resource, operation, requester_id, owner_id):
            logger.warning(
                f"Denied {Operation(operation).value} on {Resource(resource).value} "
                f"owned by {owner_id} for requester {requester_id}"
            )
            raise ForbiddenError()

    def filter_rows(
        self,
        resource: Resource,
        requester_id: Optional[str],
        rows: Iterable[Dict[str, Any]],
        owner_field: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Drop every row the requester may not read."""
        owner_field = owner_field or OWNER_FIELDS[Resource(resource)]
        return [
            row for row in rows
            if self.is_allowed(resource, Operation.READ, requester_id, row.get(owner_field))
        ]


access_gate = AccessGate()


def get_access_gate() -> AccessGate:
    return access_gate
