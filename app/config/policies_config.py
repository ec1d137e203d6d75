"""
Row Access Policy Configuration
This config defines who may read and write each row of the application tables.
Mirrors the row-level security policies in supabase/migrations so the API and
direct database access agree on the same rules.
"""

from enum import Enum


class Resource(str, Enum):
    PROFILES = "profiles"
    MESSAGES = "messages"


class Operation(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class Rule(str, Enum):
    PUBLIC = "public"  # any authenticated principal
    OWNER = "owner"    # requester id must equal the row's owner id
    DENY = "deny"      # nobody, not even the owner


# Owner column per table, used for per-row filtering
OWNER_FIELDS = {
    Resource.PROFILES: "id",
    Resource.MESSAGES: "user_id",
}

POLICY_TABLE = {
    Resource.PROFILES: {
        Operation.READ: Rule.PUBLIC,
        Operation.CREATE: Rule.OWNER,
        Operation.UPDATE: Rule.OWNER,
        Operation.DELETE: Rule.DENY,  # profiles only go away with their principal
    },
    Resource.MESSAGES: {
        Operation.READ: Rule.OWNER,
        Operation.CREATE: Rule.OWNER,
        Operation.UPDATE: Rule.DENY,  # chat history is immutable
        Operation.DELETE: Rule.OWNER,
    },
}


def get_rule(resource: Resource, operation: Operation) -> Rule:
    """Return the rule for a resource/operation pair; anything not listed is denied."""
    return POLICY_TABLE.get(Resource(resource), {}).get(Operation(operation), Rule.DENY)


def get_policy_matrix() -> dict:
    """Flatten the policy table for display, e.g. by GET /auth/me consumers."""
    return {
        "policies": [
            {"resource": resource.value, "operation": operation.value, "rule": rule.value}
            for resource, operations in POLICY_TABLE.items()
            for operation, rule in operations.items()
        ]
    }
