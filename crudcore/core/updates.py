"""Update Payloads — supplied-fields diff with a configurable empty-update policy.

Invariants:
    - Only fields the caller actually sent are included (explicit None included as None)
    - An empty diff raises ValidationError under EmptyUpdatePolicy.REJECT
    - An empty diff passes through as {} under EmptyUpdatePolicy.ALLOW
"""

from pydantic import BaseModel

from crudcore.core.domain_types import EmptyUpdatePolicy
from crudcore.core.errors import ValidationError


def collect_update_fields(
    body: BaseModel, policy: EmptyUpdatePolicy,
) -> dict:
    """Return the fields present in the request body, enforcing the empty-update policy."""
    changes = body.model_dump(exclude_unset=True)
    if not changes and policy is EmptyUpdatePolicy.REJECT:
        raise ValidationError("Update payload contains no fields", "body")
    return changes
