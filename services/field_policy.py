"""
Field-access policy for privileged fields.
"""
from typing import Any, Dict, Mapping

from models.resource import ADMIN_ROLE

PRIVILEGED_FIELDS = ("role",)


def apply_role_policy(current_role: str, fields: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Drop privileged fields unless the record being changed is an admin.

    ``current_role`` must be the role stored before the change, never one
    taken from ``fields``; a payload cannot grant itself admin.
    """
    if current_role == ADMIN_ROLE:
        return dict(fields)
    return {key: value for key, value in fields.items() if key not in PRIVILEGED_FIELDS}
