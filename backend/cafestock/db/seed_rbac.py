"""Role → permission matrix.

RBAC Matrix:
┌─────────────────────────┬───────┬───────┬──────────┐
│ Permission              │ Admin │ Staff │ Customer │
├─────────────────────────┼───────┼───────┼──────────┤
│ inventory:read          │  ✓    │   ✓   │          │
│ inventory:update        │  ✓    │   ✓   │          │
│ request:create          │  ✓    │   ✓   │          │
│ request:approve         │  ✓    │       │          │
│ purchase_order:manage   │  ✓    │       │          │
│ delivery:manage         │  ✓    │   ✓   │          │
│ vendor:manage           │  ✓    │       │          │
│ role:manage             │  ✓    │       │          │
└─────────────────────────┴───────┴───────┴──────────┘
"""

from cafestock.models.role import PermissionAction, RoleType

ROLE_PERMISSIONS: dict[RoleType, list[PermissionAction]] = {
    RoleType.ADMIN: list(PermissionAction),  # All permissions
    RoleType.STAFF: [
        PermissionAction.INVENTORY_READ,
        PermissionAction.INVENTORY_UPDATE,
        PermissionAction.REQUEST_CREATE,
        PermissionAction.DELIVERY_MANAGE,
    ],
    RoleType.CUSTOMER: [],
}


def permissions_for(role: RoleType) -> list[str]:
    return [p.value for p in ROLE_PERMISSIONS[role]]
