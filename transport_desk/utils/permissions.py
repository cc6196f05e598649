from transport_desk.models.role import RoleName, DepartmentName

# resource -> allowed actions, per role. "manage" implies every action.
ROLE_PERMISSIONS: dict[RoleName, dict[str, set[str]]] = {
    RoleName.ADMIN: {"*": {"manage"}},
    RoleName.COORDINATOR: {
        "drivers":      {"manage"},
        "vehicles":     {"manage"},
        "vips":         {"manage"},
        "assignments":  {"manage"},
        "observations": {"read"},
        "tracking":     {"read"},
    },
    RoleName.TEAM_HEAD: {
        "drivers":     {"read"},
        "vehicles":    {"read"},
        "vips":        {"read"},
        "assignments": {"read"},
        "tracking":    {"read"},
    },
    RoleName.DRIVER: {
        "checkins":     {"read", "create"},
        "observations": {"read", "create"},
    },
}

TRACKING_DEPARTMENTS = {DepartmentName.HOSPITALITY, DepartmentName.LOUNGE, DepartmentName.TRANSPORT}
TRACKING_ONLY_DEPARTMENTS = {DepartmentName.HOSPITALITY, DepartmentName.LOUNGE}


def has_permission(role: RoleName, resource: str, action: str) -> bool:
    grants = ROLE_PERMISSIONS.get(role, {})
    for key in ("*", resource):
        actions = grants.get(key, set())
        if "manage" in actions or action in actions:
            return True
    return False


def can_access_department(role: RoleName, department: DepartmentName, required: DepartmentName) -> bool:
    if role == RoleName.ADMIN or department == DepartmentName.ALL:
        return True
    return department == required


def can_view_tracking(role: RoleName, department: DepartmentName) -> bool:
    if role == RoleName.ADMIN:
        return True
    if role == RoleName.DRIVER:
        return False
    return any(can_access_department(role, department, d) for d in TRACKING_DEPARTMENTS)


def is_tracking_only(role: RoleName, department: DepartmentName) -> bool:
    """Hospitality/lounge staff see drivers and VIPs, not vehicles or driver notes."""
    return role != RoleName.ADMIN and department in TRACKING_ONLY_DEPARTMENTS
