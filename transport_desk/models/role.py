import enum


class RoleName(str, enum.Enum):
    ADMIN       = "admin"
    COORDINATOR = "coordinator"
    TEAM_HEAD   = "team_head"
    DRIVER      = "driver"


class DepartmentName(str, enum.Enum):
    HOSPITALITY = "hospitality"
    LOUNGE      = "lounge"
    TRANSPORT   = "transport"
    OPERATIONS  = "operations"
    ALL         = "all"


ROLE_LABELS = {
    RoleName.ADMIN:       "System Administrator",
    RoleName.COORDINATOR: "Coordinator",
    RoleName.TEAM_HEAD:   "Team Head",
    RoleName.DRIVER:      "Driver",
}
