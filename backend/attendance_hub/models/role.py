import enum


class AppRole(enum.StrEnum):
    developer = "developer"
    program_office = "program_office"
    student = "student"
    user = "user"


# Roles a role-assignment row may grant; anything else falls back to the baseline.
ASSIGNABLE_ROLES = frozenset({AppRole.developer, AppRole.program_office, AppRole.student})


def narrow_role(value: object) -> AppRole:
    """Map an arbitrary stored value onto an application role, defaulting to ``user``."""
    if isinstance(value, str) and value in ASSIGNABLE_ROLES:
        return AppRole(value)
    return AppRole.user
