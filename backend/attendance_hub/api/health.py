from fastapi import APIRouter

from attendance_hub.utils.auth import SettingsDep

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "healthy"}


@router.get("/health/ready")
async def readiness_check(settings: SettingsDep) -> dict[str, object]:
    missing = settings.missing_auth_settings()
    return {
        "status": "healthy" if not missing else "unhealthy",
        "checks": {"configuration": "healthy" if not missing else f"missing: {', '.join(missing)}"},
    }
