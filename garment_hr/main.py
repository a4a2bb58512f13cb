from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from garment_hr.api.routers.audit import router as audit_router
from garment_hr.api.routers.auth import router as auth_router
from garment_hr.api.routers.departments import router as departments_router
from garment_hr.api.routers.permissions import router as permissions_router
from garment_hr.api.routers.users import router as users_router
from garment_hr.core.config import settings
from garment_hr.core.exceptions import HRRecordsError
from garment_hr.core.logging import configure_logging

configure_logging(settings.log_level)

app = FastAPI(
    title="Garment HR Records",
    version="1.0.0",
    description=(
        "HR record keeping for a garment factory: role-based user accounts with "
        "preset and custom permissions, sessions and an audit trail."
    ),
)


@app.exception_handler(HRRecordsError)
async def hr_records_exception_handler(request: Request, exc: HRRecordsError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.get("/")
def health() -> dict[str, str]:
    return {"status": "ok", "service": "Garment HR Records"}


app.include_router(auth_router)
app.include_router(users_router)
app.include_router(permissions_router)
app.include_router(departments_router)
app.include_router(audit_router)
