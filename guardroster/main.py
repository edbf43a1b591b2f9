"""GuardRoster - guard scheduling, attendance capture and relief payouts API"""
import logging
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from guardroster.config import settings
from guardroster.routers import attendance, payroll, reports, schedules

logger = logging.getLogger(__name__)


app = FastAPI(
    title=settings.app_name,
    description="Guard shift scheduling, attendance capture and attendance reports",
    version="1.0.0",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(schedules.router)
app.include_router(attendance.router)
app.include_router(payroll.router)
app.include_router(reports.router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request, exc):
    if isinstance(exc, HTTPException):
        raise exc
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    detail = str(exc) if exc else "Internal Server Error"
    return JSONResponse(
        status_code=500,
        content={"detail": detail},
    )


@app.get("/")
def home():
    return {"message": "GuardRoster is running"}
