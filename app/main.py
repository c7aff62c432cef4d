import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from app.core.config import settings
from app.core.exceptions import LedgerError
from app.core.logging import configure_logging
from app.api.v1.routes.expense import router as expense_router
from app.api.v1.routes.group import router as group_router
from app.api.v1.routes.user import router as user_router

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="Shared Expense Ledger")

@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code, "field": exc.field},
    )

@app.get("/")
async def root():
    return {"message": "Shared Expense Ledger is live"}

app.include_router(user_router, prefix="/api/v1/users")
app.include_router(group_router, prefix="/api/v1/groups")
app.include_router(expense_router, prefix="/api/v1/expense")
