import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import settings
from .kpi_entries import router as kpi_entries_router
from .periods import router as periods_router
from .services.period_dates import InvalidPeriodKey, InvalidPeriodView

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)
app.include_router(periods_router)
app.include_router(kpi_entries_router)


@app.exception_handler(InvalidPeriodKey)
@app.exception_handler(InvalidPeriodView)
async def invalid_period_handler(_: Request, exc: ValueError) -> JSONResponse:
    # Reaching here means a caller skipped query resolution; surface as a client error.
    logger.warning("Unhandled invalid period input: %s", exc)
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
