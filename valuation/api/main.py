import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from valuation.settings import get_settings

from valuation.api.routes.health import router as health_router
from valuation.api.routes.valuation import router as valuation_router


app = FastAPI(title="Asset valuation API", version="0.1.0")


@app.on_event("startup")
def _startup_logging() -> None:
    settings = get_settings()
    logging.getLogger("valuation").setLevel(settings.log_level)


@app.exception_handler(HTTPException)
async def _http_error(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"message": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def _request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        detail = f"{where}: {first.get('msg')}" if where else str(first.get("msg"))
    else:
        detail = "Invalid request"
    return JSONResponse(status_code=400, content={"message": f"ClientError: Invalid request: {detail}"})


app.include_router(health_router)
app.include_router(valuation_router)
