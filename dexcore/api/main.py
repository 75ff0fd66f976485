"""FastAPI application exposing read-only protocol state and quotes."""

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from dexcore import __version__
from dexcore.api.endpoints import router
from dexcore.chain.ledger import Ledger
from dexcore.config import Settings
from dexcore.errors import ProtocolError, UnknownContract
from dexcore.log_config import configure_logging

logger = structlog.get_logger()

app = FastAPI(
    title="dexcore",
    description="Inspection and quoting API for the dexcore AMM engine",
    version=__version__,
)


@app.exception_handler(UnknownContract)
async def unknown_contract_handler(request: Request, exc: UnknownContract) -> JSONResponse:
    return JSONResponse(status_code=404, content={"detail": str(exc), "error": "UnknownContract"})


@app.exception_handler(ProtocolError)
async def protocol_error_handler(request: Request, exc: ProtocolError) -> JSONResponse:
    return JSONResponse(
        status_code=422, content={"detail": str(exc), "error": type(exc).__name__}
    )


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def serve(ledger: Ledger, settings: Settings | None = None) -> None:
    """Serve ``ledger`` over HTTP until interrupted.

    The caller builds and populates the ledger (for example by funding and
    running a ``BootstrapDeployer``) and keeps driving it; the API only reads.

    Args:
        ledger: The ledger to expose
        settings: Bind address and logging; read from DEXCORE_* variables if omitted
    """
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level, settings.json_logs)
    app.state.ledger = ledger
    logger.info(
        "api_serving", host=settings.host, port=settings.port, contracts=len(ledger.contracts)
    )
    uvicorn.run(app, host=settings.host, port=settings.port)
