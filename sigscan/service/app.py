"""FastAPI application entrypoint for sigscan service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, List, Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..models import ScanResult
from ..orchestrator import Orchestrator
from ..readers import DecodeError


class SignaturesRequest(BaseModel):
    values: List[Any]
    min_signature_size: Optional[int] = Field(default=None, ge=0)


class SignatureModel(BaseModel):
    id: int
    signature: str
    count: int


class SignaturesResponse(BaseModel):
    signatures: List[SignatureModel]
    values: int
    min_signature_size: int
    inlined: List[int]


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing signature scans."""

    app = FastAPI(title="SigScan Service", version="1.0.0")

    async def get_orchestrator() -> Orchestrator:
        # Each request gets its own orchestrator and therefore its own registry.
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/signatures", response_model=SignaturesResponse)
    async def scan_signatures(
        payload: SignaturesRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> SignaturesResponse:
        def _run_scan() -> ScanResult:
            return orchestrator.run_values(
                payload.values, min_signature_size=payload.min_signature_size
            )

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, _run_scan)
        return SignaturesResponse(
            signatures=[
                SignatureModel(id=row.id, signature=row.signature, count=row.count)
                for row in result.rows
            ],
            values=result.value_count,
            min_signature_size=result.min_signature_size,
            inlined=result.inlined_ids,
        )

    @app.exception_handler(DecodeError)
    async def decode_error_handler(_: Any, exc: DecodeError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    app = create_app()
    uvicorn.run(app, host=host, port=port)
