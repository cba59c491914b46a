"""FastAPI application entrypoint for nuxtpack service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..entrypoint import InvalidEntrypoint
from ..fs.local import files_from_directory
from ..orchestrator import BuildError, Orchestrator


class BuildRequest(BaseModel):
    path: str
    work_path: str
    output_dir: str
    entrypoint: str = "package.json"


class LambdaSummary(BaseModel):
    archive: str
    handler: str
    runtime: str
    size: int
    file_count: int


class BuildResponse(BaseModel):
    lambdas: Dict[str, LambdaSummary]


class PrepareCacheRequest(BaseModel):
    path: str
    work_path: str
    cache_path: str
    entrypoint: str = "package.json"


class PrepareCacheResponse(BaseModel):
    files: List[str]


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing nuxtpack operations."""

    app = FastAPI(title="nuxtpack service", version="1.0.0")

    async def get_orchestrator() -> Orchestrator:
        # A fresh orchestrator per request keeps builds isolated.
        return orchestrator_factory()

    async def _in_executor(func: Callable[[], Any]) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/build", response_model=BuildResponse)
    async def build(
        payload: BuildRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> BuildResponse:
        def _run_build() -> Dict[str, LambdaSummary]:
            files = files_from_directory(payload.path)
            lambdas = orchestrator.build(files, Path(payload.work_path), payload.entrypoint)
            output = Path(payload.output_dir)
            summaries: Dict[str, LambdaSummary] = {}
            for serving_path, unit in lambdas.items():
                archive = output / f"{serving_path}.zip"
                archive.parent.mkdir(parents=True, exist_ok=True)
                archive.write_bytes(unit.zip_bytes)
                summaries[serving_path] = LambdaSummary(
                    archive=str(archive),
                    handler=unit.handler,
                    runtime=unit.runtime,
                    size=unit.size,
                    file_count=unit.file_count,
                )
            return summaries

        return BuildResponse(lambdas=await _in_executor(_run_build))

    @app.post("/prepare-cache", response_model=PrepareCacheResponse)
    async def prepare_cache(
        payload: PrepareCacheRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> PrepareCacheResponse:
        def _run_prepare() -> List[str]:
            files = files_from_directory(payload.path)
            cached = orchestrator.prepare_cache(
                files, payload.entrypoint, Path(payload.cache_path), Path(payload.work_path)
            )
            return list(cached)

        return PrepareCacheResponse(files=await _in_executor(_run_prepare))

    @app.exception_handler(InvalidEntrypoint)
    async def invalid_entrypoint_handler(
        _: Any, exc: InvalidEntrypoint
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400, content={"detail": str(exc), "entrypoint": exc.entrypoint}
        )

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(
        _: Any, exc: FileNotFoundError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(BuildError)
    async def build_error_handler(_: Any, exc: BuildError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "detail": str(exc),
                "failures": {path: str(error) for path, error in exc.failures.items()},
            },
        )

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(
        _: Any, exc: RuntimeError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "0.0.0.0", port: int = 8000
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=host, port=port)
