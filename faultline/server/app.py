"""
app.py - FastAPI results browser for Faultline

Serves the per-run results written by the matrix runner.
"""

import os
from pathlib import Path

from fastapi import FastAPI, HTTPException

from faultline import __version__
from faultline.core.errors import ErrorCode, FaultlineError
from faultline.store.results import ResultStore


app = FastAPI(
    title="Faultline",
    version=__version__,
    description="Fault-injection test matrix results",
    docs_url="/docs",
    redoc_url="/redoc",
)

store = ResultStore(Path(os.environ.get('FAULTLINE_STORE', 'store')))


def configure(store_dir: Path) -> None:
    """Point the app at a different results directory."""
    global store
    store = ResultStore(Path(store_dir))


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Faultline",
        "version": __version__,
        "store": str(store.base_dir),
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": __version__,
    }


@app.get("/runs")
async def list_runs():
    """Every stored run, newest first."""
    runs = store.list_runs()
    return {
        "total": len(runs),
        "failed": sum(1 for r in runs if r["valid"] is False),
        "runs": runs,
    }


@app.get("/runs/{test}/{timestamp}")
async def get_run(test: str, timestamp: str):
    """Stored results and test description for one run."""
    try:
        return store.load(test, timestamp)
    except FileNotFoundError:
        error = FaultlineError(
            code=ErrorCode.E4002_RUN_NOT_FOUND,
            context={"test": test, "timestamp": timestamp},
        )
        raise HTTPException(status_code=404, detail=error.to_dict())


def main(host: str = "0.0.0.0", port: int = 8080, store_dir: Path = Path("store")):
    """Run the server."""
    import uvicorn
    configure(store_dir)
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
