import logging

from fastapi import FastAPI
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response

from app.api.topology import router as topology_router
from app.errors import register_error_handlers
from app.logging import configure_logging
from app.observability import ObservabilityMiddleware

app = FastAPI(title="Fiber Topology API")
logger = logging.getLogger(__name__)

configure_logging()
app.add_middleware(ObservabilityMiddleware)
register_error_handlers(app)

app.include_router(topology_router, prefix="/api")


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.get("/metrics")
def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
