import uvicorn
from prometheus_fastapi_instrumentator import Instrumentator

from device_tracker import create_app
from device_tracker.core.config import get_settings
from device_tracker.core.logging import configure_logging

settings = get_settings()
configure_logging(settings.LOG_LEVEL, service=settings.APP_NAME)
app = create_app(settings)
instrumentator = Instrumentator()
instrumentator.instrument(app).expose(app, include_in_schema=False)


@app.get("/health", include_in_schema=False)
async def health() -> dict[str, bool]:
    return {"ok": True}


def run() -> None:
    # ``log_config=None`` keeps uvicorn from replacing the JSON handler.
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    run()
