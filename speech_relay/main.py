from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from speech_relay.config import get_settings
from speech_relay.logging_config import configure_logging
from speech_relay.middleware.errors import ErrorMiddleware
from speech_relay.middleware.request_log import RequestLogMiddleware
from speech_relay.routes.http import router as http_router
from speech_relay.services.audio_store import get_audio_store

def create_app() -> FastAPI:
    configure_logging()
    s = get_settings()
    store = get_audio_store()
    app = FastAPI(title="Speech Relay")
    app.add_middleware(CORSMiddleware, allow_origins=[s.CORS_ORIGIN], allow_methods=["GET", "POST"], allow_headers=["*"])
    app.add_middleware(RequestLogMiddleware)
    app.add_middleware(ErrorMiddleware)
    app.include_router(http_router, tags=["http"])
    app.mount("/audio", StaticFiles(directory=store.output_dir), name="audio")
    return app

app = create_app()
