# backend/aquaguardian/main.py
import argparse
import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .assessors import build_assessor
from .chat import ChatResponder
from .config import Settings, load_settings
from .database import Base, SessionLocal, engine
from .llm_client import LLMClient
from .routes import router
from .simulator import ReadingSimulator

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("aquaguardian")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()

    app = FastAPI(title="AquaGuardian", version="1.0.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # explicitly owned collaborators, reachable from handlers via app.state
    app.state.settings = settings
    app.state.assessor = build_assessor(settings)
    app.state.chat = ChatResponder(LLMClient.from_settings(settings) if settings.remote_enabled else None)
    app.state.simulator = ReadingSimulator(SessionLocal, interval_sec=settings.sim_interval_sec)

    @app.on_event("startup")
    def startup():
        Base.metadata.create_all(bind=engine)
        logger.info("AquaGuardian ready (assessor=%s)", app.state.assessor.name)

    @app.on_event("shutdown")
    def shutdown():
        app.state.simulator.stop()

    @app.get("/healthz")
    def healthz():
        return {"ok": True}

    app.include_router(router)
    return app


app = create_app()


def main():
    import uvicorn
    parser = argparse.ArgumentParser(description="AquaGuardian API server")
    parser.add_argument("--host", default=app.state.settings.api_host)
    parser.add_argument("--port", type=int, default=app.state.settings.api_port)
    parser.add_argument("--reload", action="store_true")
    args = parser.parse_args()

    if args.reload:
        uvicorn.run("aquaguardian.main:app", host=args.host, port=args.port, reload=True)
    else:
        uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
