import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from langschool.database import init_db
from langschool.errors import register_exception_handlers
from langschool.routes import bookings, reviews, tutorials

logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

APP_NAME = "Language School API"

app = FastAPI(title=APP_NAME)

# Local frontend dev server; deployments add their origins via CORS_ORIGINS
_cors_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    _cors_origins.extend(o.strip() for o in _extra.split(",") if o.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(tutorials.router, tags=["tutorials"])
app.include_router(bookings.router, tags=["bookings"])
app.include_router(reviews.router, tags=["reviews"])


@app.on_event("startup")
def on_startup():
    init_db()
    logger.info("%s started with %d routes", APP_NAME, len(app.routes))


@app.get("/health")
def health_check():
    """Liveness check"""
    return {"app_name": APP_NAME, "status": "healthy"}


@app.get("/")
def root():
    return {"message": APP_NAME}


def run():
    """Console entry point: serve the app with uvicorn"""
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "3000")))
