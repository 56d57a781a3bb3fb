import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import settings
from database.db import Base, engine

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
# HTTP library debug logs off
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

# ✅ middlewares
from middlewares.timing import TimingMiddleware
from middlewares.error_handler import add_error_handlers

# ✅ routers
from routers import marks

app = FastAPI(
    title=settings.APP_TITLE,
    description=settings.APP_DESCRIPTION,
    version=settings.APP_VERSION,
)

# ✅ CORS (Next.js frontend)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ✅ request latency (adds X-Latency-Ms response header)
app.add_middleware(TimingMiddleware)

# ✅ global error handlers (consistent JSON error format)
add_error_handlers(app)

# ✅ /v1 prefixed routers
app.include_router(marks.router, prefix="/v1")

# ✅ health check
@app.get("/health")
def health_check():
    return {"status": "ok", "message": "API is running"}

@app.on_event("startup")
def _create_tables():
    # schema is owned by migrations outside dev
    if settings.ENV == "dev":
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables ensured (dev)")

# ✅ root
@app.get("/")
def root():
    return {"message": f"{settings.APP_TITLE} - marks and grading"}
