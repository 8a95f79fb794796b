# landrec/main.py

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from loguru import logger

from landrec.config import get_settings
from landrec.db_init import init_db
from landrec.errors import LandRecError
from landrec.log import configure_logging
from landrec.routers import analyses, analyze, health

configure_logging(get_settings().log_level)

app = FastAPI(title="Land Recognition API")


# Create tables on startup
@app.on_event("startup")
def startup_event():
    init_db()


# CORS (any origin; bearer tokens travel in the Authorization header)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,  # Must be False when allow_origins is "*"
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

CORS_METHODS = "GET, POST, PUT, DELETE, OPTIONS"
CORS_HEADERS = "Content-Type, Authorization, X-Client-Info, Apikey"


# Preflights for /analyze-land get 200 with an empty body
# (registered after CORSMiddleware, so it runs first)
@app.middleware("http")
async def analyze_land_preflight(request: Request, call_next):
    if request.method == "OPTIONS" and request.url.path.rstrip("/") == "/analyze-land":
        return Response(
            status_code=200,
            headers={
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Methods": CORS_METHODS,
                "Access-Control-Allow-Headers": request.headers.get(
                    "access-control-request-headers", CORS_HEADERS
                ),
            },
        )
    return await call_next(request)


# Errors are returned as {"error": "..."}
@app.exception_handler(LandRecError)
def land_rec_error_handler(request: Request, exc: LandRecError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(Exception)
def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# Routers
app.include_router(health.router)
app.include_router(analyze.router)
app.include_router(analyses.router)


@app.get("/")
def root():
    return {"status": "ok"}
