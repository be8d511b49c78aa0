"""
Crease - ball-by-ball cricket match engine API
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from crease import __version__
from crease.config import settings, configure_logging
from crease.database import init_db
from crease.api.match import router as match_router, active_matches

configure_logging()

app = FastAPI(
    title="Crease",
    description="Ball-by-ball cricket match simulation API",
    version=__version__,
)

# Local match-viewer frontends
default_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

if settings.CORS_ORIGINS:
    default_origins.extend([o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()])

app.add_middleware(
    CORSMiddleware,
    allow_origins=default_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(match_router, prefix="/api")


@app.on_event("startup")
def startup_event():
    """Initialize database on startup"""
    init_db()


@app.get("/")
def root():
    """Health check endpoint"""
    return {
        "name": "Crease API",
        "version": __version__,
        "status": "running",
    }


@app.get("/api/health")
def health_check():
    """API health check with the number of live matches held in memory"""
    live = sum(1 for m in active_matches.values() if not m.is_finished)
    return {"status": "healthy", "live_matches": live, "stored_matches": len(active_matches)}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
