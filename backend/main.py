import logging
import os
import sys

# Ensure this directory is in the path for uvicorn and other runners
current_dir = os.path.dirname(os.path.abspath(__file__))
if current_dir not in sys.path:
    sys.path.append(current_dir)

from fastapi import FastAPI, HTTPException
from fastapi.staticfiles import StaticFiles
from fastapi.responses import FileResponse
from fastapi.middleware.cors import CORSMiddleware

from config import CORS_ORIGINS, FRONTEND_DIST
from database import init_db
from routes.auth_routes import router as auth_router
from routes.budget_routes import router as budget_router
from routes.expense_routes import router as expense_router
from services.period_resolver import utc_now

logger = logging.getLogger(__name__)

init_db()

app = FastAPI(title="Spendly API")


@app.get("/api/health")
async def health():
    return {
        "status": "OK",
        "message": "Spendly Backend is running",
        "timestamp": utc_now().isoformat() + "Z",
    }


app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(expense_router)
app.include_router(budget_router)

# Serve a built copy of the single-page UI when one is configured
if FRONTEND_DIST and os.path.isdir(FRONTEND_DIST):
    assets_dir = os.path.join(FRONTEND_DIST, "assets")
    if os.path.isdir(assets_dir):
        app.mount("/assets", StaticFiles(directory=assets_dir), name="assets")

    @app.get("/{full_path:path}")
    async def serve_spa(full_path: str):
        if full_path.startswith("api/"):
            raise HTTPException(status_code=404, detail="Endpoint not found")

        root = os.path.realpath(FRONTEND_DIST)
        candidate = os.path.realpath(os.path.join(root, full_path))
        if full_path and candidate.startswith(root + os.sep) and os.path.isfile(candidate):
            return FileResponse(candidate)
        return FileResponse(os.path.join(FRONTEND_DIST, "index.html"))
else:
    logger.info("FRONTEND_DIST not set or missing; serving the API only")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=int(os.getenv("PORT", "5000")), reload=True)
