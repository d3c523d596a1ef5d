# ---------------------------------------------------------
# backend/main.py
# Task Manager - Projects & Tasks Backend
#
# Run: uvicorn backend.main:app --reload (from repo root)
#
# - FastAPI + SQLite (dev) / PostgreSQL (prod)
# - /projects                              : list / create projects
# - /projects/{id}                         : replace / delete a project
# - /projects/{id}/tasks                   : list / add tasks
# - /projects/{id}/tasks/{taskId}          : replace / delete a task
# - /projects/{id}/tasks/{taskId}/status   : set task status
# ---------------------------------------------------------

from __future__ import annotations

from typing import Dict

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

try:
    from backend.config import CORS_ORIGINS, IS_DEV, check_token_settings
    from backend.errors import TaskManagerError
    from backend.migrate import run_migrations
    from backend.routes_projects import router as projects_router
    from backend.routes_tasks import router as tasks_router
except ModuleNotFoundError:
    from config import CORS_ORIGINS, IS_DEV, check_token_settings
    from errors import TaskManagerError
    from migrate import run_migrations
    from routes_projects import router as projects_router
    from routes_tasks import router as tasks_router


# ---------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------
app = FastAPI(title="Task Manager API", version="1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials="*" not in CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

check_token_settings()
run_migrations()


# ============================================================================
# ERROR MAPPING
# ============================================================================
#
# The only place typed errors become HTTP status codes:
#   UnauthenticatedError -> 401  (missing/invalid token, missing username claim)
#   ForbiddenError       -> 403  (neither owner nor admin)
#   NotFoundError        -> 404  (project or task, including a task addressed
#                                 through the wrong project)
#   anything else        -> 500  (message logged server-side only)
#
# ============================================================================

@app.exception_handler(TaskManagerError)
def handle_task_manager_error(request: Request, exc: TaskManagerError) -> JSONResponse:
    if IS_DEV:
        print(f"[ERROR] {request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)


@app.exception_handler(Exception)
def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    print(f"[ERROR] {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error."})


# ---------------------------------------------------------
# Routes
# ---------------------------------------------------------
@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


app.include_router(projects_router)
app.include_router(tasks_router)
