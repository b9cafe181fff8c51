from __future__ import annotations
import os

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from db import init_db
from errors import TodoError, SERVER_ERRORS
from logging_setup import setup_logging
from routes_auth import router as auth_router
from routes_lists import router as lists_router
from routes_tasks import router as tasks_router

HOST = os.getenv("TODO_HOST", "127.0.0.1")
PORT = int(os.getenv("TODO_PORT", "3000"))
LOG_LEVEL = os.getenv("TODO_LOG_LEVEL", "INFO")

init_db()

app = FastAPI(title="Task lists")
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_credentials=False, allow_methods=["*"], allow_headers=["*"])
app.include_router(auth_router)
app.include_router(lists_router)
app.include_router(tasks_router)

@app.get("/api/health")
def health(): return {"ok": True}

# --- Exception handlers ---

async def todo_error_handler(request: Request, exc: TodoError):
    return JSONResponse(status_code=exc.status_code, content={"error_code": exc.error_code, "message": str(exc)})

for _exc in SERVER_ERRORS:
    app.add_exception_handler(_exc, todo_error_handler)

def run():
    setup_logging(LOG_LEVEL)
    uvicorn.run("main:app", host=HOST, port=PORT, log_level=LOG_LEVEL.lower())

if __name__ == "__main__":
    run()
