"""Mock transaction store serving snapshot fixtures from disk"""

import json
import os
import re
from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

app = FastAPI(title="Mock Transaction Store", version="1.0.0")

# STORE_STUB_DIR wins, then the Docker mount, then the fixtures beside this package
DATA_DIR = Path(
    os.environ.get("STORE_STUB_DIR")
    or ("/store_stub" if os.path.exists("/store_stub") else Path(__file__).resolve().parents[1] / "store_stub")
)

# Fixture names are snapshot_<user_id>.json; anything else never maps to a file
USER_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/store/snapshot")
def get_snapshot(user_id: str):
    """Backup-shaped snapshot: accounts, transactions, categories, reminders, goals, settings"""
    if not USER_ID_PATTERN.match(user_id):
        raise HTTPException(status_code=400, detail="Invalid user id")

    file = DATA_DIR / f"snapshot_{user_id}.json"
    if not file.exists():
        raise HTTPException(status_code=404, detail=f"No snapshot for user {user_id}")
    return JSONResponse(content=json.loads(file.read_text(encoding="utf-8")))
