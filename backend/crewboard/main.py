from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqladmin import Admin
import os
from dotenv import load_dotenv

from pathlib import Path

# main.py lives in backend/crewboard/; the .env sits at the project root
env_path = Path(__file__).resolve().parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

from crewboard.api.v1.routers import api_router
from crewboard.sockets.chat_socket import router as chat_socket_router
from crewboard.db.database import init_db, engine
from crewboard.db.database_redis import RedisManager
from crewboard.admin_panel import ADMIN_VIEWS
from crewboard.admin_auth import authentication_backend


app = FastAPI(title="Crewboard API")

# CORS, so the browser frontend can call the API from another origin
origins_env = os.getenv("ALLOWED_ORIGINS", "*")
origins = [origin.strip() for origin in origins_env.split(",")]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.on_event("startup")
async def on_startup():
    """
    Creates the tables and seeds the verified game catalogue.
    """
    await init_db()

# REST API and WebSocket endpoints
app.include_router(api_router)
app.include_router(chat_socket_router)

# Model admin at /admin, restricted to accounts with the admin role
admin = Admin(app, engine, authentication_backend=authentication_backend, title="Crewboard Admin")
for view in ADMIN_VIEWS:
    admin.add_view(view)

@app.get("/")
async def root():
    """
    Health check.
    """
    return {"message": "Welcome to Crewboard API"}

@app.on_event("shutdown")
async def on_shutdown():
    """
    Releases shared connections on shutdown.
    """
    await RedisManager.close()
