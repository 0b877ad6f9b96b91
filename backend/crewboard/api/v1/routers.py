# backend/crewboard/api/v1/routers.py
from fastapi import APIRouter
from crewboard.api.v1 import auth, users, posts, games, chat, admin

# Main API router (/v1)
api_router = APIRouter(prefix="/v1")

# --- Feature routers ---

# 1. Accounts
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(users.router)

# 2. Looking-for-group posts and the game catalogue
api_router.include_router(posts.router)
api_router.include_router(games.router)

# 3. Chat (REST side; the subscription lives in sockets/chat_socket.py)
api_router.include_router(chat.router, prefix="/chat", tags=["chat"])

# 4. Moderation
api_router.include_router(admin.router)
