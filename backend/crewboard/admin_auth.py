import os
from sqladmin.authentication import AuthenticationBackend
from starlette.requests import Request
from sqlalchemy import select
from dotenv import load_dotenv
from crewboard.db.database import AsyncSessionLocal
from crewboard.db.models.user import User
from crewboard.core.security import verify_password

load_dotenv()

class AdminAuth(AuthenticationBackend):
    async def login(self, request: Request) -> bool:
        form = await request.form()
        email = form.get("username")
        password = form.get("password")

        async with AsyncSessionLocal() as session:
            stmt = select(User).where(User.email == email)
            result = await session.execute(stmt)
            user = result.scalar_one_or_none()

            # 1. Account and password
            if not user or not verify_password(password or "", user.password):
                return False

            # 2. Admin role
            if not user.is_admin:
                return False

            # 3. Session keeps only the user id; the role is re-read on every request
            request.session.update({"user_id": user.id})
            return True

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> bool:
        user_id = request.session.get("user_id")
        if not user_id:
            return False

        async with AsyncSessionLocal() as session:
            user = await session.get(User, user_id)
            return bool(user and user.is_active and user.is_admin)

authentication_backend = AdminAuth(secret_key=os.getenv("ADMIN_SESSION_SECRET", "secret_key_for_admin_session"))
