import asyncio
import sys
import os
import getpass
from sqlalchemy import select, update

# Make the crewboard package importable when run from backend/
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from crewboard.db.database import AsyncSessionLocal, init_db
from crewboard.db.models.user import User, UserProfile
from crewboard.core.security import get_password_hash

async def create_superuser():
    email = input("Enter Admin Email: ").strip()

    await init_db()
    async with AsyncSessionLocal() as session:
        stmt = select(User).where(User.email == email)
        existing = (await session.execute(stmt)).scalar_one_or_none()

        # Existing account: grant the role instead of creating a new one
        if existing:
            if existing.is_admin:
                print(f"User {email} is already an admin.")
                return
            await session.execute(update(User).where(User.id == existing.id).values(is_admin=True))
            await session.commit()
            print(f"Granted admin privileges to {email}.")
            return

        password = getpass.getpass("Enter Admin Password: ")
        name = input("Enter Admin Display Name (Optional): ") or "Admin"

        print("Creating superuser...")
        admin_user = User(
            email=email,
            password=get_password_hash(password),
            is_active=True,
            is_admin=True
        )
        session.add(admin_user)
        await session.flush()
        session.add(UserProfile(user_id=admin_user.id, display_name=name, platforms=[]))
        await session.commit()
        print(f"Superuser '{email}' created successfully!")

if __name__ == "__main__":
    asyncio.run(create_superuser())
