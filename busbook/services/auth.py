from passlib.context import CryptContext
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import async_sessionmaker

from busbook.db.session import async_session, storage_session
from busbook.errors import DuplicateUserError, InvalidCredentialsError, NotFoundError
from busbook.models.models import User


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


class IdentityProvider:
    """Registers users and checks their credentials. Users log in by name."""

    def __init__(self, sessions: async_sessionmaker = None):
        self.sessions = sessions or async_session

    @staticmethod
    def _duplicate(user: User, full_name: str) -> DuplicateUserError:
        if user.full_name == full_name:
            return DuplicateUserError("Username is already taken.")
        return DuplicateUserError("Email is already taken.")

    async def register(self, full_name: str, email: str, password: str) -> int:
        email = email.lower()
        async with storage_session(self.sessions) as session:
            stmt = select(User).where(or_(User.full_name == full_name, User.email == email))
            existing = (await session.scalars(stmt)).first()
            if existing:
                raise self._duplicate(existing, full_name)
            user = User(full_name=full_name, email=email, hashed_password=hash_password(password))
            session.add(user)
            try:
                await session.commit()
            except IntegrityError as exc:
                # lost a race with a concurrent registration
                await session.rollback()
                existing = (await session.scalars(stmt)).first()
                raise (self._duplicate(existing, full_name) if existing else DuplicateUserError()) from exc
            return user.id

    async def authenticate(self, name: str, password: str) -> int:
        async with storage_session(self.sessions) as session:
            user = (await session.scalars(select(User).where(User.full_name == name))).first()
        if not user or not verify_password(password, user.hashed_password):
            raise InvalidCredentialsError()
        return user.id

    async def get_user(self, user_id: int) -> User:
        async with storage_session(self.sessions) as session:
            user = await session.get(User, user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user
