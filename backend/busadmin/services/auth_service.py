"""
Bus Admin Backend — Auth Service
==================================

What:  Admin login (credential check + token issue) and admin bootstrap.
Who:   Called by the /login and /admins routes and by the seed command.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from busadmin.exceptions import AuthenticationError, DatabaseError, ValidationError
from busadmin.models.admin import Admin
from busadmin.schemas.auth import AdminCreate, AdminUser, LoginResponse
from busadmin.security import TokenIssuer

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, tokens: TokenIssuer):
        self.tokens = tokens

    async def _find_by_email(self, db: AsyncSession, email: str):
        try:
            result = await db.execute(select(Admin).where(Admin.email == email))
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error("Database error looking up admin: %s", str(e))
            raise DatabaseError(context={"error_type": type(e).__name__})

    async def login(self, db: AsyncSession, email: str, password: str) -> LoginResponse:
        """
        Exchange credentials for a bearer token.

        Unknown email and wrong password produce the same 401 so the response
        does not reveal which admins exist.
        """
        admin = await self._find_by_email(db, email)
        if admin is None or not admin.check_password(password):
            logger.info("Failed login attempt for %s", email)
            raise AuthenticationError("Invalid credentials")

        token = self.tokens.issue(admin.id, admin.email)
        logger.info("Admin logged in: %s", admin.email)
        return LoginResponse(token=token, user=AdminUser.model_validate(admin))

    async def create_admin(self, db: AsyncSession, payload: AdminCreate) -> AdminUser:
        """
        Create an administrator.

        Raises:
            ValidationError: An admin with this email already exists (400)
            DatabaseError: Insert failed for another reason
        """
        if await self._find_by_email(db, payload.email) is not None:
            raise ValidationError(message="Admin already exists", field="email")

        admin = Admin(name=payload.name, email=payload.email)
        admin.set_password(payload.password)

        try:
            db.add(admin)
            await db.commit()
        except IntegrityError:
            # Lost a race with a concurrent insert of the same email
            await db.rollback()
            raise ValidationError(message="Admin already exists", field="email")
        except Exception as e:
            await db.rollback()
            logger.error("Failed to create admin: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        logger.info("Admin created: %s", admin.email)
        return AdminUser.model_validate(admin)
