"""
Bus Admin Backend — Application Context
=========================================

What:  The single object holding everything a request needs beyond its own
       inputs: settings, database engine and session factory, upload store,
       token issuer and the services built on them.
How:   Built once by `create_app()` (or the seed command) from a Settings
       instance and stored on `app.state.context`. Dependencies in
       `busadmin.dependencies` read it from the request.
"""

import logging
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from busadmin.config import Settings
from busadmin.database import Base, build_engine, build_session_factory
from busadmin.security import TokenIssuer
from busadmin.services.auth_service import AuthService
from busadmin.services.bus_service import BusService
from busadmin.services.upload_service import UploadStore

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    uploads: UploadStore
    tokens: TokenIssuer
    bus_service: BusService
    auth_service: AuthService

    @classmethod
    def build(cls, settings: Settings) -> "AppContext":
        engine = build_engine(settings)
        uploads = UploadStore(
            upload_dir=settings.upload_dir,
            max_file_size=settings.max_file_size,
            public_base_url=settings.public_base_url,
        )
        tokens = TokenIssuer(
            secret=settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            ttl=timedelta(hours=settings.token_ttl_hours),
        )
        return cls(
            settings=settings,
            engine=engine,
            session_factory=build_session_factory(engine),
            uploads=uploads,
            tokens=tokens,
            bus_service=BusService(
                uploads=uploads,
                placeholder_image_url=settings.placeholder_image_url,
                require_image_on_create=settings.require_image_on_create,
            ),
            auth_service=AuthService(tokens=tokens),
        )

    async def create_schema(self) -> None:
        """Create missing tables. Development/test convenience; Alembic owns production."""
        # Registers every model on Base.metadata
        import busadmin.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema ensured")

    async def dispose(self) -> None:
        """Close all pooled database connections."""
        await self.engine.dispose()
