"""
Script de seed para criar dados iniciais no banco.

Uso:
    python -m app.db.seed

Cria as tabelas, grava a política de multas padrão nas chaves ausentes de
system_configs e cria o usuário de sistema se não existir.
"""

import asyncio
import logging

from app.core.config import get_settings
from app.db.session import Base, async_session_factory, engine
from app.models.user import User
from app.repositories.user import UserRepository
from app.services.config import ConfigService

logger = logging.getLogger(__name__)
settings = get_settings()


async def create_tables() -> None:
    """Cria as tabelas que ainda não existem."""
    import app.models  # noqa: F401  registra os models no metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def seed_fine_config() -> None:
    """Grava os valores padrão da política de multas."""
    async with async_session_factory() as db:
        created = await ConfigService(db).seed_defaults()
        logger.info(f"Configurações de multa criadas: {created}")


async def create_system_user() -> None:
    """Cria o usuário de sistema (SYSTEM_USER_EMAIL) se não existir."""
    async with async_session_factory() as db:
        repo = UserRepository(db)
        existing = await repo.get_by_email(settings.SYSTEM_USER_EMAIL)

        if existing:
            logger.info(f"Usuário de sistema já existe: {settings.SYSTEM_USER_EMAIL}")
            return

        user: User = await repo.add(name="Sistema", email=settings.SYSTEM_USER_EMAIL)
        await db.commit()

        logger.info(f"Usuário de sistema criado: {settings.SYSTEM_USER_EMAIL} (ID: {user.id})")


async def main() -> None:
    """Executa todos os seeds."""
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    logger.info("Executando seeds...")
    await create_tables()
    await seed_fine_config()
    await create_system_user()
    logger.info("Seeds concluídos!")


if __name__ == "__main__":
    asyncio.run(main())
