from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cellduel.load_secrets import database_url

if database_url.startswith("postgresql"):
    engine = create_async_engine(database_url, pool_size=20, max_overflow=20)
else:
    engine = create_async_engine(database_url, echo=False)

# Centralized session factory to avoid creating it in router modules.
Session = async_sessionmaker(
    autocommit=False,
    class_=AsyncSession,
    autoflush=True,
    bind=engine,
)
