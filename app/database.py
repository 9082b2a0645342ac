"""
🔌 Database Connection Setup - MongoDB

Configuración centralizada para conectar a MongoDB
"""

import logging
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from typing import Optional

from app.core.config import get_settings

logger = logging.getLogger(__name__)


class Database:
    """Singleton para la conexión a MongoDB"""

    client: Optional[AsyncIOMotorClient] = None
    db: Optional[AsyncIOMotorDatabase] = None

    @classmethod
    async def connect(cls):
        """Conecta a MongoDB"""
        if cls.client is None:
            settings = get_settings()

            # tz_aware: las fechas vuelven con tzinfo=UTC para comparar con now()
            cls.client = AsyncIOMotorClient(
                settings.mongodb_uri,
                maxPoolSize=10,
                minPoolSize=2,
                tz_aware=True,
            )

            cls.db = cls.client[settings.mongodb_db_name]

            # Test de conexión
            await cls.client.admin.command("ping")
            logger.info("Connected to MongoDB: %s", settings.mongodb_db_name)

    @classmethod
    async def disconnect(cls):
        """Cierra la conexión"""
        if cls.client is not None:
            cls.client.close()
            cls.client = None
            cls.db = None
            logger.info("Disconnected from MongoDB")

    @classmethod
    def get_db(cls) -> AsyncIOMotorDatabase:
        """Retorna la instancia de la base de datos"""
        if cls.db is None:
            raise RuntimeError("Database not connected. Call Database.connect() first.")
        return cls.db


# ============================================
# 🎯 DEPENDENCY para FastAPI
# ============================================

async def get_database() -> AsyncIOMotorDatabase:
    """FastAPI dependency para inyectar la DB"""
    return Database.get_db()


# ============================================
# 🏗️ CREAR ÍNDICES (al arrancar, create_index es idempotente)
# ============================================

async def create_indexes():
    """
    Crea los índices necesarios para optimizar queries

    Se llama desde el lifespan; si el índice ya existe Mongo no hace nada
    """
    db = Database.get_db()

    # Índices para scores (leaderboards filtran siempre por aprobadas)
    await db.scores.create_index([("verification_status", 1), ("submitted_at", 1)])
    await db.scores.create_index([("competitor_id", 1), ("verification_status", 1), ("submitted_at", -1)])
    await db.scores.create_index([("competition_id", 1), ("verification_status", 1)])
    await db.scores.create_index([("competition_type", 1), ("category", 1)])

    # Índices para competitions
    await db.competitions.create_index([("status", 1), ("start_date", -1)])

    # Índices para competitors
    await db.competitors.create_index("username", unique=True)

    logger.info("Indexes created successfully")
