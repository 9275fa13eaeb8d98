import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import router
from app.core.config import settings
from app.core.errors import register_exception_handlers
from app.data_access.database import build_engine, create_db_and_tables
from app.services.pokeapi_client import PokeApiClient


logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handles system startup and shutdown events.

    Opens the record store engine and the PokeAPI client, hands them to
    the request dependencies through ``app.state`` and closes both on
    shutdown.
    """
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[logging.StreamHandler()] # This sends it to the Terminal
    )

    engine = build_engine(settings.DATABASE_URL)
    create_db_and_tables(engine)
    app.state.engine = engine
    app.state.pokeapi = PokeApiClient.from_settings(settings.POKEAPI_BASE_URL, settings.POKEAPI_TIMEOUT)
    logger.info(f"Pokedex API starting ({settings.ENVIRONMENT})")

    yield

    app.state.pokeapi.close()
    engine.dispose()
    logger.info("Database connection closed")

# Define the FastAPI app with metadata for Swagger UI
app = FastAPI(
    title="Pokedex API",
    description="A layered Pokemon catalog API with PokeAPI enrichment, backed by SQLModel",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_exception_handlers(app)

# Include our routes
app.include_router(router, prefix=settings.API_PREFIX)

@app.get("/")
def read_root() -> dict[str, str]:
    """Landing endpoint for the API.

    Returns:
        Dict[str, str]: A welcome message.
    """
    return {"message": "Welcome to the Pokedex API"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
