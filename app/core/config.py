from dotenv import load_dotenv
from pydantic_settings import BaseSettings


load_dotenv()

class Settings(BaseSettings):
    # Database Connection
    DATABASE_URL: str = "sqlite:///./pokedex.db"

    # PokeAPI (Enrichment Source)
    POKEAPI_BASE_URL: str = "https://pokeapi.co/api/v2"
    POKEAPI_TIMEOUT: float = 10.0
    SEED_REQUEST_DELAY: float = 0.5

    # HTTP surface
    API_PREFIX: str = ""
    CORS_ORIGINS: list[str] = ["*"]
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    HOST: str = "127.0.0.1"
    PORT: int = 5000

    #Basic Authentication (seeding)
    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str = "password123"

    class Config:
        env_file = ".env"

settings = Settings()
