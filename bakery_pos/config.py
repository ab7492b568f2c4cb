from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "Bakery POS"
    DATABASE_URL: str = "sqlite:///./bakery.db"

    # Seconds a SQLite writer waits for another terminal's transaction
    SQLITE_BUSY_TIMEOUT: float = 15.0

    LOG_LEVEL: str = "INFO"

    # Cart limits
    MAX_LINE_QUANTITY: int = 199
    MAX_CART_LINES: int = 100
    MAX_DELIVERY_COST: int = 10000

    DEFAULT_CANCEL_REASON: str = "Order cancelled"

    model_config = {"env_file": ".env"}


settings = Settings()
