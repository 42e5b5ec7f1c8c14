import os

# In a real deployment, load from environment variables or a secrets manager
SECRET_KEY: str = os.getenv(
    "SECRET_KEY", "your-secret-key-for-jwt-!ChangeMe!"
)
ALGORITHM: str = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite://./webshop.sqlite3")

# Period used by the report endpoint and CLI when none is given
DEFAULT_REPORT_PERIOD: str = os.getenv("DEFAULT_REPORT_PERIOD", "monthly")

MODEL_MODULES: list[str] = [
    "webshop.features.auth.models",
    "webshop.features.inventory.models",
    "webshop.features.orders.models",
    "webshop.features.reviews.models",
    "webshop.features.newsletter.models",
    "webshop.features.carts.models",
    "aerich.models",  # For Aerich migrations
]

TORTOISE_ORM_CONFIG = {
    "connections": {"default": DATABASE_URL},
    "apps": {
        "models": {  # This is an app label, can be anything
            "models": MODEL_MODULES,
            "default_connection": "default",
        }
    },
    # Report windows are computed on UTC calendar days
    "use_tz": True,
    "timezone": "UTC",
}
