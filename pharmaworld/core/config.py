import os
from functools import lru_cache
from typing import List
from urllib.parse import quote_plus

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()

APP_NAME = os.getenv("APP_NAME", "PharmaWorld Medicine Store API")
MISSING_PRODUCT_POLICIES = ("skip", "fail")


class ConfigError(RuntimeError):
    pass


class Settings(BaseModel):
    mongo_uri: str
    db_name: str = "parmaWorld"
    jwt_secret: str
    jwt_algorithm: str = "HS256"
    token_expire_minutes: int = 60
    stripe_secret_key: str
    stripe_currency: str = "usd"
    stripe_api_base: str = "https://api.stripe.com/v1"
    missing_product_policy: str = "skip"
    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"
    port: int = 5000


def _required(name: str) -> str:
    value = (os.getenv(name) or "").strip()
    if not value:
        raise ConfigError(f"Environment variable {name} is not set")
    return value


def build_mongo_uri() -> str:
    uri = (os.getenv("MONGO_URI") or "").strip()
    if uri:
        return uri
    # Escape the username and password
    user = quote_plus(_required("DB_USER"))
    password = quote_plus(_required("DB_PASS"))
    cluster = _required("DB_CLUSTER")
    return f"mongodb+srv://{user}:{password}@{cluster}/?retryWrites=true&w=majority&appName=PharmaWorld"


def load_settings() -> Settings:
    policy = os.getenv("MISSING_PRODUCT_POLICY", "skip").strip().lower()
    if policy not in MISSING_PRODUCT_POLICIES:
        raise ConfigError(f"MISSING_PRODUCT_POLICY must be one of {MISSING_PRODUCT_POLICIES}, got {policy!r}")

    origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

    return Settings(
        mongo_uri=build_mongo_uri(),
        db_name=os.getenv("DB_NAME", "parmaWorld"),
        jwt_secret=_required("JWT_SECRET"),
        jwt_algorithm=os.getenv("JWT_ALGORITHM", "HS256"),
        token_expire_minutes=int(os.getenv("TOKEN_EXPIRE_MINUTES", "60")),
        stripe_secret_key=_required("STRIPE_SECRET_KEY"),
        stripe_currency=os.getenv("STRIPE_CURRENCY", "usd").strip().lower() or "usd",
        missing_product_policy=policy,
        cors_origins=origins or ["*"],
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        port=int(os.getenv("PORT", "5000")),
    )


@lru_cache()
def get_settings() -> Settings:
    return load_settings()
