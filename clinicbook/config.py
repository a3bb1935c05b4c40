import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to the package as clinicbook.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "clinicbook.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}

    # Bearer token verification (checked once at startup, app refuses to boot if malformed)
    AUTH_JWT_ALGORITHM = os.getenv("AUTH_JWT_ALGORITHM", "HS256")
    AUTH_JWT_SECRET = os.getenv("AUTH_JWT_SECRET")              # HS256/384/512
    AUTH_JWT_PUBLIC_KEY = os.getenv("AUTH_JWT_PUBLIC_KEY")      # RS*/ES*, PEM with literal \n allowed
    AUTH_JWT_PUBLIC_KEY_B64 = os.getenv("AUTH_JWT_PUBLIC_KEY_B64")
    AUTH_JWT_AUDIENCE = os.getenv("AUTH_JWT_AUDIENCE")
    AUTH_JWT_ISSUER = os.getenv("AUTH_JWT_ISSUER")
    AUTH_JWT_LEEWAY_SECONDS = int(os.getenv("AUTH_JWT_LEEWAY_SECONDS", "0"))

    # Slot length used when a rule is created without one
    DEFAULT_SLOT_MINUTES = int(os.getenv("DEFAULT_SLOT_MINUTES", "30"))

    # Longest from..to span accepted by the availability listing
    MAX_AVAILABILITY_DAYS = int(os.getenv("MAX_AVAILABILITY_DAYS", "93"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Basic app settings
    DEBUG = False
