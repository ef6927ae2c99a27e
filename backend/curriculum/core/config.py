from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # DB
    DATABASE_URL: str
    DB_SSL_REQUIRED: bool = False

    # Server
    PORT: int = 3000

    # JWT
    JWT_SECRET: str
    JWT_ALG: str = "HS256"
    ACCESS_TOKEN_EXPIRES_SECONDS: int = 7200

    # Upload
    STORAGE_BACKEND: str = "local"
    UPLOAD_DIR: str = "./uploads"
    MAX_UPLOAD_MB: int = 10
    ALLOWED_IMAGE_EXT: str = "png,jpg,jpeg,gif,webp"

    # OSS
    OSS_ENDPOINT: str = ""
    OSS_BUCKET: str = ""
    OSS_ACCESS_KEY: str = ""
    OSS_SECRET: str = ""
    OSS_BASE_URL: str = ""

    # Front end
    FRONTEND_DIR: str = "../frontend"
    FRONTEND_ENTRY: str = "login.html"

    # Logging
    LOG_DIR: str = "./logs"
    LOG_LEVEL: str = "INFO"
    LOG_RETENTION_DAYS: int = 14

    # Seed
    SEED_ADMIN_EMAIL: str = ""
    SEED_ADMIN_PASSWORD: str = ""

    # App
    APP_NAME: str = "Curriculum Management API"
    ALLOW_ORIGINS: str = "*"


settings = Settings()
