from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///transcriptor.db"
    secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7
    bcrypt_rounds: int = 12
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"
    admin_username: str = "admin"
    admin_password: str = "admin"
    admin_name: str = "Administrator"

    class Config:
        env_prefix = "TRANSCRIPTOR_"


settings = Settings()
