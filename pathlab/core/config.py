from typing import List, Union, Optional
from pydantic import AnyHttpUrl, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    PROJECT_NAME: str = "Pathology Lab Portal"
    API_PREFIX: str = "/api"
    DEBUG: bool = False

    # CORS
    BACKEND_CORS_ORIGINS: List[AnyHttpUrl] = []

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def assemble_cors_origins(cls, v: Union[str, List[str]]) -> Union[List[str], str]:
        if isinstance(v, str) and not v.startswith("["):
            return [i.strip() for i in v.split(",") if i.strip()]
        elif isinstance(v, (list, str)):
            return v
        raise ValueError(v)

    # Database
    POSTGRES_SERVER: Optional[str] = None
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_DB: Optional[str] = None
    POSTGRES_PORT: str = "5432"
    DATABASE_URL: Optional[str] = None

    @model_validator(mode='after')
    def assemble_db_connection(self) -> 'Settings':
        if not self.DATABASE_URL:
            if all([self.POSTGRES_USER, self.POSTGRES_PASSWORD, self.POSTGRES_SERVER, self.POSTGRES_DB]):
                self.DATABASE_URL = (
                    f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@"
                    f"{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
                )
            else:
                self.DATABASE_URL = "sqlite:///./pathlab.db"
        return self

    # JWT
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    PATIENT_TOKEN_EXPIRE_DAYS: int = 7
    ADMIN_TOKEN_EXPIRE_HOURS: int = 24

    # Redis (Celery broker)
    REDIS_URL: str = "redis://localhost:6379/0"

    # OTP email delivery: "inline" sends over SMTP in the request, "celery" enqueues
    EMAIL_DELIVERY: str = "inline"
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_TIMEOUT_SECONDS: int = 15
    EMAIL_FROM_NAME: str = "Archana Pathology Lab"

    # OTP
    OTP_VERIFICATION_EXPIRE_MINUTES: int = 5
    OTP_PASSWORD_RESET_EXPIRE_MINUTES: int = 10
    OTP_MAX_ATTEMPTS: int = 3

    # Razorpay
    RAZORPAY_KEY_ID: Optional[str] = None
    RAZORPAY_KEY_SECRET: Optional[str] = None
    RAZORPAY_API_BASE: str = "https://api.razorpay.com/v1"
    REQUIRE_GATEWAY_SIGNATURE: bool = True

    # Firebase phone auth
    FIREBASE_PROJECT_ID: Optional[str] = None

    # Bookings and reports
    ENFORCE_FORWARD_STATUS_TRANSITIONS: bool = False
    REPORT_BOOKING_FALLBACK_MATCH: bool = True
    REPORTS_DIR: str = "./reports"
    PATIENT_ID_PREFIX: str = "APL"

    # Seeding
    SEED_ON_STARTUP: bool = True
    ADMIN_SEED_USERNAME: Optional[str] = None
    ADMIN_SEED_PASSWORD: Optional[str] = None
    ADMIN_SEED_NAME: str = "Admin User"

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env", extra='ignore')

settings = Settings()
