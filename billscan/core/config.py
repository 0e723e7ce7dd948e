
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    app_name: str = Field("billscan", alias="APP_NAME")
    app_env: str = Field("dev", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    # Azure Document Intelligence (OCR engine)
    az_di_endpoint: str | None = Field(default=None, alias="AZ_DI_ENDPOINT")
    az_di_api_key: str | None = Field(default=None, alias="AZ_DI_API_KEY")
    ocr_model_id: str = Field("prebuilt-read", alias="OCR_MODEL_ID")

    # Upload gate
    max_upload_bytes: int = Field(10 * 1024 * 1024, alias="MAX_UPLOAD_BYTES")
    allowed_upload_types: str = Field(
        "image/jpeg,image/png,image/webp,image/gif,application/pdf",
        alias="ALLOWED_UPLOAD_TYPES",
    )
    min_ocr_text_length: int = Field(5, alias="MIN_OCR_TEXT_LENGTH")

    # Vendor heuristics extensions (comma-separated)
    vendor_extra_stop_words: str = Field("", alias="VENDOR_EXTRA_STOP_WORDS")
    vendor_extra_city_tokens: str = Field("", alias="VENDOR_EXTRA_CITY_TOKENS")

    # Review step
    price_change_tolerance: float = Field(0.01, alias="PRICE_CHANGE_TOLERANCE")
    total_mismatch_tolerance: float = Field(1.0, alias="TOTAL_MISMATCH_TOLERANCE")

    # CORS allowed origins (comma-separated list for production deployment)
    cors_origins: str = Field("http://localhost:3000,http://127.0.0.1:3000", alias="CORS_ORIGINS")

    # Service Bus (optional)
    service_bus_connection_string: str | None = Field(default=None, alias="SERVICE_BUS_CONNECTION_STRING")
    service_bus_queue_name: str = Field("invoice-events", alias="SERVICE_BUS_QUEUE_NAME")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "populate_by_name": True}

    def csv(self, value: str) -> list[str]:
        return [part.strip() for part in value.split(",") if part.strip()]

settings = Settings()
