from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Storage service selection
    STORAGE_SERVICE: str = "local"  # local | azure

    # Local filesystem service
    STORAGE_ROOT: str = "app/storage/data"

    # Signed blob tokens (local service URLs)
    STORAGE_SECRET_KEY: str
    STORAGE_TOKEN_ALGORITHM: str = "HS256"
    STORAGE_URL_EXPIRES_IN_SECONDS: int = 300

    # Azure Blob Storage service
    AZURE_STORAGE_PATH: str = ""
    AZURE_STORAGE_ACCOUNT_NAME: str = ""
    AZURE_STORAGE_ACCESS_KEY: str = ""
    AZURE_STORAGE_CONTAINER: str = ""

    API_V1_PREFIX: str = "/api/v1"

    # 從.env檔案與環境變數讀取設定，Settings沒有定義的欄位直接忽略
    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
