from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    CONTENTFUL_SPACE_ID: str = ""
    CONTENTFUL_ACCESS_TOKEN: str = ""
    CONTENTFUL_ENV: str = "master"
    CONTENTFUL_CDN_URL: str = "https://cdn.contentful.com"
    CONTENTFUL_CONTENT_TYPE: str = "products"

    # Listing pages are fixed at 10 entries; category discovery reads up to
    # CATEGORY_DISCOVERY_LIMIT entries in a single request.
    PAGE_SIZE: int = 10
    CATEGORY_DISCOVERY_LIMIT: int = 1000

    REVALIDATE_SECONDS: float = 60.0
    PREWARM_DETAILS: bool = False

    HTTP_TIMEOUT: float = 10.0
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"


settings = Settings()
