from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    PROJECT_NAME: str = "GST Purchase Entry"
    LOG_LEVEL: str = "INFO"

    # GSTIN state-code prefix of the home office (33 = Tamil Nadu)
    HOME_STATE_CODE: str = "33"

    # Status stamped on every purchase submitted from the entry form
    PURCHASE_STATUS: str = "uploaded"

    # Paging (mirrors the command layer limits)
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 200

    class Config:
        case_sensitive = True

settings = Settings()
