import logging

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    portal_base_url: str = "https://euipo.europa.eu"
    search_path: str = "/ec2/search/find"

    # Listing query parameters
    search_language: str = "ru"
    search_text: str = ""
    nice_class: str = ""
    office_list: str = "RU"
    search_mode: str = "WORDSPREFIX"
    sort_by: str = "relevance"
    page_size: int = 10
    start_page: int = 1
    max_pages: int = 1

    # Browser and pacing
    headless: bool = True
    navigation_retries: int = 3
    retry_delay_seconds: float = 5.0
    request_delay_seconds: float = 5.0
    batch_size: int = 400
    batch_pause_seconds: float = 60.0
    reset_every: int = 1
    navigation_timeout_ms: int = 0  # 0 disables the Playwright timeout
    wait_until: str = "networkidle"

    output_path: str = "results.xlsx"
    sheet_name: str = "Results"
    export_dir: str = "exports"

    database_url: str = "sqlite+aiosqlite:///./termscrape.db"

    api_host: str = "127.0.0.1"
    api_port: int = 8000
    api_reload: bool = False  # a reload restart interrupts the running job
    log_level: str = "INFO"

    model_config = {"env_file": "../.env"}


settings = Settings()


def configure_logging(level: str = settings.log_level) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
