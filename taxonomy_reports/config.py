"""
Configuration management for the taxonomy earnings reports service
"""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings"""

    # Application
    app_name: str = "Taxonomy Earnings Reports"
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"
    log_dir: str = "logs"
    log_file_level: str = "INFO"  # Daily report log; the error file always logs ERROR and up
    log_retention_days: int = 30
    error_log_retention_days: int = 90
    log_console_colorize: bool = True

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_workers: int = 4

    # Database
    database_url: str = "sqlite:///./taxonomy_reports.db"

    # Reports
    report_content_type: str = "download"  # Content type whose taxonomies are reported on
    # Taxonomies registered for report_content_type (comma-separated)
    product_taxonomies: str = "download_category,download_tag"
    default_report_range: str = "this_month"
    report_timezone: str = "UTC"  # IANA zone used to resolve named ranges

    # Formatting
    currency: str = "USD"
    currency_decimals: int = 2

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
