from pathlib import Path
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DOTENV = Path(__file__).parent / ".env"

VALID_CATEGORIES = [
    "Nutrition",
    "Fitness",
    "Yoga",
    "Mental Health",
    "Beauty & Skin Care",
    "General Wellness",
    "Healthy Living",
    "Disease & Prevention",
]
FALLBACK_CATEGORY = "General Wellness"
FALLBACK_SUMMARY = "Stay updated with the latest in health and wellness."

LIFESTYLE_FEEDS = [
    "https://www.health.harvard.edu/rss/feed",
    "https://www.medicalnewstoday.com/rss/nutrition",
    "https://www.webmd.com/rss/food-nutrition.xml",
    "https://www.menshealth.com/fitness/rss/",
    "https://www.womenshealthmag.com/fitness/rss/",
    "https://www.yogajournal.com/feed/",
    "https://www.mindbodygreen.com/rss/feed",
    "https://www.healthline.com/rss/beauty.xml",
    "https://www.shape.com/rss/beauty",
    "https://www.medicalnewstoday.com/rss/general-health",
    "https://www.self.com/feeds/latest.xml",
    "https://www.health.com/feed",
    "https://www.everydayhealth.com/rss.xml",
    "https://www.eatingwell.com/rss/all/",
    "https://www.runnersworld.com/rss/all.xml",
    "https://www.who.int/feeds/entity/emergencies/en/rss.xml",
    "https://www.nature.com/subjects/infectious-diseases/rss.xml",
    "https://www.news-medical.net/rss/Infectious-Disease.xml",
    "https://www.health.gov.au/news/rss",
    "https://www.livestrong.com/rss/",
    "https://www.wellandgood.com/feed/",
    "https://www.byrdie.com/rss",
    "https://www.womensrunning.com/feed/",
]

DISEASE_FEEDS = [
    "https://www.medicalnewstoday.com/rss/infectious-diseases",
    "https://www.cdc.gov/feeds/rss/infectiousdiseases.xml",
    "https://www.who.int/feeds/entity/emergencies/en/rss.xml",
    "https://www.news-medical.net/rss/Infectious-Disease.xml",
]


class ConfigurationError(RuntimeError):
    """Raised when a run is attempted without its required settings."""


class Settings(BaseSettings):
    DB_URL: str
    GEMINI_API_KEY: Optional[str] = None
    CRON_SECRET: Optional[str] = None
    GEMINI_MODEL: str = "gemini-2.5-pro"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    USER_AGENT: str = "Mozilla/5.0"
    HTTP_TIMEOUT: Optional[float] = None
    LIFESTYLE_FEEDS: List[str] = LIFESTYLE_FEEDS
    DISEASE_FEEDS: List[str] = DISEASE_FEEDS
    MAX_ARTICLES: int = 30
    MAX_DISEASE_ARTICLES: int = 3
    RETENTION_CAP: int = 60
    PAD_TO_QUOTA: bool = True
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=str(DOTENV) if DOTENV.exists() else None,
        env_file_encoding="utf-8",
    )

    def require_runtime(self) -> None:
        if not self.GEMINI_API_KEY:
            raise ConfigurationError("Missing environment variables.")
