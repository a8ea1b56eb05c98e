import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    CIVICRM_SITE_KEY: str = os.getenv("CIVICRM_SITE_KEY")
    CIVICRM_API_KEY: str = os.getenv("CIVICRM_API_KEY")
    CIVIMONITOR_TIMEOUT_SECONDS: float = float(
        os.getenv("CIVIMONITOR_TIMEOUT_SECONDS", "30")
    )
    CIVIMONITOR_USER_AGENT: str = os.getenv("CIVIMONITOR_USER_AGENT", "CiviMonitor")


settings = Settings()
