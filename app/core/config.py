# app/core/config.py
import os

from dotenv import load_dotenv

load_dotenv()

APP_NAME = os.getenv("APP_NAME", "Quire")
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./quire.db")
ADMIN_EMAIL = (os.getenv("ADMIN_EMAIL") or "admin@localhost").strip().lower()

# Alt text for every image rendered inside chapter HTML
IMAGE_ALT_TEXT = os.getenv("IMAGE_ALT_TEXT", APP_NAME)

GITHUB_TOKEN = os.getenv("GITHUB_TOKEN") or None
GITHUB_API_URL = os.getenv("GITHUB_API_URL", "https://api.github.com").rstrip("/")
GITHUB_TIMEOUT = float(os.getenv("GITHUB_TIMEOUT", "15"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("LOG_JSON", "1") not in ("0", "false", "False")
