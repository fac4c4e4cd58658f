"""Console settings, read from the environment (a .env file is honoured)."""
import os

from dotenv import load_dotenv

load_dotenv()

ADMIN_API_URL = os.getenv("ADMIN_API_URL", "http://localhost:8000")
ADMIN_API_TOKEN = os.getenv("ADMIN_API_TOKEN", "")
ADMIN_SEARCH_DEBOUNCE = float(os.getenv("ADMIN_SEARCH_DEBOUNCE", 0.3))
