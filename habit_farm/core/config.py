import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

PACKAGE_DIR = Path(__file__).resolve().parent.parent
# Static pages live next to the package, not inside it
FRONTEND_DIR = Path(os.getenv("FRONTEND_DIR", PACKAGE_DIR.parent / "frontend"))
DATA_DIR = Path(os.getenv("DATA_DIR", PACKAGE_DIR / "data"))

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./habit_farm.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"

DEFAULT_SECRET_KEY = "habit-farm-dev-secret"
SECRET_KEY = os.getenv("SECRET_KEY", DEFAULT_SECRET_KEY)
ALGORITHM = "HS256"
LOGIN_EXPIRY_DAYS = int(os.getenv("LOGIN_EXPIRY_DAYS", "30"))
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

BASE_HABIT_SLOTS = 3
MAX_HABIT_SLOTS = 10
MAX_HABIT_NAME_LENGTH = 50
