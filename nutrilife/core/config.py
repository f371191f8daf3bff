import os
from dotenv import load_dotenv

load_dotenv()


class Settings:
    # Google Gemini
    GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY")
    GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-2.5-flash")

    # Supabase (auth + user records)
    SUPABASE_URL = os.environ.get("SUPABASE_URL")
    SUPABASE_SERVICE_KEY = os.environ.get("SUPABASE_SERVICE_KEY")
    USER_RECORDS_TABLE = os.environ.get("USER_RECORDS_TABLE", "user_records")

    # Signed-in sessions kept in memory per process
    MAX_SESSIONS = int(os.environ.get("MAX_SESSIONS", "1000"))

    ENVIRONMENT = os.environ.get("ENVIRONMENT", "dev")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    # In production, replace with your specific domain
    CORS_ORIGINS = [
        origin.strip()
        for origin in os.environ.get("CORS_ORIGINS", "*").split(",")
        if origin.strip()
    ]


settings = Settings()
