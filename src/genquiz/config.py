import os


def _env_flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes", "on")


class Settings:
    PROJECT_NAME: str = "genquiz"
    DEBUG: bool = _env_flag("GENQUIZ_DEBUG")
    LOG_DIR: str = os.environ.get("GENQUIZ_LOG_DIR", "log")
    LOG_FILE: str = "genquiz.log"
    LOG_TO_DB: bool = _env_flag("GENQUIZ_LOG_TO_DB")
    DB_DIR: str = os.environ.get("GENQUIZ_DB_DIR", "db")
    DB_FILE: str = "genquiz.db"
    QUESTION_TABLE: str = "daily_genai_quiz"
    # One of "bank", "database", "generative"
    QUESTION_SOURCE: str = os.environ.get("GENQUIZ_QUESTION_SOURCE", "bank")
    QUESTION_BANK_DIR: str = os.environ.get("GENQUIZ_QUESTION_BANK_DIR", "question_banks")
    GENERATOR_URL: str = os.environ.get("GENQUIZ_GENERATOR_URL", "")
    GENERATOR_API_KEY: str = os.environ.get("GENQUIZ_GENERATOR_API_KEY", "")
    GENERATOR_TIMEOUT_SECONDS: int = 30
    QUIZ_SIZE: int = int(os.environ.get("GENQUIZ_QUIZ_SIZE", "10"))
    TICK_INTERVAL_SECONDS: float = 1.0
    AUTO_TICK: bool = True
    SESSION_COOKIE_NAME: str = "quiz_session_id"
    SESSION_TIMEOUT_MINUTES: int = 120
    SESSION_SWEEP_INTERVAL_SECONDS: float = 60.0
    ROOT_PATH: str = os.environ.get("ROOT_PATH", "")
    TEMPLATES_DIR: str = os.path.join(os.path.dirname(__file__), "templates")
    STATIC_DIR: str = os.path.join(os.path.dirname(__file__), "static")


settings = Settings()
