from fastapi.templating import Jinja2Templates

from .config import settings
from .question_bank import QuestionBankManager
from .sessions import SessionStore
from .utils import format_time

templates = Jinja2Templates(directory=settings.TEMPLATES_DIR)
templates.env.filters["clock"] = format_time
bank_manager = QuestionBankManager(settings.QUESTION_BANK_DIR)
session_store = SessionStore(timeout_minutes=settings.SESSION_TIMEOUT_MINUTES)
