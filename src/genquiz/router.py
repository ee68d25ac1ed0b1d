import logging
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Cookie, Depends, Form, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from .config import settings
from .engine import NoActiveQuestion, SessionFinished, SessionNotFinished
from .globals import bank_manager, session_store, templates
from .models import AnswerRecord, Phase, QuizResult
from .sessions import QuizSession
from .sources import QuestionSource, QuestionSourceError, SourceFactory
from .ticker import SessionTicker

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Dependencies ---
def get_session_id(
    session_id: Optional[str] = Cookie(None, alias=settings.SESSION_COOKIE_NAME)
) -> Optional[str]:
    return session_id


def get_question_source() -> QuestionSource:
    return SourceFactory.create(settings.QUESTION_SOURCE, bank_manager)


# --- Pages ---
@router.get("/", response_class=HTMLResponse)
async def home(request: Request, error: Optional[str] = None):
    topics = bank_manager.get_topics() if settings.QUESTION_SOURCE == "bank" else []
    return templates.TemplateResponse(
        request, "start.html", {"topics": topics, "error": error}
    )


@router.get("/api/topics")
async def get_topics():
    return bank_manager.get_topics()


# --- Session start ---
LOAD_FAILED = "Failed to load questions. Please try again."


async def begin_session(
    session_id: Optional[str], topic: Optional[str], source: QuestionSource
) -> Optional[QuizSession]:
    """Fetches questions and loads them into the caller's session.

    Returns None when the source fails or returns nothing; the engine is then
    back in Idle. A request overtaken by a newer start for the same session
    leaves the session to that newer request.
    """
    session = session_store.get(session_id)
    is_new = session is None
    if is_new:
        session = session_store.create()
    topic = topic or session.topic

    session.stop_ticker()
    session.load_generation += 1
    generation = session.load_generation
    engine = session.engine
    engine.begin_loading()

    try:
        questions = await run_in_threadpool(source.fetch, settings.QUIZ_SIZE, topic)
    except QuestionSourceError as e:
        logger.error(f"Failed to load questions from {source.name}: {e}")
        questions = []

    if generation != session.load_generation:
        logger.info(f"Discarding superseded start for session {session.session_id}")
        return session

    if not questions:
        engine.abort_loading()
        if is_new:
            session_store.delete(session.session_id)
        return None

    engine.load_session(questions)
    session.topic = topic
    session.stop_ticker()
    if settings.AUTO_TICK:
        session.ticker = SessionTicker(
            engine, settings.TICK_INTERVAL_SECONDS, session_id=session.session_id
        )
        session.ticker.start()

    logger.info(
        f"New session: {session.session_id} [Source: {source.name}, Topic: {topic}, Questions: {len(questions)}]"
    )
    return session


def set_session_cookie(response, session: QuizSession):
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session.session_id,
        httponly=True,
        samesite="Lax",
    )
    return response


@router.post("/start", response_class=RedirectResponse)
async def start_quiz_session(
    topic: Optional[str] = Form(None),
    session_id: Optional[str] = Depends(get_session_id),
    source: QuestionSource = Depends(get_question_source),
):
    session = await begin_session(session_id, topic, source)
    if session is None:
        return RedirectResponse(url=f"/?error={quote(LOAD_FAILED)}", status_code=302)
    return set_session_cookie(RedirectResponse(url="/quiz", status_code=302), session)


@router.get("/quiz", response_class=HTMLResponse)
async def display_question_page(
    request: Request, session_id: Optional[str] = Depends(get_session_id)
):
    session = session_store.get(session_id)
    if not session:
        return RedirectResponse(url="/", status_code=302)
    engine = session.engine
    if engine.phase == Phase.FINISHED:
        return RedirectResponse(url="/result", status_code=302)
    if engine.phase != Phase.ACTIVE:
        return RedirectResponse(url="/", status_code=302)

    return templates.TemplateResponse(
        request,
        "quiz.html",
        {
            "question": engine.current_question(),
            "current_index": engine.current_index,
            "total_questions": engine.question_count,
            "running_timer": engine.running_timer,
        },
    )


@router.get("/result", response_class=HTMLResponse)
async def result_page(request: Request, session_id: Optional[str] = Depends(get_session_id)):
    session = session_store.get(session_id)
    if not session:
        return RedirectResponse(url="/", status_code=302)
    engine = session.engine
    if engine.phase != Phase.FINISHED:
        return RedirectResponse(url="/quiz", status_code=302)

    return templates.TemplateResponse(
        request,
        "result.html",
        {
            "statistics": engine.compute_statistics(),
            "results": engine.question_results(),
            "topic": session.topic,
        },
    )


# --- API ---
@router.post("/api/start")
async def start_quiz_api(
    topic: Optional[str] = Form(None),
    session_id: Optional[str] = Depends(get_session_id),
    source: QuestionSource = Depends(get_question_source),
):
    session = await begin_session(session_id, topic, source)
    if session is None:
        return JSONResponse({"error": LOAD_FAILED}, status_code=502)
    engine = session.engine
    response = JSONResponse(
        {
            "phase": engine.phase.value,
            "topic": session.topic,
            "current_index": engine.current_index,
            "total_questions": engine.question_count,
        }
    )
    return set_session_cookie(response, session)


@router.get("/api/quiz/current")
async def get_current_question(session_id: Optional[str] = Depends(get_session_id)):
    session = session_store.get(session_id)
    if not session:
        return JSONResponse({"error": "Session invalid"}, status_code=401)
    engine = session.engine

    try:
        question = engine.current_question()
    except NoActiveQuestion as e:
        return JSONResponse(
            {"error": str(e), "phase": engine.phase.value}, status_code=409
        )

    return {
        "phase": engine.phase.value,
        "prompt": question.prompt,
        "options": [option.label for option in question.options],
        "current_index": engine.current_index,
        "total_questions": engine.question_count,
        "running_timer": engine.running_timer,
    }


@router.post("/submit_answer", response_model=AnswerRecord)
async def submit_answer(
    answer: str = Form(...),
    session_id: Optional[str] = Depends(get_session_id),
):
    session = session_store.get(session_id)
    if not session:
        return JSONResponse({"error": "Session invalid"}, status_code=401)
    engine = session.engine

    index = engine.current_index
    try:
        engine.submit_answer(answer)
    except SessionFinished:
        return JSONResponse({"error": "Quiz already finished"}, status_code=409)
    except NoActiveQuestion as e:
        return JSONResponse({"error": str(e)}, status_code=409)

    question = engine.state.questions[index]
    finished = engine.phase == Phase.FINISHED
    if finished:
        session.stop_ticker()
        logger.info(f"Session finished: {session.session_id}")

    correct_answer = question.correct_label()
    return AnswerRecord(
        question_index=index,
        prompt=question.prompt,
        user_answer=answer,
        correct_answer=correct_answer,
        is_correct=correct_answer is not None and answer == correct_answer,
        time_seconds=engine.elapsed_per_question[index],
        finished=finished,
    )


@router.get("/api/result", response_model=QuizResult)
async def get_result_data(session_id: Optional[str] = Depends(get_session_id)):
    session = session_store.get(session_id)
    if not session:
        return JSONResponse({"error": "Session invalid"}, status_code=401)
    engine = session.engine

    try:
        statistics = engine.compute_statistics()
    except SessionNotFinished as e:
        return JSONResponse({"error": str(e)}, status_code=409)

    return QuizResult(statistics=statistics, questions=engine.question_results())


@router.post("/api/reset")
async def reset_session(session_id: Optional[str] = Depends(get_session_id)):
    if session_store.delete(session_id):
        logger.info(f"Session reset: {session_id}")
    response = JSONResponse({"status": "success"})
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return response
