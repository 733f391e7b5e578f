from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
import asyncio
import os
import sys
import logging
import time

from typing import Optional

from config import Settings, get_settings, require_provider_credentials
from database import Database
from providers import GeminiProvider, GenerationError
from schemas import (
    GenerateQuestionsRequest, GenerateQuestionsResponse, GenerateExplanationRequest,
    QuestionResponse, QuestionListResponse, AddQuestionsRequest, UpdateNoteRequest,
    SessionCreateRequest, SessionResponse, SessionListResponse, MessageResponse,
)
from services import (
    InterviewAIService, MissingFieldsError, QuestionNotFoundError,
    QuestionService, SessionNotFoundError, require_fields,
)


def setup_logging(settings: Settings) -> None:
    """Configure root logging with a console handler and an optional log file."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    handlers = [logging.StreamHandler()]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file))
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers
    )
    for logger_name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(logger_name).setLevel(level)


settings = get_settings()
setup_logging(settings)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, version=settings.version)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Populated on startup
database = Database(settings.database_url)
question_service: Optional[QuestionService] = None
ai_service: Optional[InterviewAIService] = None


def get_question_service() -> QuestionService:
    if question_service is None:
        raise RuntimeError("Question service is not initialized")
    return question_service


def get_ai_service() -> InterviewAIService:
    if ai_service is None:
        raise RuntimeError("AI service is not initialized")
    return ai_service


def _missing_fields(e: MissingFieldsError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail={"message": e.message})


def _not_found(what: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail={"message": f"{what} not found"})


def _internal_error(message: str, e: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"message": message, "error": str(e)},
    )


@app.middleware("http")
async def log_requests(request, call_next):
    """Log all incoming requests"""
    start_time = time.time()
    logger.info(f"Request: {request.method} {request.url.path}")

    response = await call_next(request)

    process_time = time.time() - start_time
    logger.info(f"Response: {response.status_code} - {process_time:.3f}s")
    return response


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok", "version": settings.version}


@app.post("/api/ai/generate-questions", response_model=GenerateQuestionsResponse)
async def generate_interview_questions(
    request: Optional[GenerateQuestionsRequest] = None,
    service: InterviewAIService = Depends(get_ai_service),
):
    """Generate interview questions and answers with Gemini"""
    request = request or GenerateQuestionsRequest()
    logger.info(
        f"Generate questions request received: role={request.role}, experience={request.experience}, "
        f"topics={request.topicsToFocus}, count={request.numberOfQuestions}"
    )

    try:
        start_time = time.time()
        questions = await service.generate_interview_questions(
            role=request.role,
            experience=request.experience,
            topics_to_focus=request.topicsToFocus,
            number_of_questions=request.numberOfQuestions,
        )
        logger.info(f"Successfully generated questions in {time.time() - start_time:.3f}s")
        return GenerateQuestionsResponse(questions=questions)

    except MissingFieldsError as e:
        logger.warning("Generate questions rejected: missing required fields")
        raise _missing_fields(e)
    except GenerationError as e:
        logger.error(f"❌ Gemini generation failed: {e.message} ({e.error})")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.to_detail())
    except Exception as e:
        logger.error(f"❌ Error generating questions: {e}", exc_info=True)
        raise _internal_error("Failed to generate questions", e)


@app.post("/api/ai/generate-explanation", response_model=QuestionResponse)
async def generate_concept_explanation(
    request: Optional[GenerateExplanationRequest] = None,
    service: InterviewAIService = Depends(get_ai_service),
):
    """Explain a question's concept and append it to the stored answer"""
    request = request or GenerateExplanationRequest()
    question_ref = str(request.questionId) if request.questionId is not None else ""
    logger.info(f"Generate explanation request received for question {question_ref[:8]}...")

    try:
        updated_question = await service.generate_concept_explanation(
            question_id=request.questionId,
            question=request.question,
        )
        logger.info(f"Successfully explained question {question_ref[:8]}...")
        return QuestionResponse(question=updated_question)

    except MissingFieldsError as e:
        logger.warning("Generate explanation rejected: missing required fields")
        raise _missing_fields(e)
    except QuestionNotFoundError:
        raise _not_found("Question")
    except GenerationError as e:
        logger.error(f"❌ Gemini explanation failed: {e.message}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.to_detail())
    except Exception as e:
        logger.error(f"❌ Error generating explanation: {e}", exc_info=True)
        raise _internal_error("Failed to generate explanation", e)


@app.post("/api/sessions", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(
    request: SessionCreateRequest,
    service: QuestionService = Depends(get_question_service),
):
    """Create an interview session, optionally with its first questions"""
    logger.info(f"Create session request received: role={request.role}, questions={len(request.questions)}")

    try:
        require_fields(request.role, request.experience, request.topicsToFocus)
        session = await asyncio.to_thread(
            service.create_session,
            role=request.role,
            experience=request.experience,
            topics_to_focus=request.topicsToFocus,
            description=request.description,
            questions=request.questions,
        )
        return SessionResponse(session=session)

    except MissingFieldsError as e:
        raise _missing_fields(e)
    except Exception as e:
        logger.error(f"Error creating session: {e}", exc_info=True)
        raise _internal_error("Failed to create session", e)


@app.get("/api/sessions", response_model=SessionListResponse)
async def list_sessions(service: QuestionService = Depends(get_question_service)):
    """List sessions, newest first"""
    try:
        sessions = await asyncio.to_thread(service.list_sessions)
        logger.info(f"Returning {len(sessions)} session(s)")
        return SessionListResponse(sessions=sessions)
    except Exception as e:
        logger.error(f"Error listing sessions: {e}", exc_info=True)
        raise _internal_error("Failed to list sessions", e)


@app.get("/api/sessions/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str, service: QuestionService = Depends(get_question_service)):
    """Get a session with its questions, pinned first"""
    try:
        session = await asyncio.to_thread(service.get_session, session_id)
        if not session:
            logger.error(f"Session not found: {session_id}")
            raise _not_found("Session")
        return SessionResponse(session=session)

    except HTTPException:
        # Re-raise HTTPExceptions as-is
        raise
    except Exception as e:
        logger.error(f"Error getting session {session_id[:8]}...: {e}", exc_info=True)
        raise _internal_error("Failed to get session", e)


@app.delete("/api/sessions/{session_id}", response_model=MessageResponse)
async def delete_session(session_id: str, service: QuestionService = Depends(get_question_service)):
    """Delete a session and its questions"""
    try:
        if not await asyncio.to_thread(service.delete_session, session_id):
            logger.error(f"Session not found for deletion: {session_id}")
            raise _not_found("Session")
        return MessageResponse(message="Session deleted successfully")

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error deleting session {session_id[:8]}...: {e}", exc_info=True)
        raise _internal_error("Failed to delete session", e)


@app.post("/api/questions/add", response_model=QuestionListResponse, status_code=status.HTTP_201_CREATED)
async def add_questions_to_session(
    request: AddQuestionsRequest,
    service: QuestionService = Depends(get_question_service),
):
    """Add questions to an existing session"""
    try:
        require_fields(request.sessionId, request.questions)
        questions = await asyncio.to_thread(service.add_questions, request.sessionId, request.questions)
        return QuestionListResponse(questions=questions)

    except MissingFieldsError as e:
        raise _missing_fields(e)
    except SessionNotFoundError:
        raise _not_found("Session")
    except Exception as e:
        logger.error(f"Error adding questions: {e}", exc_info=True)
        raise _internal_error("Failed to add questions", e)


@app.post("/api/questions/{question_id}/pin", response_model=QuestionResponse)
async def toggle_pin_question(question_id: str, service: QuestionService = Depends(get_question_service)):
    """Pin or unpin a question"""
    try:
        question = await asyncio.to_thread(service.toggle_pin, question_id)
        if not question:
            raise _not_found("Question")
        logger.info(f"Question {question_id[:8]}... pinned={question.isPinned}")
        return QuestionResponse(question=question)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error pinning question {question_id[:8]}...: {e}", exc_info=True)
        raise _internal_error("Failed to pin question", e)


@app.post("/api/questions/{question_id}/note", response_model=QuestionResponse)
async def update_question_note(
    question_id: str,
    request: UpdateNoteRequest,
    service: QuestionService = Depends(get_question_service),
):
    """Save a personal note on a question"""
    try:
        question = await asyncio.to_thread(service.update_note, question_id, request.note)
        if not question:
            raise _not_found("Question")
        return QuestionResponse(question=question)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error updating note for question {question_id[:8]}...: {e}", exc_info=True)
        raise _internal_error("Failed to update note", e)


@app.on_event("startup")
async def startup_event():
    """Application startup event"""
    global question_service, ai_service

    logger.info("🚀 Interview Prep AI Backend starting up...")
    logger.info(f"Environment: {'Production (Render)' if settings.is_production else 'Development'}")
    logger.info(f"Python version: {sys.version}")
    logger.info(f"Working directory: {os.getcwd()}")

    # Refuse to serve without a provider credential
    require_provider_credentials(settings)

    database.init()
    question_service = QuestionService(database)
    ai_service = InterviewAIService(
        GeminiProvider(api_key=settings.gemini_api_key, model=settings.gemini_model),
        question_service,
    )
    logger.info(f"Gemini model: {settings.gemini_model}")
    logger.info("🎉 Interview Prep AI Backend startup complete!")


@app.on_event("shutdown")
async def shutdown_event():
    """Application shutdown event"""
    logger.info("🛑 Interview Prep AI Backend shutting down...")
    database.dispose()


if __name__ == "__main__":
    import uvicorn
    logger.info("Starting uvicorn server...")
    uvicorn.run(app, host="::", port=settings.port, log_level="info")
