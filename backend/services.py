import asyncio
import logging
from typing import Any, Iterable, List, Optional

from sqlalchemy import func, select

from database import Database
from models import InterviewSession, Question
from providers import GeminiProvider
from schemas import QuestionInput, QuestionOut, SessionDetail, SessionSummary

# Configure logging for services
logger = logging.getLogger(__name__)

EXPLANATION_SEPARATOR = "\n\nExplanation:\n"


class MissingFieldsError(ValueError):
    """A required request field is absent or empty."""

    def __init__(self, message: str = "Missing required fields"):
        super().__init__(message)
        self.message = message


class QuestionNotFoundError(LookupError):
    pass


class SessionNotFoundError(LookupError):
    pass


def require_fields(*values: Any) -> None:
    if not all(values):
        raise MissingFieldsError()


def _ordered_questions(questions: Iterable[Question]) -> List[Question]:
    """Pinned questions first, then by creation time."""
    return sorted(questions, key=lambda q: (not q.is_pinned, q.created_at))


class QuestionService:
    def __init__(self, database: Database):
        logger.info("Initializing QuestionService...")
        self.database = database

    def get_question(self, question_id: str) -> Optional[QuestionOut]:
        """Find a question by id"""
        with self.database.session() as s:
            row = s.get(Question, question_id)
            return QuestionOut.model_validate(row) if row else None

    def update_question(self, question_id: str, **fields) -> Optional[QuestionOut]:
        """Update a question by id and return the updated record"""
        with self.database.session() as s:
            row = s.get(Question, question_id)
            if row is None:
                return None
            for name, value in fields.items():
                setattr(row, name, value)
            s.flush()
            s.refresh(row)
            return QuestionOut.model_validate(row)

    def append_explanation(self, question_id: str, explanation: str) -> QuestionOut:
        """Append an explanation to the stored answer without touching what is already there."""
        existing = self.get_question(question_id)
        if existing is None:
            logger.error(f"Question not found for explanation: {question_id}")
            raise QuestionNotFoundError(question_id)

        new_answer = f"{existing.answer or ''}{EXPLANATION_SEPARATOR}{explanation}"
        updated = self.update_question(question_id, answer=new_answer)
        if updated is None:
            raise QuestionNotFoundError(question_id)
        logger.info(f"Appended explanation to question {question_id[:8]}... ({len(explanation)} chars)")
        return updated

    def add_questions(self, session_id: str, questions: List[QuestionInput]) -> List[QuestionOut]:
        with self.database.session() as s:
            if s.get(InterviewSession, session_id) is None:
                raise SessionNotFoundError(session_id)
            rows = [
                Question(session_id=session_id, question=q.question, answer=q.answer or "")
                for q in questions
            ]
            s.add_all(rows)
            s.flush()
            logger.info(f"Added {len(rows)} question(s) to session {session_id[:8]}...")
            return [QuestionOut.model_validate(r) for r in rows]

    def toggle_pin(self, question_id: str) -> Optional[QuestionOut]:
        with self.database.session() as s:
            row = s.get(Question, question_id)
            if row is None:
                return None
            row.is_pinned = not row.is_pinned
            s.flush()
            s.refresh(row)
            return QuestionOut.model_validate(row)

    def update_note(self, question_id: str, note: Optional[str]) -> Optional[QuestionOut]:
        return self.update_question(question_id, note=note or "")

    def create_session(self, role: str, experience: Any, topics_to_focus: str,
                       description: Optional[str] = None,
                       questions: Optional[List[QuestionInput]] = None) -> SessionDetail:
        with self.database.session() as s:
            session = InterviewSession(
                role=role,
                experience=str(experience),
                topics_to_focus=topics_to_focus,
                description=description,
            )
            session.questions = [
                Question(question=q.question, answer=q.answer or "")
                for q in (questions or [])
            ]
            s.add(session)
            s.flush()
            s.refresh(session)
            logger.info(f"Created session {session.id[:8]}... with {len(session.questions)} question(s)")
            return self._session_detail(session)

    def list_sessions(self) -> List[SessionSummary]:
        with self.database.session() as s:
            stmt = (
                select(InterviewSession, func.count(Question.id))
                .outerjoin(Question, Question.session_id == InterviewSession.id)
                .group_by(InterviewSession.id)
                .order_by(InterviewSession.created_at.desc())
            )
            summaries = []
            for session, count in s.execute(stmt).all():
                summary = SessionSummary.model_validate(session)
                summary.questionCount = count
                summaries.append(summary)
            return summaries

    def get_session(self, session_id: str) -> Optional[SessionDetail]:
        with self.database.session() as s:
            session = s.get(InterviewSession, session_id)
            return self._session_detail(session) if session else None

    def delete_session(self, session_id: str) -> bool:
        with self.database.session() as s:
            session = s.get(InterviewSession, session_id)
            if session is None:
                return False
            s.delete(session)
            logger.info(f"Deleted session {session_id[:8]}...")
            return True

    @staticmethod
    def _session_detail(session: InterviewSession) -> SessionDetail:
        questions = _ordered_questions(session.questions)
        return SessionDetail(
            id=session.id,
            role=session.role,
            experience=session.experience,
            topicsToFocus=session.topics_to_focus,
            description=session.description,
            questionCount=len(questions),
            createdAt=session.created_at,
            updatedAt=session.updated_at,
            questions=[QuestionOut.model_validate(q) for q in questions],
        )


class InterviewAIService:
    def __init__(self, provider: GeminiProvider, question_service: QuestionService):
        self.provider = provider
        self.question_service = question_service

    async def generate_interview_questions(self, role, experience, topics_to_focus, number_of_questions) -> Any:
        require_fields(role, experience, topics_to_focus, number_of_questions)
        return await asyncio.to_thread(
            self.provider.generate_interview_questions,
            role, experience, topics_to_focus, number_of_questions,
        )

    async def generate_concept_explanation(self, question_id: Any, question: Any) -> QuestionOut:
        require_fields(question_id, question)
        explanation = await asyncio.to_thread(self.provider.explain_concept, str(question))
        return await asyncio.to_thread(self.question_service.append_explanation, str(question_id), explanation)
