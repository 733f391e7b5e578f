from pydantic import BaseModel, ConfigDict, Field
from typing import Any, List, Optional, Union
from datetime import datetime

# Request bodies only check presence in the handlers, so every field is optional here.


class GenerateQuestionsRequest(BaseModel):
    role: Optional[Any] = None
    experience: Optional[Any] = None
    topicsToFocus: Optional[Any] = None
    numberOfQuestions: Optional[Any] = None


class GenerateExplanationRequest(BaseModel):
    questionId: Optional[Any] = None
    question: Optional[Any] = None


class QuestionInput(BaseModel):
    question: str = Field(..., min_length=1)
    answer: Optional[str] = ""


class SessionCreateRequest(BaseModel):
    role: Optional[str] = None
    experience: Optional[Union[str, int]] = None
    topicsToFocus: Optional[str] = None
    description: Optional[str] = None
    questions: List[QuestionInput] = Field(default_factory=list)


class AddQuestionsRequest(BaseModel):
    sessionId: Optional[str] = None
    questions: Optional[List[QuestionInput]] = None


class UpdateNoteRequest(BaseModel):
    note: Optional[str] = ""


class QuestionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    sessionId: Optional[str] = Field(default=None, validation_alias="session_id")
    question: str
    answer: Optional[str] = None
    note: Optional[str] = None
    isPinned: bool = Field(default=False, validation_alias="is_pinned")
    createdAt: Optional[datetime] = Field(default=None, validation_alias="created_at")
    updatedAt: Optional[datetime] = Field(default=None, validation_alias="updated_at")


class SessionSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    role: str
    experience: str
    topicsToFocus: str = Field(validation_alias="topics_to_focus")
    description: Optional[str] = None
    questionCount: int = 0
    createdAt: Optional[datetime] = Field(default=None, validation_alias="created_at")
    updatedAt: Optional[datetime] = Field(default=None, validation_alias="updated_at")


class SessionDetail(SessionSummary):
    questions: List[QuestionOut] = Field(default_factory=list)


class GenerateQuestionsResponse(BaseModel):
    questions: Any


class QuestionResponse(BaseModel):
    question: QuestionOut


class QuestionListResponse(BaseModel):
    questions: List[QuestionOut]


class SessionResponse(BaseModel):
    session: SessionDetail


class SessionListResponse(BaseModel):
    sessions: List[SessionSummary]


class MessageResponse(BaseModel):
    message: str
