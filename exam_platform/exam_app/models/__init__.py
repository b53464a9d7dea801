"""Database models package."""

from .user import User, UserProfile, UserSubject, EmailVerificationTicket
from .subject import Subject, Topic, AudioTopic
from .question import (
    AudioQuestion,
    Question,
    audio_question_topics,
    question_topics,
)
from .progress import QuestionCompletion
from .grind import Grind, GrindRegistration
from .reports import QuestionAuditLog, QuestionReport
from .general_settings import GeneralSetting

__all__ = [
    "User",
    "UserProfile",
    "UserSubject",
    "EmailVerificationTicket",
    "Subject",
    "Topic",
    "AudioTopic",
    "Question",
    "AudioQuestion",
    "question_topics",
    "audio_question_topics",
    "QuestionCompletion",
    "Grind",
    "GrindRegistration",
    "QuestionReport",
    "QuestionAuditLog",
    "GeneralSetting",
]
