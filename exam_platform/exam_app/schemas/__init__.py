"""Serialization / validation schemas (Marshmallow)."""

from .user_schema import (
    LoginSchema,
    RegisterSchema,
    PasswordResetRequestSchema,
    PasswordResetConfirmSchema,
    VerificationRequestSchema,
)
from .settings_schema import (
    NameUpdateSchema,
    EmailChangeRequestSchema,
    EmailChangeVerifySchema,
    EmailResendSchema,
    PasswordChangeSchema,
    SubjectSelectionSchema,
    OnboardingSchema,
)
from .question_schema import (
    CompletionSchema,
    QuestionUpdateSchema,
    ReportCreateSchema,
    ReportUpdateSchema,
)
from .grind_schema import GrindSchema
from .points_schema import GradesUpdateSchema, PointsCalculateSchema
from .support_schema import ContactSchema, FeedbackSchema, GeneralSettingsSchema

__all__ = [
    "LoginSchema",
    "RegisterSchema",
    "PasswordResetRequestSchema",
    "PasswordResetConfirmSchema",
    "VerificationRequestSchema",
    "NameUpdateSchema",
    "EmailChangeRequestSchema",
    "EmailChangeVerifySchema",
    "EmailResendSchema",
    "PasswordChangeSchema",
    "SubjectSelectionSchema",
    "OnboardingSchema",
    "CompletionSchema",
    "QuestionUpdateSchema",
    "ReportCreateSchema",
    "ReportUpdateSchema",
    "GrindSchema",
    "GradesUpdateSchema",
    "PointsCalculateSchema",
    "ContactSchema",
    "FeedbackSchema",
    "GeneralSettingsSchema",
]
