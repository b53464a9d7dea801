"""Schemas for account settings and onboarding.

Field rules with user-facing wording (name length, password policy, email format)
are enforced in ``account_service`` so every entry point reports the same message.
"""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class NameUpdateSchema(Schema):
    name = fields.String(load_default="")


class EmailChangeRequestSchema(Schema):
    new_email = fields.String(required=True)
    password = fields.String(load_default="")


class EmailChangeVerifySchema(Schema):
    new_email = fields.String(required=True)
    token = fields.String(required=True)


class EmailResendSchema(Schema):
    new_email = fields.String(required=True)


class PasswordChangeSchema(Schema):
    current_password = fields.String(load_default="")
    new_password = fields.String(load_default="")
    confirm_password = fields.String(load_default="")


class SubjectSelectionSchema(Schema):
    subject_ids = fields.List(fields.Integer(strict=False), required=True)


class OnboardingSchema(Schema):
    name = fields.String(load_default="")
    subject_ids = fields.List(
        fields.Integer(strict=False),
        required=True,
        validate=validate.Length(min=1, error="Please select at least one subject"),
    )
