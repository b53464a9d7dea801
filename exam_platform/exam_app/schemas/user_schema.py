"""Schemas for authentication payloads."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate


class RegisterSchema(Schema):
    email = fields.Email(required=True)
    password = fields.String(required=True, validate=validate.Length(min=6))
    code = fields.String(required=True, validate=validate.Length(equal=6))

    class Meta:
        unknown = EXCLUDE


class LoginSchema(Schema):
    email = fields.String(required=True)
    password = fields.String(required=True)


class VerificationRequestSchema(Schema):
    email = fields.Email(required=True)


class PasswordResetRequestSchema(Schema):
    email = fields.String(required=True, validate=validate.Length(min=3, max=255))


class PasswordResetConfirmSchema(Schema):
    token = fields.String(required=True, validate=validate.Length(min=10))
    new_password = fields.String(required=True, validate=validate.Length(min=6))
