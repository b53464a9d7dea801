"""Schemas for contact/feedback forms and support settings."""

from __future__ import annotations

from marshmallow import Schema, fields


class ContactSchema(Schema):
    name = fields.String(allow_none=True, load_default=None)
    email = fields.String(allow_none=True, load_default=None)
    category = fields.String(required=True)
    message = fields.String(load_default="")


class FeedbackSchema(Schema):
    grind_id = fields.Integer(allow_none=True, load_default=None, strict=False)
    name = fields.String(allow_none=True, load_default=None)
    email = fields.String(allow_none=True, load_default=None)
    feedback = fields.String(allow_none=True, load_default="")


class GeneralSettingsSchema(Schema):
    support_email = fields.Email(allow_none=True, load_default=None)
