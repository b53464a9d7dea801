"""Schemas for grind administration."""

from __future__ import annotations

from datetime import timezone

from marshmallow import Schema, fields, validate


class GrindSchema(Schema):
    title = fields.String(required=True, validate=validate.Length(min=1, max=200))
    description = fields.String(allow_none=True)
    scheduled_at = fields.AwareDateTime(required=True, default_timezone=timezone.utc)
    duration_minutes = fields.Integer(validate=validate.Range(min=15, max=480))
    meeting_url = fields.Url(allow_none=True)
    max_participants = fields.Integer(allow_none=True, validate=validate.Range(min=1))
    feedback_email_body = fields.String(allow_none=True, validate=validate.Length(max=4000))
