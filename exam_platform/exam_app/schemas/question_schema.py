"""Schemas for question edits, completions and issue reports."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from ..models.progress import QUESTION_TYPES
from ..models.question import EXAM_TYPES
from ..models.reports import REPORT_STATUSES, REPORT_TYPES


class QuestionUpdateSchema(Schema):
    year = fields.Integer(validate=validate.Range(min=1900, max=2100))
    paper_number = fields.Integer(allow_none=True, validate=validate.Range(min=1, max=9))
    question_number = fields.Integer(allow_none=True, validate=validate.Range(min=0, max=999))
    question_parts = fields.List(fields.String(validate=validate.Length(min=1, max=16)))
    exam_type = fields.String(validate=validate.OneOf(EXAM_TYPES))
    additional_info = fields.String(allow_none=True, validate=validate.Length(max=255))
    topic_ids = fields.List(fields.Integer(strict=False))


class CompletionSchema(Schema):
    question_id = fields.Integer(required=True, strict=False)
    question_type = fields.String(load_default="normal", validate=validate.OneOf(QUESTION_TYPES))


class ReportCreateSchema(Schema):
    question_id = fields.Integer(required=True, strict=False)
    question_type = fields.String(load_default="normal", validate=validate.OneOf(QUESTION_TYPES))
    report_type = fields.String(required=True, validate=validate.OneOf(REPORT_TYPES))
    description = fields.String(required=True, validate=validate.Length(min=10, max=1000))


class ReportUpdateSchema(Schema):
    status = fields.String(required=True, validate=validate.OneOf(REPORT_STATUSES))
    admin_notes = fields.String(allow_none=True, validate=validate.Length(max=2000))
