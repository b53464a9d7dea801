from __future__ import annotations

from marshmallow import Schema, fields, validate

from ..models.subject import LEVELS


class PointsEntrySchema(Schema):
    subject_id = fields.Integer(allow_none=True, strict=False)
    subject_name = fields.String(required=True, validate=validate.Length(min=1, max=120))
    level = fields.String(load_default="Higher", validate=validate.OneOf(LEVELS))
    grade = fields.String(allow_none=True)


class PointsCalculateSchema(Schema):
    entries = fields.List(fields.Nested(PointsEntrySchema), allow_none=True, load_default=None)


class GradesUpdateSchema(Schema):
    grades = fields.Dict(keys=fields.Integer(strict=False), values=fields.String(), required=True)
