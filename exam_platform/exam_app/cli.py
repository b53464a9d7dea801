"""``flask`` subcommands for catalogue seeding, exports and grind reminders."""

from __future__ import annotations

import json

import click
from flask import Flask
from flask.cli import AppGroup, with_appcontext

from .extensions import db

# Subjects created by ``flask seed-catalog`` (name, levels offered).
CATALOG_SEED = (
    ("Mathematics", ("Higher", "Ordinary", "Foundation")),
    ("English", ("Higher", "Ordinary")),
    ("Irish", ("Higher", "Ordinary", "Foundation")),
    ("French", ("Higher", "Ordinary")),
    ("German", ("Higher", "Ordinary")),
    ("Spanish", ("Higher", "Ordinary")),
    ("Biology", ("Higher", "Ordinary")),
    ("Chemistry", ("Higher", "Ordinary")),
    ("Physics", ("Higher", "Ordinary")),
    ("Applied Maths", ("Higher", "Ordinary")),
    ("Accounting", ("Higher", "Ordinary")),
    ("Business", ("Higher", "Ordinary")),
    ("Economics", ("Higher", "Ordinary")),
    ("Geography", ("Higher", "Ordinary")),
    ("History", ("Higher", "Ordinary")),
    ("Home Economics", ("Higher", "Ordinary")),
    ("Agricultural Science", ("Higher", "Ordinary")),
    ("Computer Science", ("Higher", "Ordinary")),
    ("LCVP", ("Higher",)),
)


@click.command("seed-catalog")
@with_appcontext
def seed_catalog() -> None:
    """Create the default subject catalogue."""

    from .models import Subject

    db.create_all()
    existing = {(subject.name, subject.level) for subject in Subject.query.all()}
    missing = [
        Subject(name=name, level=level)
        for name, levels in CATALOG_SEED
        for level in levels
        if (name, level) not in existing
    ]
    db.session.add_all(missing)
    db.session.commit()
    click.echo(f"Seeded {len(missing)} subjects.")


questions_group = AppGroup("questions", help="Question catalogue commands.")


@questions_group.command("export")
@click.option("--subject-id", type=int, required=True, help="Subject to export.")
@click.option("--audio", is_flag=True, default=False, help="Export audio questions instead.")
@click.option("--output", type=click.Path(dir_okay=False, writable=True), help="Write JSON to a file.")
def export_questions(subject_id: int, audio: bool, output: str | None) -> None:
    """Walk every cursor page for a subject and dump the merged list as JSON."""

    from .services import question_service

    model = question_service.QUESTION_MODELS["audio" if audio else "normal"]
    filters = question_service.QuestionFilters(subject_id=subject_id)
    items = question_service.merge_pages(question_service.iter_pages(model, filters))
    payload = json.dumps(items, ensure_ascii=False, indent=2, default=str)
    if not output:
        click.echo(payload)
        return
    with open(output, "w", encoding="utf-8") as handle:
        handle.write(payload)
    click.echo(f"Exported {len(items)} questions to {output}.")


grinds_group = AppGroup("grinds", help="Grind session commands.")


@grinds_group.command("send-reminders")
def send_reminders_command() -> None:
    """Email registrants of grinds starting inside the reminder window."""

    from .services import grind_service

    click.echo(f"Sent {grind_service.send_reminders()} grind reminders.")


@grinds_group.command("send-feedback-requests")
def send_feedback_requests_command() -> None:
    """Ask attendees of grinds that ended recently for feedback."""

    from .services import grind_service

    click.echo(f"Sent {grind_service.send_feedback_requests()} feedback requests.")


def register_cli(app: Flask) -> None:
    for command in (seed_catalog, questions_group, grinds_group):
        app.cli.add_command(command)
