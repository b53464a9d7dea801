"""2026 Leaving Certificate written examination timetable."""

from __future__ import annotations

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class ExamSlot:
    id: str
    subject_key: str
    label: str
    levels: tuple[str, ...]
    date: str
    start_time: str
    end_time: str
    component: str | None = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["levels"] = list(self.levels)
        return data


# Database subject names that appear under a different name in the timetable.
DB_TO_TIMETABLE: dict[str, tuple[str, ...]] = {
    "Applied Maths": ("Applied Mathematics",),
    "Art": ("Art, Visual Studies",),
    "Design & Communication Graphics": ("Design and Communication Graphics",),
    "Home Economics": ("Home Economics, Scientific and Social",),
    "Phys-Chem": ("Physics and Chemistry",),
    "Politics and Society": ("Politics & Society",),
}

SEPARATELY_ANNOUNCED = frozenset({"Computer Science", "LCVP"})

HO = ("H", "O")

EXAM_TIMETABLE_2026: tuple[ExamSlot, ...] = (
    # Wednesday 3 June
    ExamSlot("english-p1", "English", "English, Paper 1", HO, "2026-06-03", "09:30", "12:20"),
    ExamSlot(
        "home-ec",
        "Home Economics",
        "Home Economics, Scientific and Social",
        HO,
        "2026-06-03",
        "14:00",
        "16:30",
    ),
    # Thursday 4 June
    ExamSlot("engineering-o", "Engineering", "Engineering", ("O",), "2026-06-04", "09:30", "12:00"),
    ExamSlot("engineering-h", "Engineering", "Engineering", ("H",), "2026-06-04", "09:30", "12:30"),
    ExamSlot("english-p2", "English", "English, Paper 2", HO, "2026-06-04", "14:00", "17:20"),
    # Friday 5 June
    ExamSlot("geography", "Geography", "Geography", HO, "2026-06-05", "09:30", "12:20"),
    ExamSlot("maths-p1", "Mathematics", "Mathematics, Paper 1", HO, "2026-06-05", "14:00", "16:30"),
    ExamSlot("maths-f", "Mathematics", "Mathematics", ("F",), "2026-06-05", "14:00", "16:30"),
    # Monday 8 June
    ExamSlot("maths-p2", "Mathematics", "Mathematics, Paper 2", HO, "2026-06-08", "09:30", "12:00"),
    ExamSlot("irish-p1-h", "Irish", "Irish, Paper 1 (incl. Aural)", ("H",), "2026-06-08", "14:00", "16:20"),
    ExamSlot("irish-p1-o", "Irish", "Irish, Paper 1 (incl. Aural)", ("O",), "2026-06-08", "14:00", "15:50"),
    ExamSlot("irish-f", "Irish", "Irish (incl. Aural)", ("F",), "2026-06-08", "14:00", "16:20"),
    # Tuesday 9 June
    ExamSlot("irish-p2-o", "Irish", "Irish, Paper 2", ("O",), "2026-06-09", "09:30", "11:50"),
    ExamSlot("irish-p2-h", "Irish", "Irish, Paper 2", ("H",), "2026-06-09", "09:30", "12:35"),
    ExamSlot("biology", "Biology", "Biology", HO, "2026-06-09", "14:00", "17:00"),
    # Wednesday 10 June
    ExamSlot("french-written", "French", "French — Written", HO, "2026-06-10", "09:30", "12:00", "Written"),
    ExamSlot("french-aural", "French", "French — Aural", HO, "2026-06-10", "12:10", "12:50", "Aural"),
    ExamSlot("history", "History", "History", HO, "2026-06-10", "14:00", "16:50"),
    # Thursday 11 June
    ExamSlot("business-o", "Business", "Business", ("O",), "2026-06-11", "09:30", "12:00"),
    ExamSlot("business-h", "Business", "Business", ("H",), "2026-06-11", "09:30", "12:30"),
    ExamSlot(
        "construction-o", "Construction Studies", "Construction Studies", ("O",), "2026-06-11", "14:00", "16:30"
    ),
    ExamSlot(
        "construction-h", "Construction Studies", "Construction Studies", ("H",), "2026-06-11", "14:00", "17:00"
    ),
    # Friday 12 June
    ExamSlot("german-written", "German", "German — Written", HO, "2026-06-12", "09:30", "12:00", "Written"),
    ExamSlot("german-aural", "German", "German — Aural", HO, "2026-06-12", "12:10", "12:50", "Aural"),
    ExamSlot("art", "Art", "Art, Visual Studies", HO, "2026-06-12", "14:00", "16:30"),
    # Monday 15 June
    ExamSlot(
        "ag-science", "Agricultural Science", "Agricultural Science", HO, "2026-06-15", "14:00", "16:30"
    ),
    # Tuesday 16 June
    ExamSlot("spanish-written", "Spanish", "Spanish — Written", HO, "2026-06-16", "09:30", "12:00", "Written"),
    ExamSlot("spanish-aural", "Spanish", "Spanish — Aural", HO, "2026-06-16", "12:10", "12:50", "Aural"),
    ExamSlot("chemistry", "Chemistry", "Chemistry", HO, "2026-06-16", "14:00", "17:00"),
    # Wednesday 17 June
    ExamSlot("physics", "Physics", "Physics", HO, "2026-06-17", "09:30", "12:30"),
    ExamSlot("phys-chem", "Phys-Chem", "Physics and Chemistry", HO, "2026-06-17", "09:30", "12:30"),
    ExamSlot("accounting", "Accounting", "Accounting", HO, "2026-06-17", "14:00", "17:00"),
    # Thursday 18 June
    ExamSlot(
        "dcg",
        "Design & Communication Graphics",
        "Design and Communication Graphics",
        HO,
        "2026-06-18",
        "09:30",
        "12:30",
    ),
    ExamSlot(
        "music-listening",
        "Music",
        "Music — Listening (Core)",
        HO,
        "2026-06-18",
        "13:30",
        "15:00",
        "Listening (Core)",
    ),
    ExamSlot("music-composing", "Music", "Music — Composing", HO, "2026-06-18", "15:15", "16:45", "Composing"),
    ExamSlot(
        "music-elective",
        "Music",
        "Music — Listening (Elective)",
        ("H",),
        "2026-06-18",
        "17:00",
        "17:45",
        "Listening (Elective)",
    ),
    # Friday 19 June
    ExamSlot("economics", "Economics", "Economics", HO, "2026-06-19", "09:30", "12:00"),
    ExamSlot("pe", "Physical Education", "Physical Education", HO, "2026-06-19", "14:00", "16:30"),
    # Monday 22 June
    ExamSlot("italian-written", "Italian", "Italian — Written", HO, "2026-06-22", "09:30", "12:00", "Written"),
    ExamSlot("italian-aural", "Italian", "Italian — Aural", HO, "2026-06-22", "12:10", "12:50", "Aural"),
    ExamSlot("classical-studies", "Classical Studies", "Classical Studies", HO, "2026-06-22", "14:00", "16:30"),
    ExamSlot("technology-o", "Technology", "Technology", ("O",), "2026-06-22", "14:00", "16:00"),
    ExamSlot("technology-h", "Technology", "Technology", ("H",), "2026-06-22", "14:00", "16:30"),
    # Tuesday 23 June
    ExamSlot("japanese-written", "Japanese", "Japanese — Written", HO, "2026-06-23", "09:30", "12:00", "Written"),
    ExamSlot("japanese-aural", "Japanese", "Japanese — Aural", HO, "2026-06-23", "12:10", "12:50", "Aural"),
    ExamSlot("politics", "Politics and Society", "Politics & Society", HO, "2026-06-23", "09:30", "12:00"),
    ExamSlot(
        "religious-ed-o", "Religious Education", "Religious Education", ("O",), "2026-06-23", "14:00", "16:00"
    ),
    ExamSlot(
        "religious-ed-h", "Religious Education", "Religious Education", ("H",), "2026-06-23", "14:00", "16:30"
    ),
    ExamSlot("applied-maths", "Applied Maths", "Applied Mathematics", HO, "2026-06-23", "14:00", "16:30"),
)
