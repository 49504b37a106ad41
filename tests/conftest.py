import json

import pytest

from catalog_engine import normalize_courses


def make_record(cid, title, **extra):
    record = {
        "id": cid,
        "title": title,
        "description": extra.pop("description", f"{title} course"),
        "level": extra.pop("level", "Beginner"),
        "duration": extra.pop("duration", "1 week"),
        "track": extra.pop("track", "Robotics"),
        "domain": extra.pop("domain", "Automation"),
        "tool": extra.pop("tool", "Python"),
        "status": extra.pop("status", "Active"),
    }
    record.update(extra)
    return record


def priced(inr_lms, inr_video=None, inr_live=None):
    return {
        "weeks": 1,
        "lms": {"usd": 19, "inr": inr_lms},
        "lms_video": {"usd": 79, "inr": inr_video if inr_video is not None else inr_lms + 6000},
        "lms_video_live": {"usd": 139, "inr": inr_live if inr_live is not None else inr_lms + 11000},
    }


@pytest.fixture
def records():
    return [
        make_record(
            "AI-1", "Machine Learning Foundations",
            description="Supervised and unsupervised learning basics",
            track="Data Science", domain="Machine Learning", tool="Python, scikit-learn",
            level="Beginner", duration="2 weeks", rating=4.6, students=120, pricing=priced(1499),
        ),
        make_record(
            "AI-2", "Deep Learning for Vision",
            description="CNNs and machine learning pipelines for images",
            track="Data Science", domain="Computer Vision", tool="PyTorch",
            level="Advanced", duration="6 weeks", rating=4.2, students=80, pricing=priced(8994),
        ),
        make_record(
            "AI-3", "Robot Motion Planning",
            description="Path planning for mobile robots",
            track="Robotics", domain="Automation", tool="ROS",
            level="Intermediate", duration="4 weeks", status="🆕 Upcoming", students=30,
        ),
        make_record(
            "AI-4", "Quantum Circuits Primer",
            description="Qubits, gates and simple algorithms",
            track="Quantum AI & Software Engineering", domain="Quantum Computing", tool="Qiskit",
            level="Expert", duration="12 weeks", rating=0, students=5, pricing=priced(17988),
        ),
    ]


@pytest.fixture
def courses(records):
    return normalize_courses(records)


@pytest.fixture
def data_file(tmp_path, records):
    path = tmp_path / "data" / "all_courses.json"
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps(records), encoding="utf-8")
    return path
