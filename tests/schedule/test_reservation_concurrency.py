"""
Reservas simultáneas sobre la misma ocurrencia.

Usa una BD SQLite en fichero (no en memoria) para que cada hilo tenga su
propia conexión y las escrituras compitan de verdad.
"""
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import date, time

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.core.exceptions import CapacityExceededError, DuplicateReservationError
from app.db.base import Base
from app.models.reference import Discipline
from app.models.reservation import ClassReservation
from app.models.schedule import ClassTemplate
from app.models.user import User, UserRole
from app.services.reservation import reservation_service

MONDAY = date(2025, 6, 9)


@pytest.fixture
def session_factory(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'reservations.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def seeded(session_factory):
    """Una clase de lunes con 2 plazas y 5 miembros."""
    db = session_factory()
    discipline = Discipline(name="Muay Thai", slug="muay-thai")
    db.add(discipline)
    db.flush()
    template = ClassTemplate(
        name="Sparring",
        discipline_id=discipline.id,
        day_of_week=1,
        start_time=time(19, 0),
        end_time=time(20, 0),
        max_capacity=2,
        start_date=date(2025, 6, 2),
        recurrence_end_date=date(2025, 6, 30),
        is_recurring=True,
    )
    users = [
        User(email=f"fighter{i}@example.com", first_name=f"Fighter{i}", role=UserRole.MEMBER)
        for i in range(5)
    ]
    db.add(template)
    db.add_all(users)
    db.commit()
    ids = {"class_id": template.id, "member_ids": [u.id for u in users]}
    db.close()
    return ids


def _race(session_factory, class_id, member_ids):
    barrier = threading.Barrier(len(member_ids))

    def attempt(member_id):
        db = session_factory()
        try:
            barrier.wait()
            reservation_service.create_reservation(
                db, member_id=member_id, class_id=class_id, reservation_date=MONDAY
            )
            return "ok"
        except CapacityExceededError:
            return "full"
        except DuplicateReservationError:
            return "duplicate"
        finally:
            db.close()

    with ThreadPoolExecutor(max_workers=len(member_ids)) as executor:
        return list(executor.map(attempt, member_ids))


def test_concurrent_reservations_never_exceed_capacity(session_factory, seeded):
    """Test tres miembros a la vez sobre 2 plazas: dos entran y uno recibe 'completo'."""
    results = _race(session_factory, seeded["class_id"], seeded["member_ids"][:3])

    assert sorted(results) == ["full", "ok", "ok"]
    db = session_factory()
    try:
        count = reservation_service.count_active(db, class_id=seeded["class_id"], reservation_date=MONDAY)
        assert count == 2
    finally:
        db.close()


def test_concurrent_reservations_with_more_contenders(session_factory, seeded):
    results = _race(session_factory, seeded["class_id"], seeded["member_ids"])

    assert results.count("ok") == 2
    assert results.count("full") == 3


def test_concurrent_duplicates_keep_one(session_factory, seeded):
    """Test el mismo miembro reservando desde varias pestañas a la vez."""
    member_id = seeded["member_ids"][0]
    results = _race(session_factory, seeded["class_id"], [member_id] * 4)

    assert results.count("ok") == 1
    assert results.count("duplicate") == 3
    db = session_factory()
    try:
        assert db.query(ClassReservation).filter(ClassReservation.member_id == member_id).count() == 1
    finally:
        db.close()
