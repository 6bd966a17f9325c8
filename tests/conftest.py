from datetime import date, time

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.db.base import Base
from app.db.redis_client import get_redis_client
from app.db.session import get_db
from app.models.reference import ClassTrack, Discipline, Room
from app.models.schedule import ClassTemplate
from app.models.user import User, UserRole
from main import app


# Usar una base de datos en memoria para pruebas
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_engine():
    """
    Engine nuevo por test: los servicios hacen commit/rollback por su cuenta,
    así que cada test parte de una BD vacía en lugar de envolverlo en una transacción.
    """
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db(db_engine):
    """
    Crea una sesión de base de datos fresca para cada test y la cierra al finalizar.
    """
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSessionLocal()

    yield session

    session.close()


@pytest.fixture(scope="function")
def client(db):
    """
    Crea un cliente de prueba usando la sesión de test y sin Redis.
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass

    async def override_get_redis_client():
        yield None

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis_client] = override_get_redis_client
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# Datos de referencia
@pytest.fixture(scope="function")
def discipline(db):
    obj = Discipline(name="Brazilian Jiu-Jitsu", slug="bjj", color="#1f77b4", sort_order=0)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@pytest.fixture(scope="function")
def rooms(db):
    """Dos salas; la 'Mat Room' va primero por sort_order."""
    mat_room = Room(name="Mat Room", color="#ff7f0e", capacity=30, sort_order=0)
    cage = Room(name="Cage", color="#2ca02c", capacity=12, sort_order=1)
    db.add_all([mat_room, cage])
    db.commit()
    db.refresh(mat_room)
    db.refresh(cage)
    return [mat_room, cage]


@pytest.fixture(scope="function")
def track(db):
    obj = ClassTrack(name="Kids", description="Clases infantiles", sort_order=0)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


# Usuarios
@pytest.fixture(scope="function")
def trainer_user(db):
    trainer = User(email="coach@example.com", first_name="Lotte", last_name="Peeters", role=UserRole.TRAINER)
    db.add(trainer)
    db.commit()
    db.refresh(trainer)
    return trainer


@pytest.fixture(scope="function")
def members(db):
    """Tres miembros activos."""
    users = [
        User(email="anna@example.com", first_name="Anna", last_name="Claes", role=UserRole.MEMBER),
        User(email="bram@example.com", first_name="Bram", last_name="Wouters", role=UserRole.MEMBER),
        User(email="chloe@example.com", first_name="Chloé", last_name="Maes", role=UserRole.MEMBER),
    ]
    db.add_all(users)
    db.commit()
    for user in users:
        db.refresh(user)
    return users


@pytest.fixture(scope="function")
def make_template(db, discipline):
    """
    Fábrica de plantillas persistidas. Por defecto: lunes 18:00-19:00, recurrente
    del 2025-06-02 al 2025-06-16.
    """
    def _make(**overrides):
        values = dict(
            name="Fundamentals",
            discipline_id=discipline.id,
            day_of_week=1,
            start_time=time(18, 0),
            end_time=time(19, 0),
            start_date=date(2025, 6, 2),
            recurrence_end_date=date(2025, 6, 16),
            is_recurring=True,
            is_active=True,
        )
        values.update(overrides)
        template = ClassTemplate(**values)
        db.add(template)
        db.commit()
        db.refresh(template)
        return template

    return _make
