import os

# Settings are read at import time; point them at throwaway values first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["SMTP_HOST"] = ""
os.environ["APP_DEBUG"] = "false"

from datetime import date, datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from transport_desk.database import Base, get_db
from transport_desk.main import app
from transport_desk.models import User, Driver, DriverStatus, Vehicle, VIP
from transport_desk.models.role import RoleName, DepartmentName
from transport_desk.utils.security import hash_password, create_access_token

PASSWORD = "Secret123"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)()
    yield session
    session.close()


@pytest.fixture
def client(db):
    def override_get_db():
        try:
            yield db
        except Exception:
            db.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# ─── Factories ────────────────────────────────────────────────────────────────
@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role=RoleName.ADMIN, department=DepartmentName.ALL, email=None, is_active=True) -> User:
        counter["n"] += 1
        user = User(
            email=email or f"{role.value}{counter['n']}@example.org",
            name=f"{role.value.title()} {counter['n']}",
            password=hash_password(PASSWORD),
            role=role,
            department=department,
            isActive=is_active,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def make_driver(db, make_user):
    counter = {"n": 0}

    def _make(status=DriverStatus.APPROVED, with_login=True, name=None) -> Driver:
        counter["n"] += 1
        n = counter["n"]
        user = make_user(RoleName.DRIVER, DepartmentName.TRANSPORT, email=f"driver{n}@example.org") \
            if with_login else None
        now = datetime.now(timezone.utc)
        driver = Driver(
            userId=user.id if user else None,
            name=name or f"Driver {n}",
            email=f"driver{n}@example.org",
            phone="07700900123",
            church="Central",
            zone="Zone 1",
            group="Group A",
            emergencyContactName="Contact",
            emergencyContactPhone="07700900456",
            yearsDrivingExperience=5,
            licenseDurationYears=5,
            availabilityStart=now,
            availabilityEnd=now + timedelta(days=3),
            status=status,
        )
        db.add(driver)
        db.commit()
        db.refresh(driver)
        return driver
    return _make


@pytest.fixture
def make_vehicle(db):
    counter = {"n": 0}

    def _make(make="Ford", model="Galaxy") -> Vehicle:
        counter["n"] += 1
        vehicle = Vehicle(
            make=make,
            model=model,
            registration=f"AB{counter['n']:02d} CDE",
            pickupLocation="Heathrow T5 car hire",
            pickupMileage=12000,
            pickupFuelGauge=100,
            pickupPhotos=[],
            pickupDate=datetime.now(timezone.utc),
        )
        db.add(vehicle)
        db.commit()
        db.refresh(vehicle)
        return vehicle
    return _make


@pytest.fixture
def make_vip(db):
    counter = {"n": 0}

    def _make(name=None) -> VIP:
        counter["n"] += 1
        today = date.today()
        vip = VIP(
            name=name or f"Guest {counter['n']}",
            arrivalDate=today,
            arrivalTime="09:30",
            arrivalAirport="LHR",
            arrivalTerminal="T5",
            departureDate=today + timedelta(days=3),
            departureTime="18:00",
            departureAirport="LHR",
            departureTerminal="T5",
        )
        db.add(vip)
        db.commit()
        db.refresh(vip)
        return vip
    return _make


@pytest.fixture
def admin(make_user) -> User:
    return make_user(RoleName.ADMIN, DepartmentName.ALL)


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        token = create_access_token(user.id, user.role.value, user.department.value)
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def start_time() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0) + timedelta(hours=1)


@pytest.fixture
def password() -> str:
    return PASSWORD
