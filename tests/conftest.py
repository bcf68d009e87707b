"""Pytest fixtures for testing"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from tuition_gateway.api.main import create_app
from tuition_gateway.api.dependencies import get_reference_time
from tuition_gateway.infrastructure.database.models import Base, DebtRecord, PaymentConceptRecord
from tuition_gateway.infrastructure.database.session import get_db, get_session_factory
from tuition_gateway.domain.models import Debt, FeePolicy, PaymentConcept


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Fixed "now" for every overdue check in the API tests
REFERENCE_TIME = datetime(2025, 4, 20, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database and a frozen clock"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_reference_time] = lambda: REFERENCE_TIME
    app.dependency_overrides[get_session_factory] = lambda: TestingSessionLocal
    return TestClient(app)


@pytest.fixture
def policy() -> FeePolicy:
    """Default policy: enabled, 10% surcharge"""
    return FeePolicy(enabled=True, surcharge_percent=Decimal("10"))


@pytest.fixture
def overdue_debt() -> Debt:
    """Pending tuition of 4000 due 2025-04-15"""
    return Debt(
        id=1,
        student_id=7,
        concept_id=3,
        amount=Decimal("4000"),
        due_date=datetime(2025, 4, 15),
        status="pending",
        concept=PaymentConcept(name="Colegiatura abril"),
    )


@pytest.fixture
def seeded_student(db: Session) -> int:
    """
    Student 7 with four debts:
    - tuition 4000 due 2025-04-15, pending (overdue, surcharge 400)
    - enrollment 2500 due 2025-03-01, paid
    - insurance 1200 due 2025-04-01, pending but fee-exempt (overdue, no surcharge)
    - tuition 4000 due 2025-04-22, pending (due in 2 days)
    """
    tuition = PaymentConceptRecord(name="Colegiatura", base_amount=Decimal("4000"), fee_exempt=False)
    enrollment = PaymentConceptRecord(name="Inscripción", base_amount=Decimal("2500"), fee_exempt=False)
    insurance = PaymentConceptRecord(name="Seguro escolar", base_amount=Decimal("1200"), fee_exempt=True)
    db.add_all([tuition, enrollment, insurance])
    db.flush()

    db.add_all(
        [
            DebtRecord(student_id=7, concept_id=tuition.id, amount=Decimal("4000"),
                       due_date=datetime(2025, 4, 15), status="pending"),
            DebtRecord(student_id=7, concept_id=enrollment.id, amount=Decimal("2500"),
                       due_date=datetime(2025, 3, 1), status="paid"),
            DebtRecord(student_id=7, concept_id=insurance.id, amount=Decimal("1200"),
                       due_date=datetime(2025, 4, 1), status="pending"),
            DebtRecord(student_id=7, concept_id=tuition.id, amount=Decimal("4000"),
                       due_date=datetime(2025, 4, 22), status="pending"),
        ]
    )
    db.commit()
    return 7
