"""SQLAlchemy ORM models for the billing tables"""

from sqlalchemy import Column, String, Boolean, DateTime, Integer, ForeignKey, Numeric, Text
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class PaymentConceptRecord(Base):
    """Billable concept (monthly tuition, enrollment...)"""

    __tablename__ = "payment_concept"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    base_amount = Column(Numeric(12, 2), nullable=False)
    school_year = Column(String(16), nullable=True)
    fee_exempt = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    debts = relationship("DebtRecord", back_populates="concept")


class DebtRecord(Base):
    """Amount a student owes for a concept"""

    __tablename__ = "debt"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_id = Column(Integer, nullable=False, index=True)
    concept_id = Column(Integer, ForeignKey("payment_concept.id"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    due_date = Column(DateTime(timezone=True), nullable=False)
    status = Column(Text, nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    concept = relationship("PaymentConceptRecord", back_populates="debts")
    reminders = relationship("PaymentReminderRecord", back_populates="debt", cascade="all, delete-orphan")


class PaymentReminderRecord(Base):
    """Reminder sent for a debt, used to avoid duplicate notices"""

    __tablename__ = "payment_reminder"

    id = Column(Integer, primary_key=True, autoincrement=True)
    debt_id = Column(Integer, ForeignKey("debt.id", ondelete="CASCADE"), nullable=False, index=True)
    student_id = Column(Integer, nullable=False, index=True)
    risk_level = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="queued")  # queued | sent | failed
    sent_at = Column(DateTime(timezone=True), nullable=False)

    debt = relationship("DebtRecord", back_populates="reminders")
