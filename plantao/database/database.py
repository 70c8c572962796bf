# plantao/database/database.py
"""
SQLAlchemy database setup and models.
"""

from datetime import datetime

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Time,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

from plantao.core.config import DATABASE_URL
from plantao.core.types import AssignmentStatus

engine = create_engine(DATABASE_URL, connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {})
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


class Tenant(Base):
    """An isolated organisational account (one hospital)."""

    __tablename__ = "tenants"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False)
    slug = Column(String(60), unique=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)


class Worker(Base):
    """A plantonista assignable to shifts."""

    __tablename__ = "workers"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    assignments = relationship("ShiftAssignment", back_populates="worker")


class Sector(Base):
    """Sub-unit of a tenant. Default values are nullable; zero is a valid default."""

    __tablename__ = "sectors"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    default_day_value = Column(Float, nullable=True)
    default_night_value = Column(Float, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    updated_by = Column(Integer, nullable=True)

    shifts = relationship("Shift", back_populates="sector")


class Shift(Base):
    """A dated, timed work slot."""

    __tablename__ = "shifts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False)
    sector_id = Column(Integer, ForeignKey("sectors.id"), nullable=True)
    date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    base_value = Column(Float, nullable=True)
    title = Column(String(120), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    sector = relationship("Sector", back_populates="shifts")
    assignments = relationship("ShiftAssignment", back_populates="shift")

    __table_args__ = (Index("ix_shifts_tenant_sector_date", "tenant_id", "sector_id", "date"),)

    def __repr__(self):
        return f"<Shift(id={self.id}, sector_id={self.sector_id}, date={self.date}, start={self.start_time})>"


class ShiftAssignment(Base):
    """Worker on a shift. cached_value NULL means "resolve again", 0 is a pinned zero."""

    __tablename__ = "shift_assignments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False)
    shift_id = Column(Integer, ForeignKey("shifts.id"), nullable=False, index=True)
    worker_id = Column(Integer, ForeignKey("workers.id"), nullable=False, index=True)
    cached_value = Column(Float, nullable=True)
    status = Column(SQLEnum(AssignmentStatus), default=AssignmentStatus.ASSIGNED, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    shift = relationship("Shift", back_populates="assignments")
    worker = relationship("Worker", back_populates="assignments")

    @property
    def worker_name(self) -> str | None:
        return self.worker.name if self.worker else None

    def __repr__(self):
        return f"<ShiftAssignment(id={self.id}, shift_id={self.shift_id}, worker_id={self.worker_id})>"


class RateOverride(Base):
    """Individual day/night value for one worker in one sector and month."""

    __tablename__ = "rate_overrides"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=False)
    sector_id = Column(Integer, ForeignKey("sectors.id"), nullable=False)
    worker_id = Column(Integer, ForeignKey("workers.id"), nullable=False)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)
    day_value = Column(Float, nullable=True)
    night_value = Column(Float, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    updated_by = Column(Integer, nullable=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "sector_id", "worker_id", "month", "year", name="uq_rate_override_scope"),
    )

    def __repr__(self):
        return (
            f"<RateOverride(sector_id={self.sector_id}, worker_id={self.worker_id}, "
            f"{self.month:02d}/{self.year}, day={self.day_value}, night={self.night_value})>"
        )


def create_tables():
    """Create all database tables."""
    Base.metadata.create_all(bind=engine)


def get_db():
    """Dependency for getting database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
