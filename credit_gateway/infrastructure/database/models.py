"""SQLAlchemy ORM models for persisted credit lines"""

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, Text
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class CreditStateRecord(Base):
    """Credit line for one wallet address"""

    __tablename__ = "credit_state"

    address = Column(Text, primary_key=True)
    credit_limit = Column(Float, nullable=False)
    used = Column(Float, nullable=False)
    apr = Column(Float, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    activities = relationship(
        "CreditActivityRecord",
        back_populates="state",
        cascade="all, delete-orphan",
        order_by=lambda: CreditActivityRecord.id.desc(),
    )


class CreditActivityRecord(Base):
    """Append-only borrow/repay entry"""

    __tablename__ = "credit_activity"

    id = Column(Integer, primary_key=True, autoincrement=True)
    address = Column(Text, ForeignKey("credit_state.address", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(Text, nullable=False)
    amount = Column(Float, nullable=False)
    date_label = Column(Text, nullable=False)
    tx_hash = Column(Text, nullable=False)
    apr = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)

    state = relationship("CreditStateRecord", back_populates="activities")
