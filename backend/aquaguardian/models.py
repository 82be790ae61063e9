from sqlalchemy import BigInteger, Column, DateTime, Float, Integer, String
from datetime import datetime
from .database import Base


class ReadingRecord(Base):
    __tablename__ = "sensor_readings"

    id = Column(Integer, primary_key=True)

    ph = Column(Float, nullable=False)
    tds = Column(Float, nullable=False)
    turbidity = Column(Float, nullable=False)
    temperature = Column(Float, nullable=False)
    timestamp = Column(BigInteger, nullable=False, index=True)  # ms since epoch

    created_at = Column(DateTime, default=datetime.utcnow)


class Counter(Base):
    __tablename__ = "counters"

    name = Column(String, primary_key=True)
    value = Column(Integer, nullable=False, default=0)
