from typing import Optional

from sqlalchemy import desc, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .config import HISTORY_LIMIT
from .models import Counter, ReadingRecord
from .scoring import SensorReading

TEST_COUNTER = "water_tests"


def _to_reading(r: ReadingRecord) -> SensorReading:
    return SensorReading(
        ph=r.ph,
        tds=r.tds,
        turbidity=r.turbidity,
        temperature=r.temperature,
        timestamp=r.timestamp,
    )


class MonitorRepository:
    """
    Caller-owned state around the scoring engine:
    - the most recent readings, newest first, bounded to `limit`
    - a monotonically increasing count of analysis runs
    """

    def __init__(self, db: Session, limit: int = HISTORY_LIMIT):
        self.db = db
        self.limit = limit

    # readings
    def add_reading(self, reading: SensorReading) -> SensorReading:
        self.db.add(ReadingRecord(
            ph=reading.ph,
            tds=reading.tds,
            turbidity=reading.turbidity,
            temperature=reading.temperature,
            timestamp=reading.timestamp,
        ))
        self.db.flush()

        stale = (
            self.db.query(ReadingRecord.id)
            .order_by(desc(ReadingRecord.id))
            .offset(self.limit)
            .all()
        )
        if stale:
            ids = [row.id for row in stale]
            self.db.query(ReadingRecord).filter(ReadingRecord.id.in_(ids)).delete(synchronize_session=False)

        self.db.commit()
        return reading

    def history(self) -> list[SensorReading]:
        rows = (
            self.db.query(ReadingRecord)
            .order_by(desc(ReadingRecord.id))
            .limit(self.limit)
            .all()
        )
        return [_to_reading(r) for r in rows]

    def latest(self) -> Optional[SensorReading]:
        r = self.db.query(ReadingRecord).order_by(desc(ReadingRecord.id)).first()
        return _to_reading(r) if r else None

    def clear_history(self) -> int:
        n = self.db.query(ReadingRecord).delete(synchronize_session=False)
        self.db.commit()
        return n

    # analysis counter
    def test_count(self) -> int:
        value = self.db.execute(select(Counter.value).where(Counter.name == TEST_COUNTER)).scalar()
        return value or 0

    def increment_test_count(self) -> tuple[int, int]:
        """
        Atomic +1 in the database, read back inside the same transaction so
        concurrent analyses each get their own (before, after) pair.
        """
        bump = (
            update(Counter)
            .where(Counter.name == TEST_COUNTER)
            .values(value=Counter.value + 1)
            .execution_options(synchronize_session=False)
        )
        if self.db.execute(bump).rowcount == 0:
            try:
                self.db.add(Counter(name=TEST_COUNTER, value=1))
                self.db.commit()
                return 0, 1
            except IntegrityError:
                # another session created the row first
                self.db.rollback()
                self.db.execute(bump)

        after = self.db.execute(select(Counter.value).where(Counter.name == TEST_COUNTER)).scalar_one()
        self.db.commit()
        return after - 1, after
