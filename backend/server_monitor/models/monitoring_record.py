from sqlalchemy import Column, DateTime, Float, Integer, String, Text
from sqlalchemy.sql import func

from server_monitor.core.database import Base


class MonitoringRecordRow(Base):
    __tablename__ = "monitoring_records"

    # Insertion sequence; tie-breaker for records sharing date and time
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(64), unique=True, nullable=False, index=True)
    date = Column(String(10), unique=True, nullable=False, index=True)
    month_year = Column(String(7), nullable=False, index=True)
    time = Column(String(5), nullable=False)
    temperature = Column(Float, nullable=False)
    humidity = Column(Float, nullable=False)
    ac_status = Column(String, default="normal", nullable=False)
    ups_status = Column(String, default="normal", nullable=False)
    rack_count = Column(Integer, default=0, nullable=False)
    active_servers = Column(Integer, default=0, nullable=False)
    power_usage = Column(Float, default=0.0, nullable=False)
    fire_extinguisher_status = Column(String, default="ready", nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<MonitoringRecordRow(id={self.id}, date={self.date}, temp={self.temperature})>"
