from sqlalchemy import Column, DateTime, Float, Integer, String

from server_monitor.core.database import Base


class MonthlyAggregateRow(Base):
    __tablename__ = "monthly_aggregates"

    month_year = Column(String(7), primary_key=True)
    record_count = Column(Integer, nullable=False)
    avg_temperature = Column(Float, nullable=False)
    min_temperature = Column(Float, nullable=False)
    max_temperature = Column(Float, nullable=False)
    avg_humidity = Column(Float, nullable=False)
    min_humidity = Column(Float, nullable=False)
    max_humidity = Column(Float, nullable=False)
    avg_power_usage = Column(Float, nullable=False)
    normal_days = Column(Integer, default=0, nullable=False)
    warning_days = Column(Integer, default=0, nullable=False)
    danger_days = Column(Integer, default=0, nullable=False)
    ac_issue_count = Column(Integer, default=0, nullable=False)
    ups_issue_count = Column(Integer, default=0, nullable=False)
    computed_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<MonthlyAggregateRow(month={self.month_year}, records={self.record_count})>"
