# Import all ORM models here so Alembic's env.py picks up their metadata automatically.
from app.models.energy_reading import EnergyReading
from app.models.query_history import AggregationMode, QueryHistory

__all__ = ["EnergyReading", "QueryHistory", "AggregationMode"]
