# landrec/db_init.py

from landrec.db import engine
from landrec.db_base import Base

# Import ALL models so SQLAlchemy registers them
from landrec.models.land_analysis import LandAnalysis  # noqa: F401


def init_db(bind=None):
    Base.metadata.create_all(bind=bind or engine)
