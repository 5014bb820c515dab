# File: mediaconv/core/database/base.py

from sqlalchemy.orm import declarative_base

# The shared registry. The job ledger registers its tables here.
Base = declarative_base()
