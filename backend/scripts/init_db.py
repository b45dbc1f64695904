#!/usr/bin/env python3
"""
Script: init_db.py
Purpose: Create the Tekashi tables from the SQLAlchemy models

Usage:
    cd backend
    python scripts/init_db.py [--drop]

Options:
    --drop    Drop every Tekashi table first (destroys data)
"""
import argparse
import logging
import sys
from pathlib import Path

# Add backend to path
BACKEND_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(BACKEND_DIR))

from dotenv import load_dotenv

load_dotenv(BACKEND_DIR / '.env')

from tekashi.core.database import Base, engine
import tekashi.models  # noqa: F401  (registers the tables on Base.metadata)

logger = logging.getLogger("init_db")


def main():
    parser = argparse.ArgumentParser(description="Create the Tekashi database schema")
    parser.add_argument("--drop", action="store_true", help="Drop existing tables first")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    if args.drop:
        logger.warning("Dropping all tables")
        Base.metadata.drop_all(engine)

    Base.metadata.create_all(engine)
    logger.info(f"Schema ready: {', '.join(sorted(Base.metadata.tables))}")


if __name__ == "__main__":
    main()
