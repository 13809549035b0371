"""
Database module for the e-Voting API

Contains seed data and database utilities.
"""
from app.db.seed_data import seed_all, seed_admin, clear_all

__all__ = ["seed_all", "seed_admin", "clear_all"]
