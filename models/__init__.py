"""Persistence layer: the process-wide DBStorage instance."""
from models.db_storage import DBStorage

storage = DBStorage()
