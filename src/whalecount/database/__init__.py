"""Database package for the whale count service.

Database components should be imported directly from their modules:
    from whalecount.database.core import CoreDatabaseService
    from whalecount.database.model_utils import GUID
"""
