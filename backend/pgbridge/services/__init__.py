from pgbridge.services.database_service import DatabaseService

__all__ = ["DatabaseService"]
