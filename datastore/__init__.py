# =============================================================================
# datastore/ - Storage Layer
# =============================================================================
# This package owns the connection to MongoDB:
# - mongo_client.py: process-wide connector (connect once, close on shutdown)
#
# It knows nothing about HTTP and can be tested in isolation.
# =============================================================================

from datastore.mongo_client import DatabaseConnectionError, MongoConnector

__all__ = [
    "DatabaseConnectionError",
    "MongoConnector",
]
