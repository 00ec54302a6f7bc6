"""
data_collection/services package marker.
"""

from data_collection.services.ingestion_orchestrator import IngestionOrchestrator

__all__ = ["IngestionOrchestrator"]
