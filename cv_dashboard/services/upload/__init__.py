from cv_dashboard.services.upload.client import IngestionClient
from cv_dashboard.services.upload.naming import storage_name
from cv_dashboard.services.upload.orchestrator import UploadOrchestrator
from cv_dashboard.services.upload.progress import UploadProgress

__all__ = ["IngestionClient", "UploadOrchestrator", "UploadProgress", "storage_name"]
