from .auto_delete import start_deletion_job

__all__ = ['start_deletion_job']
