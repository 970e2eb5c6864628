from boerenkompas.models.tenant import Tenant, TenantMember, TenantRole, UserSettings
from boerenkompas.models.document import Document, DocumentStatus
from boerenkompas.models.task import Task, TaskSource, TaskStatus
from boerenkompas.models.export import Export

__all__ = [
    "Tenant", "TenantMember", "TenantRole", "UserSettings",
    "Document", "DocumentStatus",
    "Task", "TaskSource", "TaskStatus",
    "Export",
]
