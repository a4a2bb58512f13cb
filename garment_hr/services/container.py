from garment_hr.core.config import settings
from garment_hr.repositories.data_store import DataStore
from garment_hr.services.account_service import AccountService
from garment_hr.services.audit_service import AuditLogger
from garment_hr.services.auth_service import AuthService
from garment_hr.services.directory_service import DirectoryService


store = DataStore(departments=settings.departments)
audit_logger = AuditLogger()

account_service = AccountService(store=store, audit_logger=audit_logger)
account_service.ensure_default_admin(settings.default_admin_username, settings.default_admin_password)
auth_service = AuthService(store=store, accounts=account_service, audit_logger=audit_logger)
directory_service = DirectoryService(store=store)
