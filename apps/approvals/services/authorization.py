"""
Who may submit and who may decide each kind of supervisory registration.

Both rules are lookup tables keyed by role / registered type; nothing else
in the approval flow branches on roles.
"""
from apps.authentication.models import User
from apps.core.exceptions import AuthorizationError
from apps.hierarchy.models import SupervisorRecord

# submitter role -> registered type it may submit
SUBMISSION_AUTHORITY = {
    User.ROLE_MANAGER: SupervisorRecord.TYPE_GENERAL_SUPERVISOR,
    User.ROLE_GENERAL_SUPERVISOR: SupervisorRecord.TYPE_SUPERVISOR,
}

# registered type -> role required to decide it
APPROVAL_AUTHORITY = {
    SupervisorRecord.TYPE_GENERAL_SUPERVISOR: User.ROLE_DIRECTOR,
    SupervisorRecord.TYPE_SUPERVISOR: User.ROLE_MANAGER,
}

# registered type -> role the account receives
ACCOUNT_ROLE_FOR_TYPE = {
    SupervisorRecord.TYPE_GENERAL_SUPERVISOR: User.ROLE_GENERAL_SUPERVISOR,
    SupervisorRecord.TYPE_SUPERVISOR: User.ROLE_SUPERVISOR,
}


class ApprovalAuthorization:

    @staticmethod
    def ensure_can_submit(submitter, supervisor_type):
        if SUBMISSION_AUTHORITY.get(submitter.role) != supervisor_type:
            raise AuthorizationError(
                f"{submitter.get_role_display()} cannot register a {supervisor_type.replace('_', ' ')}"
            )

    @staticmethod
    def ensure_can_decide(approver, supervisor_type):
        if APPROVAL_AUTHORITY.get(supervisor_type) != approver.role:
            raise AuthorizationError(
                f"{approver.get_role_display()} cannot decide a {supervisor_type.replace('_', ' ')} registration"
            )

    @staticmethod
    def decidable_types(role):
        return [record_type for record_type, required in APPROVAL_AUTHORITY.items() if required == role]
