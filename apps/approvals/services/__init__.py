from .authorization import APPROVAL_AUTHORITY, SUBMISSION_AUTHORITY, ApprovalAuthorization
from .credential_issuer import CredentialIssuer, Credentials
from .approval_engine import ApprovalDecision, ApprovalEngine, RegistrationPayload

__all__ = [
    'APPROVAL_AUTHORITY',
    'SUBMISSION_AUTHORITY',
    'ApprovalAuthorization',
    'ApprovalDecision',
    'ApprovalEngine',
    'CredentialIssuer',
    'Credentials',
    'RegistrationPayload',
]
