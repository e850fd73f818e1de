"""Built-in notification templates, used when no stored template is active"""

DEFAULT_TEMPLATES = [
    {
        'code': 'approvals.supervisor_approved',
        'name': 'Registration Approved',
        'subject': '{{ supervisor_name }} has been approved',
        'body': (
            'The {{ supervisor_type }} registration for {{ supervisor_name }} has been approved.\n\n'
            'Employee ID: {{ employee_id }}\n'
            'Login email: {{ email }}\n'
            'Temporary password: {{ temporary_password }}\n\n'
            'The password must be changed at first login.'
        ),
        'channel': 'email',
        'variables': ['supervisor_name', 'supervisor_type', 'employee_id', 'email', 'temporary_password'],
    },
    {
        'code': 'approvals.supervisor_rejected',
        'name': 'Registration Rejected',
        'subject': '{{ supervisor_name }} was not approved',
        'body': (
            'The {{ supervisor_type }} registration for {{ supervisor_name }} has been rejected.\n\n'
            'Reason: {{ reason }}'
        ),
        'channel': 'in_app',
        'variables': ['supervisor_name', 'supervisor_type', 'reason'],
    },
    {
        'code': 'assignments.created',
        'name': 'Assignment Created',
        'subject': '{{ operator_name }} assigned to {{ beat_code }}',
        'body': (
            '{{ operator_name }} has been assigned to beat {{ beat_code }} at {{ location_name }} '
            'under {{ supervisor_name }} ({{ shift_type }} shift) from {{ start_date }}.'
        ),
        'channel': 'in_app',
        'variables': ['operator_name', 'beat_code', 'location_name', 'supervisor_name', 'shift_type', 'start_date'],
    },
    {
        'code': 'assignments.ended',
        'name': 'Assignment Ended',
        'subject': 'Assignment to {{ beat_code }} ended',
        'body': 'The assignment of {{ operator_name }} to beat {{ beat_code }} ended on {{ end_date }}.',
        'channel': 'in_app',
        'variables': ['operator_name', 'beat_code', 'end_date'],
    },
    {
        'code': 'assignments.transferred',
        'name': 'Assignment Transferred',
        'subject': '{{ operator_name }} transferred to {{ beat_code }}',
        'body': (
            '{{ operator_name }} has been transferred from beat {{ previous_beat_code }} to '
            '{{ beat_code }} at {{ location_name }} under {{ supervisor_name }} from {{ start_date }}.'
            '{% if transfer_reason %}\n\nReason: {{ transfer_reason }}{% endif %}'
        ),
        'channel': 'in_app',
        'variables': [
            'operator_name', 'beat_code', 'previous_beat_code', 'location_name',
            'supervisor_name', 'start_date', 'transfer_reason',
        ],
    },
]

DEFAULT_TEMPLATES_BY_CODE = {template['code']: template for template in DEFAULT_TEMPLATES}

REDACTED_PLACEHOLDER = '[sent once by e-mail]'
