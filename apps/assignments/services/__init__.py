from .assignment_engine import AssignmentEngine, AssignmentRequest

__all__ = ['AssignmentEngine', 'AssignmentRequest']
