from django.db import IntegrityError, transaction
from django.test import TestCase, override_settings

from apps.assignments.models import Assignment
from apps.core.exceptions import AuthorizationError, InvalidStateError, NotFoundError, ValidationError
from apps.hierarchy.models import SupervisorRecord
from apps.hierarchy.services import HierarchyRegistry
from tests.factories import (
    AssignmentFactory,
    BeatFactory,
    DirectorFactory,
    GeneralSupervisorRecordFactory,
    LocationFactory,
    ManagerFactory,
    OperatorFactory,
    SupervisorRecordFactory,
)


class LocationConsistencyTests(TestCase):

    def setUp(self):
        self.location = LocationFactory()
        self.other_location = LocationFactory()

    def test_bound_supervisor_matches(self):
        record = SupervisorRecordFactory(location=self.location)
        self.assertEqual(HierarchyRegistry.assert_location_consistency(record.pk, self.location.pk), record)

    def test_bound_supervisor_mismatch(self):
        record = SupervisorRecordFactory(location=self.location)
        with self.assertRaises(ValidationError):
            HierarchyRegistry.assert_location_consistency(record.pk, self.other_location.pk)

    def test_unbound_supervisor_matches_any_location(self):
        record = SupervisorRecordFactory(location=None)
        HierarchyRegistry.assert_location_consistency(record.pk, self.other_location.pk)

    def test_general_supervisor_cannot_oversee_beat(self):
        record = GeneralSupervisorRecordFactory()
        with self.assertRaises(ValidationError):
            HierarchyRegistry.assert_location_consistency(record.pk, self.location.pk)

    def test_rejected_supervisor(self):
        record = SupervisorRecordFactory(
            location=self.location,
            approval_status=SupervisorRecord.STATUS_REJECTED,
            rejection_reason='No licence',
        )
        with self.assertRaises(ValidationError):
            HierarchyRegistry.assert_location_consistency(record.pk, self.location.pk)

    def test_string_ids_match_bound_location(self):
        record = SupervisorRecordFactory(location=self.location)
        result = HierarchyRegistry.assert_location_consistency(str(record.pk), str(self.location.pk))
        self.assertEqual(result, record)

    def test_unknown_location(self):
        record = SupervisorRecordFactory(location=self.location)
        with self.assertRaises(NotFoundError):
            HierarchyRegistry.assert_location_consistency(record.pk, '00000000-0000-0000-0000-000000000000')

    def test_unknown_supervisor(self):
        with self.assertRaises(NotFoundError):
            HierarchyRegistry.assert_location_consistency('00000000-0000-0000-0000-000000000000', self.location.pk)


class GeneralSupervisorLinkTests(TestCase):

    def setUp(self):
        self.manager = ManagerFactory()
        self.gs_record = GeneralSupervisorRecordFactory()
        self.supervisor = SupervisorRecordFactory()

    def test_link_and_unlink(self):
        record = HierarchyRegistry.link_general_supervisor(self.manager, self.supervisor.pk, self.gs_record.pk)
        self.assertEqual(record.general_supervisor, self.gs_record)
        self.assertEqual(list(HierarchyRegistry.get_supervisors_under(self.gs_record.pk)), [self.supervisor])

        record = HierarchyRegistry.link_general_supervisor(self.manager, self.supervisor.pk, None)
        self.assertIsNone(record.general_supervisor)

    def test_general_supervisor_cannot_report_to_general_supervisor(self):
        other = GeneralSupervisorRecordFactory()
        with self.assertRaises(ValidationError):
            HierarchyRegistry.link_general_supervisor(self.manager, other.pk, self.gs_record.pk)

    def test_target_must_be_approved_general_supervisor(self):
        pending = GeneralSupervisorRecordFactory(approval_status=SupervisorRecord.STATUS_PENDING)
        with self.assertRaises(ValidationError):
            HierarchyRegistry.link_general_supervisor(self.manager, self.supervisor.pk, pending.pk)
        with self.assertRaises(ValidationError):
            HierarchyRegistry.link_general_supervisor(self.manager, self.supervisor.pk, SupervisorRecordFactory().pk)

    def test_only_admins_can_link(self):
        with self.assertRaises(AuthorizationError):
            HierarchyRegistry.link_general_supervisor(self.gs_record.account, self.supervisor.pk, self.gs_record.pk)

    def test_pending_record_cannot_be_linked(self):
        pending = SupervisorRecordFactory(approval_status=SupervisorRecord.STATUS_PENDING)
        with self.assertRaises(InvalidStateError):
            HierarchyRegistry.link_general_supervisor(self.manager, pending.pk, self.gs_record.pk)

    def test_cycle_detected(self):
        with self.assertRaises(ValidationError):
            HierarchyRegistry.assert_acyclic(self.gs_record, self.gs_record)

    @override_settings(HIERARCHY_MAX_DEPTH=0)
    def test_depth_bound(self):
        with self.assertRaises(ValidationError):
            HierarchyRegistry.link_general_supervisor(self.manager, self.supervisor.pk, self.gs_record.pk)


class SupervisorLocationTests(TestCase):

    def setUp(self):
        self.director = DirectorFactory()
        self.old_location = LocationFactory()
        self.new_location = LocationFactory()
        self.record = SupervisorRecordFactory(location=self.old_location)

    def test_reassign(self):
        record = HierarchyRegistry.reassign_supervisor_location(self.director, self.record.pk, self.new_location.pk)
        self.assertEqual(record.location, self.new_location)

    def test_unbind(self):
        record = HierarchyRegistry.reassign_supervisor_location(self.director, self.record.pk, None)
        self.assertIsNone(record.location)

    def test_existing_assignments_are_kept(self):
        assignment = AssignmentFactory(supervisor=self.record, beat=BeatFactory(location=self.old_location))
        HierarchyRegistry.reassign_supervisor_location(self.director, self.record.pk, self.new_location.pk)
        assignment.refresh_from_db()
        self.assertEqual(assignment.status, Assignment.STATUS_ACTIVE)
        self.assertEqual(assignment.supervisor, self.record)
        self.assertEqual(assignment.location, self.old_location)

    def test_inactive_location(self):
        closed = LocationFactory(is_active=False)
        with self.assertRaises(ValidationError):
            HierarchyRegistry.reassign_supervisor_location(self.director, self.record.pk, closed.pk)

    def test_general_supervisor_has_no_location(self):
        gs_record = GeneralSupervisorRecordFactory()
        with self.assertRaises(ValidationError):
            HierarchyRegistry.reassign_supervisor_location(self.director, gs_record.pk, self.new_location.pk)

    def test_only_approved_records(self):
        pending = SupervisorRecordFactory(approval_status=SupervisorRecord.STATUS_PENDING)
        with self.assertRaises(InvalidStateError):
            HierarchyRegistry.reassign_supervisor_location(self.director, pending.pk, self.new_location.pk)

    def test_operator_cannot_reassign(self):
        operator = OperatorFactory()
        with self.assertRaises(AuthorizationError):
            HierarchyRegistry.reassign_supervisor_location(operator, self.record.pk, None)


class HierarchyReadTests(TestCase):

    def test_active_locations_count_active_beats(self):
        location = LocationFactory()
        BeatFactory.create_batch(2, location=location)
        BeatFactory(location=location, is_active=False)
        LocationFactory(is_active=False)

        locations = list(HierarchyRegistry.get_active_locations())
        self.assertEqual(locations, [location])
        self.assertEqual(locations[0].total_beats, 2)

    def test_beats_by_location(self):
        location = LocationFactory()
        active = BeatFactory(location=location)
        inactive = BeatFactory(location=location, is_active=False)

        self.assertEqual(list(HierarchyRegistry.get_beats_by_location(location.pk)), [active])
        self.assertEqual(
            set(HierarchyRegistry.get_beats_by_location(location.pk, include_inactive=True)),
            {active, inactive},
        )

    def test_approved_supervisors_by_location(self):
        location = LocationFactory()
        here = SupervisorRecordFactory(location=location)
        SupervisorRecordFactory()
        SupervisorRecordFactory(location=location, approval_status=SupervisorRecord.STATUS_PENDING)

        self.assertEqual(list(HierarchyRegistry.get_approved_supervisors(location.pk)), [here])
        self.assertEqual(HierarchyRegistry.get_approved_general_supervisors().count(), 0)


class SupervisorRecordConstraintTests(TestCase):

    def test_general_supervisor_cannot_hold_location(self):
        record = GeneralSupervisorRecordFactory()
        with self.assertRaises(IntegrityError), transaction.atomic():
            SupervisorRecord.objects.filter(pk=record.pk).update(location=LocationFactory())

    def test_rejection_reason_requires_rejected_status(self):
        record = SupervisorRecordFactory()
        with self.assertRaises(IntegrityError), transaction.atomic():
            SupervisorRecord.objects.filter(pk=record.pk).update(rejection_reason='Incomplete documents')
