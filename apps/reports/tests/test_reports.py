"""
Tests for user reports and moderation.
"""
import json
from uuid import uuid4
from django.test import TestCase, Client
from django.contrib.auth import get_user_model

from apps.audit.models import AuditLog
from apps.core.exceptions import ConflictError
from apps.identity.models import UserRole
from apps.reports.models import Report, ReportStatus
from apps.reports import services


User = get_user_model()


class ReportTestCase(TestCase):
    def setUp(self):
        self.client = Client()
        self.reporter = User.objects.create_user(username='reporter', password='pw')
        self.troll = User.objects.create_user(username='troll', password='pw')
        self.admin = User.objects.create_user(username='admin', password='pw', role=UserRole.ADMIN)

    def post_json(self, url, payload):
        return self.client.post(url, data=json.dumps(payload), content_type='application/json')

    def patch_json(self, url, payload):
        return self.client.patch(url, data=json.dumps(payload), content_type='application/json')

    def file_report(self, report_type='SPAM'):
        return services.create_report(self.reporter.id, self.troll.id, report_type, 'Posting links')


class CreateReportTest(ReportTestCase):
    def test_create(self):
        self.client.force_login(self.reporter)
        response = self.post_json('/api/v1/reports/', {
            'reported_user_id': str(self.troll.id),
            'type': 'harassment',
            'reason': 'Rude messages',
            'evidence': ['https://example.com/shot.png'],
        })
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body['type'], 'HARASSMENT')
        self.assertEqual(body['status'], 'PENDING')
        self.assertEqual(body['reported_user']['username'], 'troll')

    def test_unknown_user_is_404(self):
        self.client.force_login(self.reporter)
        response = self.post_json('/api/v1/reports/', {
            'reported_user_id': str(uuid4()),
            'type': 'SPAM',
            'reason': 'x',
        })
        self.assertEqual(response.status_code, 404)

    def test_self_report_is_400(self):
        self.client.force_login(self.reporter)
        response = self.post_json('/api/v1/reports/', {
            'reported_user_id': str(self.reporter.id), 'type': 'SPAM', 'reason': 'me',
        })
        self.assertEqual(response.status_code, 400)

    def test_open_duplicate_is_409(self):
        self.file_report()
        self.client.force_login(self.reporter)
        response = self.post_json('/api/v1/reports/', {
            'reported_user_id': str(self.troll.id), 'type': 'SPAM', 'reason': 'Again',
        })
        self.assertEqual(response.status_code, 409)

    def test_closed_report_allows_new_one(self):
        report = self.file_report()
        services.update_report(report.id, self.admin.id, status='DISMISSED')
        self.file_report()
        self.assertEqual(Report.objects.count(), 2)

    def test_different_type_is_allowed(self):
        self.file_report('SPAM')
        self.file_report('FAKE_PROFILE')
        self.assertEqual(Report.objects.count(), 2)

    def test_report_under_review_blocks_duplicate(self):
        report = self.file_report()
        services.update_report(report.id, self.admin.id, status='UNDER_REVIEW')
        with self.assertRaises(ConflictError):
            self.file_report()
        self.assertEqual(
            Report.objects.filter(reporter_id=self.reporter.id, reported_user_id=self.troll.id).count(), 1,
        )


class ModerationTest(ReportTestCase):
    def test_resolve_stamps_admin_and_audits(self):
        report = self.file_report()
        self.client.force_login(self.admin)
        response = self.patch_json(f'/api/v1/reports/{report.id}', {
            'status': 'RESOLVED', 'action_taken': 'Account warned',
        })
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['resolved_by_id'], str(self.admin.id))
        self.assertIsNotNone(body['resolved_at'])
        self.assertTrue(AuditLog.objects.filter(action='REPORT_STATUS_CHANGED', target_id=report.id).exists())

    def test_under_review_does_not_stamp(self):
        report = self.file_report()
        updated = services.update_report(report.id, self.admin.id, status='UNDER_REVIEW')
        self.assertIsNone(updated.resolved_at)

    def test_list_is_admin_only(self):
        self.file_report()
        self.client.force_login(self.reporter)
        self.assertEqual(self.client.get('/api/v1/reports/').status_code, 403)

        self.client.force_login(self.admin)
        response = self.client.get('/api/v1/reports/?status=pending&sort_by=type&sort_order=asc')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['pagination']['total'], 1)

    def test_invalid_sort(self):
        self.client.force_login(self.admin)
        self.assertEqual(self.client.get('/api/v1/reports/?sort_by=reason').status_code, 400)

    def test_stats(self):
        self.file_report('SPAM')
        report = self.file_report('OTHER')
        services.update_report(report.id, self.admin.id, status='RESOLVED')

        self.client.force_login(self.admin)
        response = self.client.get('/api/v1/reports/stats')
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['total'], 2)
        self.assertEqual(body['by_status']['PENDING'], 1)
        self.assertEqual(body['by_status']['RESOLVED'], 1)
        self.assertEqual(body['by_type']['SPAM'], 1)
        self.assertEqual(sum(d['count'] for d in body['daily']), 2)


class ReporterAccessTest(ReportTestCase):
    def test_only_reporter_or_admin_can_read(self):
        report = self.file_report()
        self.client.force_login(self.troll)
        self.assertEqual(self.client.get(f'/api/v1/reports/{report.id}').status_code, 403)
        self.client.force_login(self.reporter)
        self.assertEqual(self.client.get(f'/api/v1/reports/{report.id}').status_code, 200)
        self.client.force_login(self.admin)
        self.assertEqual(self.client.get(f'/api/v1/reports/{report.id}').status_code, 200)

    def test_my_reports(self):
        self.file_report()
        self.client.force_login(self.reporter)
        response = self.client.get('/api/v1/reports/me')
        self.assertEqual(response.json()['pagination']['total'], 1)

    def test_delete_rules(self):
        report = self.file_report()
        self.client.force_login(self.troll)
        self.assertEqual(self.client.delete(f'/api/v1/reports/{report.id}').status_code, 403)

        Report.objects.filter(id=report.id).update(status=ReportStatus.UNDER_REVIEW)
        self.client.force_login(self.reporter)
        self.assertEqual(self.client.delete(f'/api/v1/reports/{report.id}').status_code, 400)

        Report.objects.filter(id=report.id).update(status=ReportStatus.PENDING)
        self.assertEqual(self.client.delete(f'/api/v1/reports/{report.id}').status_code, 204)
