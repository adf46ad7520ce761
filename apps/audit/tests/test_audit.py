"""
Tests for the audit trail.
"""
import uuid
from django.test import TestCase, Client
from django.contrib.auth import get_user_model

from apps.identity.models import UserRole
from apps.audit.audit_service import log_action, AuditAction
from apps.audit.models import AuditLog


User = get_user_model()


class LogActionTest(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(username='payer', password='pw')

    def test_records_entry(self):
        target = uuid.uuid4()
        log = log_action(
            action=AuditAction.WALLET_TRANSFER,
            target_type="Wallet",
            target_id=target,
            performed_by=self.user.id,
            target_label="Transfer 10",
            context={"amount": "10.00"},
        )
        self.assertIsNotNone(log)
        stored = AuditLog.objects.get(id=log.id)
        self.assertEqual(stored.performed_by, self.user)
        self.assertEqual(stored.target_id, target)
        self.assertEqual(stored.context, {"amount": "10.00"})

    def test_accepts_user_instance_and_system_actor(self):
        log = log_action(action=AuditAction.GIFT_SENT, target_type="Gift",
                         target_id=uuid.uuid4(), performed_by=self.user)
        self.assertEqual(log.performed_by_id, self.user.id)
        log = log_action(action=AuditAction.GIFT_SENT, target_type="Gift", target_id=uuid.uuid4())
        self.assertIsNone(log.performed_by_id)

    def test_never_raises(self):
        log = log_action(action=AuditAction.GIFT_SENT, target_type="Gift", target_id="not-a-uuid")
        self.assertIsNone(log)
        self.assertEqual(AuditLog.objects.count(), 0)


class AuditAPITest(TestCase):
    def setUp(self):
        self.client = Client()
        self.member = User.objects.create_user(username='member', password='pw')
        self.admin = User.objects.create_user(username='admin', password='pw', role=UserRole.ADMIN)
        self.log = log_action(action=AuditAction.REPORT_STATUS_CHANGED, target_type="Report",
                              target_id=uuid.uuid4(), performed_by=self.admin)
        log_action(action=AuditAction.GIFT_SENT, target_type="Gift",
                   target_id=uuid.uuid4(), performed_by=self.member)

    def test_requires_admin(self):
        self.assertEqual(self.client.get('/api/v1/audit-logs/').status_code, 401)
        self.client.force_login(self.member)
        self.assertEqual(self.client.get('/api/v1/audit-logs/').status_code, 403)

    def test_list_and_filter(self):
        self.client.force_login(self.admin)
        body = self.client.get('/api/v1/audit-logs/').json()
        self.assertEqual(body['pagination']['total'], 2)

        body = self.client.get(f'/api/v1/audit-logs/?action={AuditAction.GIFT_SENT}').json()
        self.assertEqual(len(body['items']), 1)
        self.assertEqual(body['items'][0]['performed_by_name'], 'member')

    def test_detail(self):
        self.client.force_login(self.admin)
        response = self.client.get(f'/api/v1/audit-logs/{self.log.id}')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['action'], AuditAction.REPORT_STATUS_CHANGED)
        self.assertEqual(self.client.get(f'/api/v1/audit-logs/{uuid.uuid4()}').status_code, 404)
