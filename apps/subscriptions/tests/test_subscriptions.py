"""
Tests for stream packages and creator package subscriptions.
"""
import json
from datetime import timedelta
from decimal import Decimal
from django.test import TestCase, Client
from django.contrib.auth import get_user_model
from django.utils import timezone

from apps.audit.models import AuditLog
from apps.identity.models import UserRole
from apps.ledger.models import Wallet, WalletTransaction, WalletTransactionType
from apps.subscriptions.models import StreamPackage, CreatorPackageSubscription, SubscriptionStatus
from apps.subscriptions import services
from apps.subscriptions.tasks import expire_finished_subscriptions


User = get_user_model()


class SubscriptionTestCase(TestCase):
    def setUp(self):
        self.client = Client()
        self.creator = User.objects.create_user(username='streamer', password='pw', role=UserRole.CREATOR)
        self.viewer = User.objects.create_user(username='viewer', password='pw')
        self.admin = User.objects.create_user(username='admin', password='pw', role=UserRole.ADMIN)
        Wallet.objects.filter(user_id=self.creator.id).update(balance=Decimal('500000.00'))
        self.package = StreamPackage.objects.create(
            name='Pro', duration=30, price=Decimal('300000.00'), features=['HD', '2 streams'],
        )
        self.hidden = StreamPackage.objects.create(
            name='Legacy', duration=7, price=Decimal('10000.00'), is_active=False,
        )

    def post_json(self, url, payload):
        return self.client.post(url, data=json.dumps(payload), content_type='application/json')


class SubscribeServiceTest(SubscriptionTestCase):
    def test_subscribe_debits_wallet(self):
        sub = services.subscribe(self.creator.id, self.package.id)

        self.assertEqual(sub.status, SubscriptionStatus.ACTIVE)
        self.assertEqual(sub.price, Decimal('300000.00'))
        self.assertAlmostEqual((sub.end_date - sub.start_date).days, 30)
        wallet = Wallet.objects.get(user_id=self.creator.id)
        self.assertEqual(wallet.balance, Decimal('200000.00'))
        entry = WalletTransaction.objects.get(transaction_type=WalletTransactionType.PACKAGE_PURCHASE)
        self.assertEqual(entry.amount, Decimal('-300000.00'))
        self.assertEqual(entry.balance_after, Decimal('200000.00'))
        self.assertTrue(AuditLog.objects.filter(action='PACKAGE_PURCHASED', target_id=sub.id).exists())

    def test_second_subscription_rejected(self):
        services.subscribe(self.creator.id, self.package.id)
        with self.assertRaises(ValueError):
            services.subscribe(self.creator.id, self.package.id)

    def test_repeat_purchase_charges_once(self):
        Wallet.objects.filter(user_id=self.creator.id).update(balance=Decimal('1000000.00'))
        services.subscribe(self.creator.id, self.package.id)
        with self.assertRaises(ValueError):
            services.subscribe(self.creator.id, self.package.id)

        self.assertEqual(CreatorPackageSubscription.objects.filter(creator_id=self.creator.id).count(), 1)
        purchases = WalletTransaction.objects.filter(
            user_id=self.creator.id, transaction_type=WalletTransactionType.PACKAGE_PURCHASE,
        )
        self.assertEqual(purchases.count(), 1)
        self.assertEqual(Wallet.objects.get(user_id=self.creator.id).balance, Decimal('700000.00'))

    def test_insufficient_balance_leaves_nothing_behind(self):
        Wallet.objects.filter(user_id=self.creator.id).update(balance=Decimal('100.00'))
        with self.assertRaises(ValueError):
            services.subscribe(self.creator.id, self.package.id)
        self.assertFalse(CreatorPackageSubscription.objects.exists())
        self.assertEqual(Wallet.objects.get(user_id=self.creator.id).balance, Decimal('100.00'))

    def test_inactive_package_is_not_found(self):
        with self.assertRaises(ValueError):
            services.subscribe(self.creator.id, self.hidden.id)

    def test_expired_subscription_allows_new_purchase(self):
        sub = services.subscribe(self.creator.id, self.package.id)
        CreatorPackageSubscription.objects.filter(id=sub.id).update(end_date=timezone.now() - timedelta(days=1))
        services.subscribe(self.creator.id, self.package.id)
        self.assertEqual(CreatorPackageSubscription.objects.count(), 2)

    def test_expiry_task(self):
        sub = services.subscribe(self.creator.id, self.package.id)
        CreatorPackageSubscription.objects.filter(id=sub.id).update(end_date=timezone.now() - timedelta(minutes=1))

        self.assertEqual(expire_finished_subscriptions(), 1)
        self.assertEqual(CreatorPackageSubscription.objects.get(id=sub.id).status, SubscriptionStatus.EXPIRED)
        self.assertEqual(expire_finished_subscriptions(), 0)


class SubscriptionAPITest(SubscriptionTestCase):
    def test_regular_user_cannot_subscribe(self):
        self.client.force_login(self.viewer)
        response = self.post_json('/api/v1/subscriptions', {'package_id': str(self.package.id)})
        self.assertEqual(response.status_code, 403)

    def test_subscribe_me_and_cancel(self):
        self.client.force_login(self.creator)
        response = self.client.get('/api/v1/subscriptions/me')
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(response.json())

        response = self.post_json('/api/v1/subscriptions', {'package_id': str(self.package.id)})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['package']['name'], 'Pro')

        response = self.client.get('/api/v1/subscriptions/me')
        self.assertEqual(response.json()['status'], 'ACTIVE')

        response = self.client.patch('/api/v1/subscriptions/me/cancel')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], 'CANCELLED')

        response = self.client.patch('/api/v1/subscriptions/me/cancel')
        self.assertEqual(response.status_code, 404)

    def test_insufficient_funds_is_400(self):
        Wallet.objects.filter(user_id=self.creator.id).update(balance=Decimal('0.00'))
        self.client.force_login(self.creator)
        response = self.post_json('/api/v1/subscriptions', {'package_id': str(self.package.id)})
        self.assertEqual(response.status_code, 400)

    def test_listing_scopes(self):
        services.subscribe(self.creator.id, self.package.id)
        other = User.objects.create_user(username='other', password='pw', role=UserRole.CREATOR)

        self.client.force_login(other)
        self.assertEqual(self.client.get('/api/v1/subscriptions').json()['pagination']['total'], 0)

        self.client.force_login(self.admin)
        response = self.client.get(f'/api/v1/subscriptions?creator_id={self.creator.id}')
        self.assertEqual(response.json()['pagination']['total'], 1)


class StreamPackageAPITest(SubscriptionTestCase):
    def test_creators_see_active_packages_only(self):
        self.client.force_login(self.creator)
        response = self.client.get('/api/v1/stream-packages')
        self.assertEqual([p['name'] for p in response.json()['items']], ['Pro'])
        response = self.client.get(f'/api/v1/stream-packages/{self.hidden.id}')
        self.assertEqual(response.status_code, 404)

    def test_admin_sees_all_by_price(self):
        self.client.force_login(self.admin)
        response = self.client.get('/api/v1/stream-packages')
        self.assertEqual([p['name'] for p in response.json()['items']], ['Legacy', 'Pro'])

    def test_admin_crud(self):
        self.client.force_login(self.admin)
        response = self.post_json('/api/v1/stream-packages', {
            'name': 'Starter', 'duration': 7, 'price': '50000',
        })
        self.assertEqual(response.status_code, 201)
        package_id = response.json()['id']

        response = self.client.put(
            f'/api/v1/stream-packages/{package_id}',
            data=json.dumps({'price': '45000'}),
            content_type='application/json',
        )
        self.assertEqual(Decimal(response.json()['price']), Decimal('45000'))

        response = self.client.delete(f'/api/v1/stream-packages/{package_id}')
        self.assertEqual(response.status_code, 204)

    def test_bought_package_cannot_be_deleted(self):
        services.subscribe(self.creator.id, self.package.id)
        self.client.force_login(self.admin)
        response = self.client.delete(f'/api/v1/stream-packages/{self.package.id}')
        self.assertEqual(response.status_code, 400)

    def test_non_admin_cannot_create(self):
        self.client.force_login(self.creator)
        response = self.post_json('/api/v1/stream-packages', {'name': 'x', 'duration': 1, 'price': '1'})
        self.assertEqual(response.status_code, 403)
