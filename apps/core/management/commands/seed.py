from decimal import Decimal
from django.core.management.base import BaseCommand
from django.contrib.auth import get_user_model
from apps.creators.models import Creator
from apps.gifts.models import Gift, GiftRarity
from apps.ledger.models import PaymentInfo, Wallet
from apps.social.models import Post
from apps.subscriptions.models import StreamPackage

User = get_user_model()

PACKAGES = [
    {'name': 'Starter', 'duration': 7, 'price': Decimal('50000'),
     'features': ['720p streams'], 'max_stream_duration': 120},
    {'name': 'Pro', 'duration': 30, 'price': Decimal('180000'),
     'features': ['1080p streams', 'Stream replays'], 'max_concurrent_streams': 2},
    {'name': 'Studio', 'duration': 90, 'price': Decimal('450000'),
     'features': ['1080p streams', 'Stream replays', 'Custom overlays'],
     'max_concurrent_streams': 3, 'priority_support': True},
]

GIFTS = [
    {'name': 'Rose', 'price': 10, 'category': 'flowers', 'rarity': GiftRarity.COMMON},
    {'name': 'Bouquet', 'price': 50, 'category': 'flowers', 'rarity': GiftRarity.RARE},
    {'name': 'Diamond', 'price': 500, 'category': 'jewels', 'rarity': GiftRarity.EPIC},
    {'name': 'Crown', 'price': 2000, 'category': 'jewels', 'rarity': GiftRarity.LEGENDARY},
]


class Command(BaseCommand):
    help = 'Seeds the database with demo accounts, packages, gifts and payment info.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clean',
            action='store_true',
            help='Delete existing demo catalog data before seeding',
        )
        parser.add_argument(
            '--users',
            action='store_true',
            help='Seed users and creator profiles only',
        )
        parser.add_argument(
            '--catalog',
            action='store_true',
            help='Seed stream packages, gifts and payment info only',
        )

    def handle(self, *args, **options):
        seed_all = not any([options['users'], options['catalog']])

        if options['clean']:
            self.stdout.write(self.style.WARNING('Cleaning catalog...'))
            Gift.objects.all().delete()
            StreamPackage.objects.all().delete()
            PaymentInfo.objects.all().delete()
            self.stdout.write(self.style.SUCCESS('Catalog cleaned.'))

        if seed_all or options['users']:
            self._seed_users()

        if seed_all or options['catalog']:
            self._seed_catalog()

        self.stdout.write(self.style.SUCCESS('Seeding completed successfully.'))

    def _seed_users(self):
        self.stdout.write('Seeding Users...')

        if not User.objects.filter(username="admin").exists():
            User.objects.create_superuser(
                username="admin",
                email="admin@example.com",
                password="password123",
                role='ADMIN',
            )
            self.stdout.write(' - Created admin (password123)')

        viewer, created = User.objects.get_or_create(
            username="viewer",
            defaults={'email': 'viewer@example.com', 'first_name': 'Mai', 'last_name': 'Tran'},
        )
        if created:
            viewer.set_password("password123")
            viewer.save()
            Wallet.objects.filter(user_id=viewer.id).update(tokens=1000)
            self.stdout.write(' - Created viewer with 1000 tokens (password123)')

        streamer, created = User.objects.get_or_create(
            username="streamer",
            defaults={'email': 'streamer@example.com', 'role': 'CREATOR'},
        )
        if created:
            streamer.set_password("password123")
            streamer.save()
            Wallet.objects.filter(user_id=streamer.id).update(balance=Decimal('500000'))
            self.stdout.write(' - Created streamer (password123)')

        creator, created = Creator.objects.get_or_create(
            user_id=streamer.id,
            defaults={
                'stage_name': 'Luna',
                'title_bio': 'Late night piano',
                'service': 'Live piano sessions',
                'tags': ['piano', 'lofi'],
                'is_verified': True,
            },
        )
        if created:
            Post.objects.create(
                user_id=streamer.id,
                creator_id=creator.id,
                content='Welcome to my channel! Live every night at 10.',
                tags=['welcome'],
            )
            self.stdout.write(' - Created creator profile Luna')

    def _seed_catalog(self):
        self.stdout.write('Seeding Catalog...')

        for data in PACKAGES:
            _, created = StreamPackage.objects.get_or_create(name=data['name'], defaults=data)
            if created:
                self.stdout.write(f" - Created package {data['name']}")

        for data in GIFTS:
            _, created = Gift.objects.get_or_create(name=data['name'], defaults=data)
            if created:
                self.stdout.write(f" - Created gift {data['name']}")

        _, created = PaymentInfo.objects.get_or_create(
            account_number='0123456789',
            defaults={
                'bank_name': 'Vietcombank',
                'account_name': 'STREAM PLATFORM',
                'note': 'Put your deposit code in the transfer message',
            },
        )
        if created:
            self.stdout.write(' - Created payment info')
