"""Services for Subscriptions app: stream packages and creator subscriptions."""
import logging
from datetime import timedelta
from typing import List, Optional, Tuple

from django.db import transaction
from django.utils import timezone

from apps.audit.audit_service import log_action, AuditAction
from apps.core.exceptions import NotFoundError
from apps.core.pagination import PageMeta, paginate
from apps.ledger.models import WalletTransactionType
from apps.ledger.services import debit_balance, lock_wallet, to_money
from .models import StreamPackage, CreatorPackageSubscription, SubscriptionStatus
from .dtos import StreamPackageDTO, SubscriptionDTO

logger = logging.getLogger(__name__)

PACKAGE_FIELDS = (
    'name', 'description', 'duration', 'price', 'features', 'max_concurrent_streams',
    'max_stream_duration', 'priority_support', 'is_active',
)


def _package_dto(package: StreamPackage) -> StreamPackageDTO:
    return StreamPackageDTO(
        id=package.id,
        name=package.name,
        description=package.description,
        duration=package.duration,
        price=package.price,
        features=list(package.features or []),
        max_concurrent_streams=package.max_concurrent_streams,
        max_stream_duration=package.max_stream_duration,
        priority_support=package.priority_support,
        is_active=package.is_active,
        created_at=package.created_at,
    )


def _subscription_dto(sub: CreatorPackageSubscription, package: Optional[StreamPackage] = None) -> SubscriptionDTO:
    return SubscriptionDTO(
        id=sub.id,
        creator_id=sub.creator_id,
        package_id=sub.package_id,
        start_date=sub.start_date,
        end_date=sub.end_date,
        price=sub.price,
        status=sub.status,
        auto_renew=sub.auto_renew,
        created_at=sub.created_at,
        package=_package_dto(package) if package else None,
    )


def _with_packages(subs: List[CreatorPackageSubscription]) -> List[SubscriptionDTO]:
    packages = StreamPackage.objects.in_bulk({s.package_id for s in subs})
    return [_subscription_dto(s, packages.get(s.package_id)) for s in subs]


# =============================================================================
# Stream packages
# =============================================================================

def _clean_package(data: dict, partial: bool = False) -> dict:
    fields = {k: data[k] for k in PACKAGE_FIELDS if data.get(k) is not None}
    if not partial:
        if not (fields.get('name') or '').strip():
            raise ValueError("name is required")
        if 'duration' not in fields or 'price' not in fields:
            raise ValueError("duration and price are required")
    if 'name' in fields:
        fields['name'] = fields['name'].strip()
        if not fields['name']:
            raise ValueError("name cannot be empty")
    if 'duration' in fields and int(fields['duration']) < 1:
        raise ValueError("duration must be at least 1 day")
    if 'price' in fields:
        fields['price'] = to_money(fields['price'])
    if 'max_concurrent_streams' in fields and int(fields['max_concurrent_streams']) < 1:
        raise ValueError("max_concurrent_streams must be at least 1")
    return fields


def list_packages(active_only: bool = False, page: int = 1, limit: int = 10) -> Tuple[List[StreamPackageDTO], PageMeta]:
    qs = StreamPackage.objects.all()
    if active_only:
        qs = qs.filter(is_active=True)
    rows, meta = paginate(qs.order_by('price', 'name'), page, limit)
    return [_package_dto(p) for p in rows], meta


def get_package(package_id, active_only: bool = False) -> Optional[StreamPackageDTO]:
    qs = StreamPackage.objects.filter(id=package_id)
    if active_only:
        qs = qs.filter(is_active=True)
    package = qs.first()
    return _package_dto(package) if package else None


def create_package(data: dict) -> StreamPackageDTO:
    package = StreamPackage.objects.create(**_clean_package(data))
    logger.info(f"Stream package {package.id} created: {package.name} at {package.price}")
    return _package_dto(package)


def update_package(package_id, data: dict) -> StreamPackageDTO:
    try:
        package = StreamPackage.objects.get(id=package_id)
    except StreamPackage.DoesNotExist:
        raise NotFoundError("Stream package not found")
    for key, value in _clean_package(data, partial=True).items():
        setattr(package, key, value)
    package.save()
    return _package_dto(package)


def delete_package(package_id) -> None:
    """Delete a package nobody ever bought. Bought packages must be deactivated instead."""
    try:
        package = StreamPackage.objects.get(id=package_id)
    except StreamPackage.DoesNotExist:
        raise NotFoundError("Stream package not found")
    if CreatorPackageSubscription.objects.filter(package_id=package.id).exists():
        raise ValueError("Package has subscriptions; deactivate it instead")
    package.delete()
    logger.info(f"Stream package {package_id} deleted")


# =============================================================================
# Creator subscriptions
# =============================================================================

def _current(creator_id):
    return CreatorPackageSubscription.objects.filter(
        creator_id=creator_id,
        status=SubscriptionStatus.ACTIVE,
        end_date__gt=timezone.now(),
    )


def subscribe(creator_id, package_id) -> SubscriptionDTO:
    """
    Buy a package with the creator's wallet balance.

    The debit, its ledger entry and the subscription row are written in one
    transaction. The wallet row lock serializes purchases of one creator.
    """
    with transaction.atomic():
        lock_wallet(creator_id)
        if _current(creator_id).exists():
            raise ValueError("You already have an active subscription.")

        package = StreamPackage.objects.filter(id=package_id, is_active=True).first()
        if package is None:
            raise NotFoundError("Stream package not found or is not active.")

        start = timezone.now()
        sub = CreatorPackageSubscription.objects.create(
            creator_id=creator_id,
            package_id=package.id,
            start_date=start,
            end_date=start + timedelta(days=package.duration),
            price=package.price,
            status=SubscriptionStatus.ACTIVE,
        )
        debit_balance(
            creator_id,
            package.price,
            WalletTransactionType.PACKAGE_PURCHASE,
            description=f"Purchase of stream package: {package.name}",
            related_request_id=sub.id,
        )

    logger.info(f"Creator {creator_id} bought package {package.id} for {package.price}")
    log_action(
        action=AuditAction.PACKAGE_PURCHASED,
        target_type="CreatorPackageSubscription",
        target_id=sub.id,
        target_label=package.name,
        performed_by=creator_id,
        context={"price": str(package.price), "package_id": str(package.id)},
    )
    return _subscription_dto(sub, package)


def get_my_subscription(creator_id) -> Optional[SubscriptionDTO]:
    """Latest ACTIVE subscription of the creator, or None."""
    sub = (
        CreatorPackageSubscription.objects
        .filter(creator_id=creator_id, status=SubscriptionStatus.ACTIVE)
        .order_by('-created_at')
        .first()
    )
    return _with_packages([sub])[0] if sub else None


def cancel_subscription(creator_id) -> SubscriptionDTO:
    """Cancel the running subscription. Nothing is refunded."""
    sub = _current(creator_id).order_by('-created_at').first()
    if sub is None:
        raise NotFoundError("No active subscription to cancel.")
    sub.status = SubscriptionStatus.CANCELLED
    sub.save(update_fields=['status', 'updated_at'])
    logger.info(f"Creator {creator_id} cancelled subscription {sub.id}")
    return _with_packages([sub])[0]


def list_subscriptions(
    creator_id=None,
    status: Optional[str] = None,
    package_id=None,
    page: int = 1,
    limit: int = 10,
) -> Tuple[List[SubscriptionDTO], PageMeta]:
    qs = CreatorPackageSubscription.objects.all()
    if creator_id:
        qs = qs.filter(creator_id=creator_id)
    if status:
        qs = qs.filter(status=status.upper())
    if package_id:
        qs = qs.filter(package_id=package_id)
    rows, meta = paginate(qs.order_by('-created_at'), page, limit)
    return _with_packages(rows), meta


def expire_finished() -> int:
    """Mark ACTIVE subscriptions past their end date as EXPIRED."""
    count = CreatorPackageSubscription.objects.filter(
        status=SubscriptionStatus.ACTIVE,
        end_date__lte=timezone.now(),
    ).update(status=SubscriptionStatus.EXPIRED, updated_at=timezone.now())
    if count:
        logger.info(f"Expired {count} package subscriptions")
    return count
