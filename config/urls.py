"""
URL configuration for the Streamhub API.
"""
from django.contrib import admin
from django.urls import path
from django.conf import settings
from django.conf.urls.static import static
from ninja import NinjaAPI

api = NinjaAPI(
    title="Streamhub API",
    version="1.0.0",
    description="Social and streaming platform API",
    docs_url="/docs",
)

from apps.core.api import router as core_router
from apps.identity.api import router as identity_router
from apps.audit.api import router as audit_router
from apps.ledger.api import (
    wallet_router,
    payments_router,
    deposits_router,
    payment_info_router,
)
from apps.creators.api import router as creators_router
from apps.social.api import router as social_router
from apps.subscriptions.api import router as subscriptions_router
from apps.gifts.api import router as gifts_router
from apps.reports.api import router as reports_router
from apps.search.api import router as search_router

api.add_router("/", core_router)
api.add_router("/", identity_router)
api.add_router("/audit-logs/", audit_router)
api.add_router("/wallet/", wallet_router)
api.add_router("/transactions/", payments_router)
api.add_router("/request-deposits/", deposits_router)
api.add_router("/info-payments/", payment_info_router)
api.add_router("/creators/", creators_router)
api.add_router("/", social_router)
api.add_router("/", subscriptions_router)
api.add_router("/gifts/", gifts_router)
api.add_router("/reports/", reports_router)
api.add_router("/search/", search_router)

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', api.urls),
]

# Serve media files in development
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
