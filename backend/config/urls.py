from django.contrib import admin
from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView

from accounts.api import LoginView, MeView, RegisterView
from bookings.api import BookingViewSet
from catalog.api import PackageViewSet
from payments.api import (
    PaymentCancelledView,
    PaymentDetailView,
    PaymentReceiptView,
    PaymentSuccessView,
    RefreshReceiptView,
)
from reports.api import AdminDashboardView

router = DefaultRouter()
router.register(r"packages", PackageViewSet, basename="package")
router.register(r"bookings", BookingViewSet, basename="booking")

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/auth/register/", RegisterView.as_view(), name="auth-register"),
    path("api/auth/login/", LoginView.as_view(), name="auth-login"),
    path("api/auth/refresh/", TokenRefreshView.as_view(), name="auth-refresh"),
    path("api/auth/me/", MeView.as_view(), name="auth-me"),
    path("api/payments/success/", PaymentSuccessView.as_view(), name="payment-success"),
    path("api/payments/cancel/", PaymentCancelledView.as_view(), name="payment-cancel"),
    path("api/payments/<int:payment_id>/", PaymentDetailView.as_view(), name="payment-detail"),
    path(
        "api/payments/<int:payment_id>/receipt/",
        PaymentReceiptView.as_view(),
        name="payment-receipt",
    ),
    path(
        "api/payments/<int:payment_id>/receipt/refresh/",
        RefreshReceiptView.as_view(),
        name="payment-receipt-refresh",
    ),
    path("api/admin/dashboard/", AdminDashboardView.as_view(), name="admin-dashboard"),
    path("api/", include(router.urls)),
]
