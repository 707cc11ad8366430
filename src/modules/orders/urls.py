"""Order URL configuration.

Routes are declared explicitly because the lifecycle endpoints put the
action before the id (``orders/pay/{id}/``).  ``orders/last/`` must come
before ``orders/{id}/``.
"""

from __future__ import annotations

from django.urls import path

from modules.orders.views import AdminOrderViewSet, OrderViewSet

order_collection = OrderViewSet.as_view({"get": "list", "post": "create"})
order_last = OrderViewSet.as_view({"get": "last"})
order_detail = OrderViewSet.as_view({"get": "retrieve"})
order_pay = OrderViewSet.as_view({"post": "pay"})
order_complete = OrderViewSet.as_view({"put": "complete"})

admin_order_collection = AdminOrderViewSet.as_view({"get": "list"})
admin_order_detail = AdminOrderViewSet.as_view({"get": "retrieve"})
admin_order_confirm = AdminOrderViewSet.as_view({"put": "confirm"})
admin_order_cancel = AdminOrderViewSet.as_view({"put": "cancel"})
admin_order_pay = AdminOrderViewSet.as_view({"post": "pay"})

urlpatterns = [
    # Customer
    path("orders/", order_collection, name="order-list"),
    path("orders/last/", order_last, name="order-last"),
    path("orders/pay/<str:pk>/", order_pay, name="order-pay"),
    path("orders/complete/<str:pk>/", order_complete, name="order-complete"),
    path("orders/<str:pk>/", order_detail, name="order-detail"),
    # Admin
    path("admin/orders/", admin_order_collection, name="admin-order-list"),
    path(
        "admin/orders/confirm/<str:pk>/",
        admin_order_confirm,
        name="admin-order-confirm",
    ),
    path(
        "admin/orders/cancel/<str:pk>/",
        admin_order_cancel,
        name="admin-order-cancel",
    ),
    path("admin/orders/pay/<str:pk>/", admin_order_pay, name="admin-order-pay"),
    path("admin/orders/<str:pk>/", admin_order_detail, name="admin-order-detail"),
]
