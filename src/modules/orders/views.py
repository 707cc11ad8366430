"""Order API views.

Exposes ``OrderBuilder`` and ``OrderLifecycleManager`` via HTTP using DRF
ViewSets: ``OrderViewSet`` for customers, ``AdminOrderViewSet`` for staff.
Domain exceptions are caught and translated into appropriate HTTP status
codes; the view never swallows generic exceptions (those reach
``modules.core.exceptions.api_exception_handler``).
"""

from __future__ import annotations

import os
from uuid import UUID

import pydantic
import structlog
from django.core.files.storage import default_storage
from django.utils.text import get_valid_filename
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import serializers, status
from rest_framework.permissions import IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.core.authentication import Actor, IsCustomer
from modules.orders.constants import PAYMENT_PROOF_UPLOAD_DIR
from modules.orders.dtos import CreateOrderDTO, CreateOrderItemDTO
from modules.orders.exceptions import (
    ActionNotAllowed,
    NoOrdersFound,
    OrderConflict,
    OrderNotFound,
    OrderTotalTooLarge,
)
from modules.orders.filters import OrderFilter
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    AdminOrderDetailSerializer,
    CreateOrderSerializer,
    OrderListSerializer,
    OrderSerializer,
)
from modules.orders.services import OrderBuilder, OrderLifecycleManager

logger = structlog.get_logger(__name__)

ORDER_NOT_FOUND = "Order not found."
INVALID_ORDER_ID = "Invalid order ID"


def _not_found() -> Response:
    return Response({"detail": ORDER_NOT_FOUND}, status=status.HTTP_404_NOT_FOUND)


def _conflict(exc: OrderConflict) -> Response:
    return Response({"detail": str(exc)}, status=status.HTTP_409_CONFLICT)


def _forbidden(exc: ActionNotAllowed) -> Response:
    return Response({"detail": str(exc)}, status=status.HTTP_403_FORBIDDEN)


def _invalid_id() -> Response:
    return Response(
        {"detail": INVALID_ORDER_ID}, status=status.HTTP_400_BAD_REQUEST
    )


def _is_order_id(pk: str | None) -> bool:
    try:
        UUID(str(pk))
    except ValueError:
        return False
    return True


class _OrderViewSetMixin:
    """Wires the services with the Django repository (DIP)."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        repository = OrderDjangoRepository()
        self._builder = OrderBuilder(order_repository=repository)
        self._lifecycle = OrderLifecycleManager(order_repository=repository)

    def get_throttles(self) -> list[BaseThrottle]:
        """Scope throttling per action."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve", "last"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    @property
    def actor(self) -> Actor:
        return Actor.from_user(self.request.user)


class OrderViewSet(_OrderViewSetMixin, GenericViewSet):
    """Customer-facing order endpoints.

    Every lookup is scoped to the caller's own orders.  Does **not** extend
    ``ModelViewSet``; all ORM access goes through the service layer.
    """

    permission_classes = [IsCustomer]
    serializer_class = OrderSerializer

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/

        Accepts JSON, or multipart with ``items`` as a JSON string plus an
        optional ``image`` payment proof.
        """
        create_serializer = CreateOrderSerializer(data=request.data)
        create_serializer.is_valid(raise_exception=True)
        data = create_serializer.validated_data
        actor = self.actor

        payment_proof = None
        if data.get("image") is not None:
            payment_proof = self._store_payment_proof(data["image"])

        try:
            dto = CreateOrderDTO(
                customer_id=actor.customer_id,
                items=[CreateOrderItemDTO(**item) for item in data["items"]],
                shipping_address=data["shipping_address"],
                payment_method=data["payment_method"],
                payment_proof=payment_proof,
            )
        except pydantic.ValidationError as exc:
            raise serializers.ValidationError(
                {"detail": [error["msg"] for error in exc.errors()]}
            ) from exc

        try:
            order = self._builder.create_order(dto, actor=actor)
        except OrderTotalTooLarge as exc:
            raise serializers.ValidationError({"detail": [str(exc)]}) from exc
        out = OrderSerializer(order)
        return Response(out.data, status=status.HTTP_201_CREATED)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/"""
        orders = self._lifecycle.list_customer_orders(self.actor)
        serializer = OrderListSerializer(orders, many=True)
        return Response(serializer.data)

    def last(self, request: Request) -> Response:
        """GET /api/v1/orders/last/"""
        try:
            order = self._lifecycle.get_last_order(self.actor)
        except NoOrdersFound as exc:
            return Response({"detail": str(exc)}, status=status.HTTP_404_NOT_FOUND)
        return Response(OrderSerializer(order).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        try:
            order = self._lifecycle.get_customer_order(pk, self.actor)
        except OrderNotFound:
            return _not_found()
        return Response(OrderSerializer(order).data)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def pay(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/pay/{pk}/"""
        try:
            order = self._lifecycle.pay_as_customer(pk, self.actor)
        except OrderNotFound:
            return _not_found()
        except OrderConflict as exc:
            return _conflict(exc)
        return Response(OrderSerializer(order).data)

    def complete(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/orders/complete/{pk}/"""
        try:
            order = self._lifecycle.complete_order(pk, self.actor)
        except OrderNotFound:
            return _not_found()
        except OrderConflict as exc:
            return _conflict(exc)
        return Response(OrderSerializer(order).data)

    @staticmethod
    def _store_payment_proof(upload) -> str:
        filename = get_valid_filename(os.path.basename(upload.name))
        name = default_storage.save(f"{PAYMENT_PROOF_UPLOAD_DIR}/{filename}", upload)
        logger.info(
            "order.payment_proof_stored", payment_proof=name, size=upload.size
        )
        return name


class AdminOrderViewSet(_OrderViewSetMixin, GenericViewSet):
    """Staff-only order endpoints: browse every order and drive fulfilment."""

    permission_classes = [IsAdminUser]
    serializer_class = AdminOrderDetailSerializer
    filterset_class = OrderFilter
    filter_backends = [DjangoFilterBackend]

    def get_queryset(self):
        return self._lifecycle.orders_queryset()

    def list(self, request: Request) -> Response:
        """GET /api/v1/admin/orders/

        Filtering (status, payment status, payment method, customer, date
        range) is handled by ``OrderFilter`` via ``filter_backends``.
        """
        queryset = self.filter_queryset(self.get_queryset())
        serializer = OrderListSerializer(queryset, many=True)
        return Response(serializer.data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/admin/orders/{pk}/"""
        if not _is_order_id(pk):
            return _invalid_id()
        try:
            order = self._lifecycle.get_order(pk)
        except OrderNotFound:
            return _not_found()
        return Response(AdminOrderDetailSerializer(order).data)

    def confirm(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/admin/orders/confirm/{pk}/"""
        return self._transition(self._lifecycle.confirm_order, pk)

    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/admin/orders/cancel/{pk}/"""
        return self._transition(self._lifecycle.cancel_order, pk)

    def pay(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/admin/orders/pay/{pk}/"""
        return self._transition(self._lifecycle.pay_as_admin, pk)

    def _transition(self, operation, pk: str | None) -> Response:
        if not _is_order_id(pk):
            return _invalid_id()
        try:
            order = operation(pk, self.actor)
        except OrderNotFound:
            return _not_found()
        except OrderConflict as exc:
            return _conflict(exc)
        except ActionNotAllowed as exc:
            return _forbidden(exc)
        return Response(AdminOrderDetailSerializer(order).data)
