"""HTTP handlers (views) - handle HTTP concerns only.

Handlers parse and validate input, call a service, and map domain errors to
HTTP responses. Upstream failures surface as 502 with the message the user
should see; nothing internal is echoed back.
"""

import logging

from asgiref.sync import async_to_sync
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from storefront.clients import HttpStorefrontApi, StorefrontApi
from storefront.domain import PaymentStatus
from storefront.domain.errors import ApiError, DomainError
from storefront.handlers.serializers import (
    AccessCodeSerializer,
    AccessStateSerializer,
    CallbackResultSerializer,
    ErrorSerializer,
    WaitlistJoinSerializer,
)
from storefront.services.access_gate import AccessGate
from storefront.services.payment_callbacks import SETTLED_REDIRECT_PATH, verify_paystack_callback
from storefront.services.waitlist_service import WaitlistClient
from storefront.stores.django_store import SessionTokenStore, SessionUnlockStore

logger = logging.getLogger(__name__)


def build_api(request: Request) -> StorefrontApi:
    """Upstream client authenticated with the token kept in this session."""
    return HttpStorefrontApi(token_store=SessionTokenStore(request.session))


def error_response(exc: DomainError) -> Response:
    code = status.HTTP_502_BAD_GATEWAY if isinstance(exc, ApiError) else status.HTTP_400_BAD_REQUEST
    return Response(ErrorSerializer(exc).data, status=code)


class StorefrontView(APIView):
    """Runs one coroutine against a fresh upstream client per request."""

    def run(self, request: Request, handler):
        async def call():
            async with build_api(request) as api:
                return await handler(api)

        try:
            return async_to_sync(call)()
        except DomainError as exc:
            return error_response(exc)


class EventAccessView(StorefrontView):
    """Handler for GET/POST /events/{event_id}/access"""

    def get(self, request: Request, event_id: str) -> Response:
        async def handler(api: StorefrontApi) -> Response:
            event = await api.get_event(event_id)
            gate = AccessGate(api, event, SessionUnlockStore(request.session))
            return Response(AccessStateSerializer(gate).data)

        return self.run(request, handler)

    def post(self, request: Request, event_id: str) -> Response:
        serializer = AccessCodeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        code = serializer.validated_data["code"]

        async def handler(api: StorefrontApi) -> Response:
            event = await api.get_event(event_id)
            gate = AccessGate(api, event, SessionUnlockStore(request.session))
            await gate.verify(code)
            code_status = status.HTTP_400_BAD_REQUEST if gate.is_locked else status.HTTP_200_OK
            return Response(AccessStateSerializer(gate).data, status=code_status)

        return self.run(request, handler)


class WaitlistView(StorefrontView):
    """Handler for POST /events/{event_id}/waitlist"""

    def post(self, request: Request, event_id: str) -> Response:
        serializer = WaitlistJoinSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        entry = serializer.validated_data

        async def handler(api: StorefrontApi) -> Response:
            message = await WaitlistClient(api).join(event_id, entry["tier_id"], entry["email"])
            return Response({"message": message}, status=status.HTTP_201_CREATED)

        return self.run(request, handler)


class PaystackCallbackView(StorefrontView):
    """Handler for GET /paystack/callback?reference=..."""

    def get(self, request: Request) -> Response:
        reference = request.query_params.get("reference")

        async def handler(api: StorefrontApi) -> Response:
            result = await verify_paystack_callback(api, reference)
            redirect = SETTLED_REDIRECT_PATH if result.status is PaymentStatus.SUCCESS else None
            return Response(CallbackResultSerializer(result, context={"redirect": redirect}).data)

        return self.run(request, handler)
