from django.urls import path

from storefront.handlers import EventAccessView, PaystackCallbackView, WaitlistView

urlpatterns = [
    path("events/<str:event_id>/access", EventAccessView.as_view(), name="event-access"),
    path("events/<str:event_id>/waitlist", WaitlistView.as_view(), name="event-waitlist"),
    path("paystack/callback", PaystackCallbackView.as_view(), name="paystack-callback"),
]
