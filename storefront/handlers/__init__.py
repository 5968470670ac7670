from storefront.handlers.views import EventAccessView, PaystackCallbackView, WaitlistView

__all__ = ["EventAccessView", "PaystackCallbackView", "WaitlistView"]
