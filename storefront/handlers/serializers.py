"""Request/response serializers for the storefront handlers."""

from rest_framework import serializers


class AccessCodeSerializer(serializers.Serializer):
    code = serializers.CharField(allow_blank=True, trim_whitespace=True)


class AccessStateSerializer(serializers.Serializer):
    state = serializers.CharField(source="state.value")
    message = serializers.CharField(source="error", required=False)

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if not data.get("message"):
            data.pop("message", None)
        return data


class WaitlistJoinSerializer(serializers.Serializer):
    tierId = serializers.CharField(source="tier_id")
    email = serializers.EmailField()


class CallbackResultSerializer(serializers.Serializer):
    status = serializers.CharField(source="status.value")
    message = serializers.CharField()
    redirect = serializers.SerializerMethodField()

    def get_redirect(self, result) -> str | None:
        return self.context.get("redirect")


class ErrorSerializer(serializers.Serializer):
    code = serializers.CharField(source="code.value")
    message = serializers.CharField()
