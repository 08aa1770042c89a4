from rest_framework import serializers

from .models import EmailSubscriptionType


class EmailSubscriptionTypeSerializer(serializers.ModelSerializer):
    class Meta:
        model = EmailSubscriptionType
        fields = ["id", "hubspot_id", "name", "description", "purpose", "is_active", "is_default", "show_on_checkout"]
        read_only_fields = fields


class PreferencesUpdateSerializer(serializers.Serializer):
    email = serializers.EmailField(required=False)
    subscribe = serializers.ListField(child=serializers.CharField(max_length=64), required=False, default=list)
    unsubscribe = serializers.ListField(child=serializers.CharField(max_length=64), required=False, default=list)
