from rest_framework import serializers
from .models import Country


class CountrySerializer(serializers.ModelSerializer):
    class Meta:
        model = Country
        fields = [
            'id',
            'name',
            'capital',
            'region',
            'population',
            'currency_code',
            'exchange_rate',
            'estimated_gdp',
            'flag_url',
            'last_refreshed_at'
        ]
        read_only_fields = fields


class StatusResponseSerializer(serializers.Serializer):
    total_countries = serializers.IntegerField()
    last_refreshed_at = serializers.DateTimeField(allow_null=True)


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()
    details = serializers.JSONField(required=False)


class RefreshResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    total_countries = serializers.IntegerField()
    last_refreshed_at = serializers.CharField()


class MessageResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
