"""
Countdown serializers.
"""

from rest_framework import serializers


class CountdownSerializer(serializers.Serializer):
    enabled = serializers.BooleanField(read_only=True)
    targetDate = serializers.CharField(read_only=True)
    title = serializers.CharField(read_only=True)
    updatedAt = serializers.CharField(read_only=True, allow_null=True)


class CountdownInputSerializer(serializers.Serializer):
    enabled = serializers.BooleanField(required=False, default=True)
    targetDate = serializers.CharField(required=False, allow_blank=True)
    title = serializers.CharField(required=False, allow_blank=True, default='')
