from django.contrib.auth import get_user_model
from rest_framework import serializers

from accounts.serializers import UserSummarySerializer
from .models import Department, Doctor

User = get_user_model()


class DepartmentSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Department
        fields = ['id', 'name', 'status']


class DoctorSummarySerializer(serializers.ModelSerializer):
    """Doctor block nested inside appointment/prescription payloads."""
    user = UserSummarySerializer(read_only=True)

    class Meta:
        model = Doctor
        fields = ['id', 'user', 'specialization', 'fee']


class DoctorSerializer(serializers.ModelSerializer):
    user = UserSummarySerializer(read_only=True)
    department = DepartmentSummarySerializer(read_only=True)
    departmentId = serializers.PrimaryKeyRelatedField(
        source='department', queryset=Department.objects.all(),
        write_only=True, required=False, allow_null=True
    )
    isOnline = serializers.BooleanField(source='user.is_online', read_only=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Doctor
        fields = ['id', 'user', 'specialization', 'department', 'departmentId', 'fee',
                  'available', 'status', 'schedule', 'isOnline', 'createdAt']
        read_only_fields = ['id']

    def validate_schedule(self, value):
        weekdays = {'monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday'}
        if not isinstance(value, dict):
            raise serializers.ValidationError('schedule must be an object keyed by weekday')
        unknown = set(value) - weekdays
        if unknown:
            raise serializers.ValidationError(f"unknown weekday(s): {', '.join(sorted(unknown))}")
        return value


class DoctorCreateSerializer(DoctorSerializer):
    """
    Creates the doctor profile of an existing user whose role is Doctor.
    """
    userId = serializers.IntegerField(write_only=True)

    class Meta(DoctorSerializer.Meta):
        fields = DoctorSerializer.Meta.fields + ['userId']

    def validate_userId(self, value):
        try:
            user = User.objects.get(pk=value)
        except User.DoesNotExist:
            raise serializers.ValidationError('User not found')
        if user.role != User.DOCTOR:
            raise serializers.ValidationError('User role must be Doctor')
        if Doctor.objects.filter(user=user).exists():
            raise serializers.ValidationError('doctor profile already exists for this user')
        return value

    def create(self, validated_data):
        validated_data['user_id'] = validated_data.pop('userId')
        return super().create(validated_data)


class DepartmentSerializer(serializers.ModelSerializer):
    head = DoctorSummarySerializer(read_only=True)
    headId = serializers.PrimaryKeyRelatedField(
        source='head', queryset=Doctor.objects.all(),
        write_only=True, required=False, allow_null=True
    )
    doctorCount = serializers.IntegerField(source='doctor_count', read_only=True, default=0)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)

    class Meta:
        model = Department
        fields = ['id', 'name', 'description', 'head', 'headId', 'status', 'doctorCount', 'createdAt']
        read_only_fields = ['id']
