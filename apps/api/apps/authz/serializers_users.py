"""
User Administration Serializers.
"""
from rest_framework import serializers
from apps.authz.models import User


class UserListSerializer(serializers.ModelSerializer):
    """
    Serializer for User list view (Admin only).

    Used for:
    - GET /api/v1/admin/users/ - List the clinic's users
    """

    class Meta:
        model = User
        fields = [
            'id',
            'username',
            'full_name',
            'role',
            'is_admin',
            'is_active',
            'created_at',
        ]
        read_only_fields = fields


# ============================================================================
# Assignment transfer
# ============================================================================

class TransferItemSerializer(serializers.Serializer):
    """One entry of a transfer list."""
    assignment_id = serializers.IntegerField(min_value=1)
    to_therapist_id = serializers.IntegerField(min_value=1)


class TransferRequestSerializer(serializers.Serializer):
    """
    Serializer for assignment transfer request.

    Body:
        {"transferList": [{"assignment_id": 1, "to_therapist_id": 15}, ...]}
    """
    transferList = TransferItemSerializer(many=True, allow_empty=False)


class TransferDetailSerializer(serializers.Serializer):
    """One applied transfer."""
    old_assignment_id = serializers.IntegerField(read_only=True)
    new_assignment_id = serializers.IntegerField(read_only=True)
    patient_id = serializers.IntegerField(read_only=True)
    program_id = serializers.IntegerField(read_only=True)
    to_therapist_id = serializers.IntegerField(read_only=True)
    sessions_transferred = serializers.IntegerField(read_only=True)


class TransferResponseSerializer(serializers.Serializer):
    """Serializer for assignment transfer response."""
    success = serializers.BooleanField(read_only=True)
    message = serializers.CharField(read_only=True)
    transferred_count = serializers.IntegerField(read_only=True)
    details = TransferDetailSerializer(many=True, read_only=True)
    skipped = serializers.ListField(child=serializers.IntegerField(), read_only=True)


# ============================================================================
# Assignment summary
# ============================================================================

class AssignedProgramSerializer(serializers.Serializer):
    assignment_id = serializers.IntegerField(read_only=True)
    program_id = serializers.IntegerField(read_only=True)
    program_name = serializers.CharField(read_only=True)
    status = serializers.CharField(read_only=True)
    current_prompt_level = serializers.CharField(read_only=True, allow_null=True)
    assigned_at = serializers.DateTimeField(read_only=True)
    session_count = serializers.IntegerField(read_only=True)


class AssignedPatientSerializer(serializers.Serializer):
    patient_id = serializers.IntegerField(read_only=True)
    patient_name = serializers.CharField(read_only=True)
    programs = AssignedProgramSerializer(many=True, read_only=True)


class AssignmentSummarySerializer(serializers.Serializer):
    """
    Serializer for a therapist's assignment summary.

    Used for:
    - GET /api/v1/admin/users/{id}/assignments/
    """
    therapist_id = serializers.IntegerField(read_only=True)
    patients = AssignedPatientSerializer(many=True, read_only=True)
    summary = serializers.DictField(child=serializers.IntegerField(), read_only=True)
