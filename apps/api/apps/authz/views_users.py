"""
User Administration ViewSet.
"""
import logging

from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from apps.authz.models import User
from apps.authz.permissions import IsClinicAdmin
from apps.authz.serializers_users import (
    AssignmentSummarySerializer,
    TransferRequestSerializer,
    TransferResponseSerializer,
    UserListSerializer,
)
from apps.authz.services import ActiveAssignmentsExist, delete_user_account
from apps.clinical.services import (
    InvalidTransferTarget,
    get_therapist_assignments,
    transfer_assignments,
)
from apps.core.db import TransactionContext

logger = logging.getLogger(__name__)


def error_response(msg, status_code, **extra):
    """Error body understood by the admin frontend: {"errors": [{"msg": ...}]}."""
    body = {'errors': [{'msg': msg}]}
    body.update(extra)
    return Response(body, status=status_code)


class UserAdminViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    """
    ViewSet for clinic user administration (clinic admins only).

    Endpoints:
    - GET /api/v1/admin/users/ - List the clinic's users (?role=therapist|parent)
    - DELETE /api/v1/admin/users/{id}/ - Delete a user
    - GET /api/v1/admin/users/{id}/assignments/ - Therapist's assignments grouped by patient
    - POST /api/v1/admin/users/{id}/transfer/ - Move assignments to other therapists

    A therapist that still owns assignments cannot be deleted: DELETE answers
    409 with ``requiresTransfer: true`` and the caller must use /transfer/
    first.

    Every lookup is scoped to the admin's clinic; users of other clinics
    are answered with 404.
    """
    permission_classes = [IsClinicAdmin]
    serializer_class = UserListSerializer
    lookup_value_regex = r'\d+'
    pagination_class = None

    def get_queryset(self):
        """Users of the admin's clinic."""
        queryset = User.objects.filter(clinic_id=self.request.user.clinic_id)

        role = self.request.query_params.get('role')
        if role:
            queryset = queryset.filter(role=role)

        return queryset.order_by('-is_admin', 'role', 'full_name')

    def _clinic_user_exists(self, pk):
        return User.objects.filter(pk=pk, clinic_id=self.request.user.clinic_id).exists()

    def destroy(self, request, pk=None):
        """
        Delete a user of the admin's clinic.

        Responses:
        - 200: deleted
        - 403: admin tried to delete their own account
        - 404: user absent or in another clinic
        - 409: therapist still owns assignments (requiresTransfer)
        """
        user_id = int(pk)
        if user_id == request.user.pk:
            return error_response(
                'Action not allowed. You cannot delete your own administrator account.',
                status.HTTP_403_FORBIDDEN
            )

        ctx = TransactionContext.for_request(request)
        try:
            deleted = delete_user_account(user_id, request.user.clinic_id, ctx=ctx)
        except ActiveAssignmentsExist as e:
            return error_response(
                str(e),
                status.HTTP_409_CONFLICT,
                requiresTransfer=True,
                active_assignments=e.count,
                code=e.code,
            )
        except Exception:
            logger.error(
                "Unexpected error during user deletion",
                exc_info=True,
                extra={'target_user_id': str(user_id)}
            )
            return error_response(
                'The user could not be deleted.',
                status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        if deleted == 0:
            return error_response(
                'User not found or does not belong to this clinic.',
                status.HTTP_404_NOT_FOUND
            )

        return Response({'message': 'User deleted successfully.'}, status=status.HTTP_200_OK)

    @action(detail=True, methods=['get'], url_path='assignments')
    def assignments(self, request, pk=None):
        """Assignments of a therapist, grouped by patient, with session counts."""
        if not self._clinic_user_exists(pk):
            return error_response(
                'User not found or does not belong to this clinic.',
                status.HTTP_404_NOT_FOUND
            )

        summary = get_therapist_assignments(
            int(pk),
            request.user.clinic_id,
            ctx=TransactionContext.for_request(request)
        )
        return Response(AssignmentSummarySerializer(summary).data)

    @action(detail=True, methods=['post'], url_path='transfer')
    def transfer(self, request, pk=None):
        """
        Transfer assignments (and their session history) to other therapists.

        Body:
        {
            "transferList": [
                {"assignment_id": 1, "to_therapist_id": 15},
                ...
            ]
        }

        Entries not owned by this therapist are skipped. Any other failure
        rolls the whole list back.
        """
        serializer = TransferRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        if not self._clinic_user_exists(pk):
            return error_response(
                'User not found or does not belong to this clinic.',
                status.HTTP_404_NOT_FOUND
            )

        transfer_list = [dict(item) for item in serializer.validated_data['transferList']]

        try:
            result = transfer_assignments(
                int(pk),
                transfer_list,
                clinic_id=request.user.clinic_id,
                ctx=TransactionContext.for_request(request)
            )
        except InvalidTransferTarget as e:
            return error_response(str(e), status.HTTP_400_BAD_REQUEST)
        except Exception:
            logger.error(
                "Unexpected error during assignment transfer",
                exc_info=True,
                extra={'from_therapist_id': str(pk), 'entries': len(transfer_list)}
            )
            return error_response(
                'Assignments could not be transferred. No changes were made.',
                status.HTTP_500_INTERNAL_SERVER_ERROR
            )

        result['message'] = f"{result['transferred_count']} assignment(s) transferred successfully."
        return Response(TransferResponseSerializer(result).data, status=status.HTTP_200_OK)
