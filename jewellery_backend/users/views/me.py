from drf_spectacular.utils import extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from users.serializers import UserSerializer
from users.services.membership import refresh_membership_status


class MeView(APIView):
    permission_classes = [IsAuthenticated]
    serializer_class = UserSerializer

    @extend_schema(
        responses={200: UserSerializer},
        description="Current account profile, points balance and membership",
    )
    def get(self, request):
        user = refresh_membership_status(request.user)
        return Response(UserSerializer(user).data)
