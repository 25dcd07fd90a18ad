from rest_framework import status, serializers, viewsets
from rest_framework.decorators import api_view, permission_classes, action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken
from django.contrib.auth import authenticate
from django.utils import timezone
from drf_spectacular.utils import extend_schema
from .models import Partner
from .serializers import PartnerSerializer, LoginSerializer


# Response serializers for API documentation
class TokensResponseSerializer(serializers.Serializer):
    refresh = serializers.CharField()
    access = serializers.CharField()


class AuthResponseSerializer(serializers.Serializer):
    message = serializers.CharField()
    partner = PartnerSerializer()
    tokens = TokensResponseSerializer()


class ErrorResponseSerializer(serializers.Serializer):
    error = serializers.CharField()


@extend_schema(
    request=LoginSerializer,
    responses={
        200: AuthResponseSerializer,
        400: ErrorResponseSerializer,
        401: ErrorResponseSerializer,
        403: ErrorResponseSerializer,
    },
    description="Login with email and password and receive JWT tokens.",
    tags=['auth'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def login(request):
    """Login with email and password."""
    serializer = LoginSerializer(data=request.data)

    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    email = serializer.validated_data['email']
    password = serializer.validated_data['password']

    partner = authenticate(request, username=email, password=password)

    if partner is None:
        # ModelBackend returns None for inactive accounts too
        inactive = Partner.objects.filter(email__iexact=email, is_active=False).exists()
        if inactive:
            return Response({
                'error': 'Account is deactivated'
            }, status=status.HTTP_403_FORBIDDEN)
        return Response({
            'error': 'Invalid credentials'
        }, status=status.HTTP_401_UNAUTHORIZED)

    partner.last_login = timezone.now()
    partner.save(update_fields=['last_login'])

    refresh = RefreshToken.for_user(partner)

    return Response({
        'message': 'Login successful',
        'partner': PartnerSerializer(partner).data,
        'tokens': {
            'refresh': str(refresh),
            'access': str(refresh.access_token),
        }
    })


@extend_schema(tags=['partners'])
class PartnerViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Read-only partner directory.

    list: all active partners with their balances
    retrieve: one partner
    me: the authenticated partner
    """

    serializer_class = PartnerSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return Partner.objects.filter(is_active=True)

    @extend_schema(responses=PartnerSerializer, tags=['partners'])
    @action(detail=False, methods=['get'])
    def me(self, request):
        """Return the authenticated partner."""
        return Response(PartnerSerializer(request.user).data)
