from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes
from .analytics import AnalyticsQueries
from .serializers import (
    DashboardQuerySerializer,
    DashboardResponseSerializer,
    ErrorSerializer,
)
from .exceptions import AnalyticsServiceError


@extend_schema(
    parameters=[
        OpenApiParameter('period', OpenApiTypes.STR, description='Month period (YYYY-MM)'),
        OpenApiParameter('start_date', OpenApiTypes.DATE, description='Start date (YYYY-MM-DD)'),
        OpenApiParameter('end_date', OpenApiTypes.DATE, description='End date (YYYY-MM-DD)'),
        OpenApiParameter('limit', OpenApiTypes.INT, description='Recent transactions per kind (default: 5)'),
    ],
    responses={
        200: DashboardResponseSerializer,
        400: ErrorSerializer,
    },
    description="Get sales, expenses, net savings, partner balances and recent transactions.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard(request):
    """Get dashboard summary for the given period."""
    query = DashboardQuerySerializer(data=request.query_params)
    query.is_valid(raise_exception=True)
    params = query.validated_data

    try:
        data = AnalyticsQueries.dashboard(
            start_date=params.get('start_date'),
            end_date=params.get('end_date'),
            recent_limit=params['limit'],
        )
    except AnalyticsServiceError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(DashboardResponseSerializer(data).data)
