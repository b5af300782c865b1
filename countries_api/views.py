import logging
from rest_framework import status
from rest_framework.decorators import api_view
from rest_framework.response import Response
from django.db.models import Max
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from .models import Country
from .serializers import (
    CountrySerializer,
    StatusResponseSerializer,
    ErrorResponseSerializer,
    RefreshResponseSerializer,
    MessageResponseSerializer,
)
from .utils import ExternalAPIError
from . import services

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = '%Y-%m-%dT%H:%M:%SZ'

SORT_ORDERINGS = {
    'gdp_desc': '-estimated_gdp',
    'gdp_asc': 'estimated_gdp',
    'population_desc': '-population',
    'population_asc': 'population',
    'name_asc': 'name',
    'name_desc': '-name',
}


def internal_error(exc):
    logger.exception("Unexpected error: %s", exc)
    return Response({
        'error': 'Internal server error',
        'details': str(exc)
    }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)


def not_found():
    return Response({'error': 'Country not found'}, status=status.HTTP_404_NOT_FOUND)


@swagger_auto_schema(
    method='post',
    operation_description='Fetch all countries and exchange rates, then cache them in the database',
    responses={
        200: RefreshResponseSerializer,
        503: ErrorResponseSerializer
    },
    tags=['Countries']
)
@api_view(['POST'])
def refresh_countries(request):
    """
    POST /countries/refresh
    Fetch all countries and exchange rates, then cache them in the database
    """
    try:
        total_countries, refreshed_at = services.refresh_countries()
    except ExternalAPIError as e:
        logger.warning("External API error during refresh: %s", e)
        return Response({
            'error': 'External data source unavailable',
            'details': str(e)
        }, status=status.HTTP_503_SERVICE_UNAVAILABLE)
    except Exception as e:
        return internal_error(e)

    return Response({
        'message': 'Countries refreshed successfully',
        'total_countries': total_countries,
        'last_refreshed_at': refreshed_at.strftime(TIMESTAMP_FORMAT),
    }, status=status.HTTP_200_OK)


@swagger_auto_schema(
    method='get',
    operation_description='Get all countries from the database with optional filters and sorting',
    manual_parameters=[
        openapi.Parameter(
            'region',
            openapi.IN_QUERY,
            description='Filter by region (e.g., Africa, Europe)',
            type=openapi.TYPE_STRING
        ),
        openapi.Parameter(
            'currency',
            openapi.IN_QUERY,
            description='Filter by currency code (e.g., NGN, USD)',
            type=openapi.TYPE_STRING
        ),
        openapi.Parameter(
            'sort',
            openapi.IN_QUERY,
            description='Sort by gdp_desc, gdp_asc, population_desc, population_asc, name_asc, name_desc',
            type=openapi.TYPE_STRING
        ),
    ],
    responses={
        200: CountrySerializer(many=True),
    },
    tags=['Countries']
)
@api_view(['GET'])
def get_countries(request):
    """
    GET /countries
    Get all countries from the database with optional filters and sorting
    """
    try:
        queryset = Country.objects.all()

        region = request.query_params.get('region')
        if region:
            queryset = queryset.filter(region__iexact=region)

        currency = request.query_params.get('currency')
        if currency:
            queryset = queryset.filter(currency_code__iexact=currency)

        # Unknown sort keys fall back to name order
        ordering = SORT_ORDERINGS.get(request.query_params.get('sort'), 'name')
        queryset = queryset.order_by(ordering, 'name')

        serializer = CountrySerializer(queryset, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)

    except Exception as e:
        return internal_error(e)


@swagger_auto_schema(
    method='get',
    operation_description='Get a single country by name (case-insensitive)',
    responses={
        200: CountrySerializer,
        404: ErrorResponseSerializer
    },
    tags=['Countries']
)
@swagger_auto_schema(
    method='delete',
    operation_description='Delete a country record by name (case-insensitive)',
    responses={
        200: MessageResponseSerializer,
        404: ErrorResponseSerializer
    },
    tags=['Countries']
)
@api_view(['GET', 'DELETE'])
def country_detail(request, name):
    """
    GET /countries/:name
    DELETE /countries/:name
    """
    try:
        country = Country.objects.filter(name__iexact=name).first()
        if country is None:
            return not_found()

        if request.method == 'GET':
            return Response(CountrySerializer(country).data, status=status.HTTP_200_OK)

        country.delete()
        logger.info("Deleted country %s", country.name)
        return Response({
            'message': f'{name} deleted successfully.'
        }, status=status.HTTP_200_OK)

    except Exception as e:
        return internal_error(e)


@swagger_auto_schema(
    method='get',
    operation_description='Show total countries and last refresh timestamp',
    responses={
        200: StatusResponseSerializer,
    },
    tags=['Countries']
)
@api_view(['GET'])
def get_status(request):
    """
    GET /status
    Show total countries and last refresh timestamp
    """
    try:
        summary = Country.objects.aggregate(last_refreshed_at=Max('last_refreshed_at'))
        last_refreshed_at = summary['last_refreshed_at']

        return Response({
            'total_countries': Country.objects.count(),
            'last_refreshed_at': last_refreshed_at.strftime(TIMESTAMP_FORMAT) if last_refreshed_at else None,
        }, status=status.HTTP_200_OK)

    except Exception as e:
        return internal_error(e)
