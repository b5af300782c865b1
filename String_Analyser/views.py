from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi

from .exceptions import (
    ConflictingFilters,
    InvalidInput,
    StringAnalyserError,
    TypeMismatch,
    Unparseable,
)
from .filters import apply_filters
from .nlp import interpret, parse_query
from .serializers import (
    StringAnalyzeSerializer,
    StringFilterSerializer,
    StringRecordSerializer,
)


def error_response(exc, **extra):
    return Response({"error": str(exc), **extra}, status=exc.status_code)


class StoreMixin:
    """The record store is injected per URL pattern: View.as_view(store=store)."""

    store = None

    def get_store(self):
        if self.store is None:
            raise RuntimeError(f"{type(self).__name__} was created without a record store")
        return self.store


# 1️⃣ POST & GET /strings


class StringAnalyzerView(StoreMixin, APIView):

    @swagger_auto_schema(
        request_body=StringAnalyzeSerializer,
        operation_summary="Analyze and store a new string",
        responses={201: StringRecordSerializer},
    )
    def post(self, request):
        serializer = StringAnalyzeSerializer(data=request.data)
        if not serializer.is_valid():
            if serializer.error_code() in ('invalid', 'null'):
                return error_response(TypeMismatch())
            return error_response(InvalidInput())

        try:
            record = serializer.save(store=self.get_store())
        except StringAnalyserError as exc:
            return error_response(exc)

        return Response(StringRecordSerializer(record).data, status=status.HTTP_201_CREATED)

    @swagger_auto_schema(
        operation_summary="List all analyzed strings",
        manual_parameters=[
            openapi.Parameter(
                "is_palindrome",
                openapi.IN_QUERY,
                description="Filter by palindrome (true/false)",
                type=openapi.TYPE_BOOLEAN,
            ),
            openapi.Parameter(
                "min_length",
                openapi.IN_QUERY,
                description="Minimum string length",
                type=openapi.TYPE_INTEGER,
            ),
            openapi.Parameter(
                "max_length",
                openapi.IN_QUERY,
                description="Maximum string length",
                type=openapi.TYPE_INTEGER,
            ),
            openapi.Parameter(
                "word_count",
                openapi.IN_QUERY,
                description="Exact word count",
                type=openapi.TYPE_INTEGER,
            ),
            openapi.Parameter(
                "contains_character",
                openapi.IN_QUERY,
                description="Filter strings that contain this character (case-insensitive)",
                type=openapi.TYPE_STRING,
            ),
        ],
    )
    def get(self, request):
        filter_serializer = StringFilterSerializer(data=request.query_params)
        if not filter_serializer.is_valid():
            field, errors = next(iter(filter_serializer.errors.items()))
            return error_response(InvalidInput(f"Invalid query parameter '{field}': {errors[0]}"))

        matches, filters_applied = apply_filters(
            self.get_store().list_all(), filter_serializer.validated_data)

        return Response({
            "data": StringRecordSerializer(matches, many=True).data,
            "count": len(matches),
            "filters_applied": filters_applied,
        }, status=status.HTTP_200_OK)


# 2️⃣ GET & DELETE /strings/{string_value}


class StringDetailView(StoreMixin, APIView):

    @swagger_auto_schema(
        operation_summary="Get a specific analyzed string",
        responses={200: StringRecordSerializer},
    )
    def get(self, request, value):
        try:
            record = self.get_store().get(value)
        except StringAnalyserError as exc:
            return error_response(exc)

        return Response(StringRecordSerializer(record).data, status=status.HTTP_200_OK)

    @swagger_auto_schema(operation_summary="Delete an analyzed string")
    def delete(self, request, value):
        try:
            self.get_store().delete(value)
        except StringAnalyserError as exc:
            return error_response(exc)
        return Response(status=status.HTTP_204_NO_CONTENT)


# 3️⃣ GET /strings/filter-by-natural-language


class NaturalLanguageFilterView(StoreMixin, APIView):
    @swagger_auto_schema(
        operation_summary="Filter analyzed strings using natural language queries",
        manual_parameters=[
            openapi.Parameter(
                "query",
                openapi.IN_QUERY,
                description="Natural language query, e.g. 'all single word palindromic strings'",
                type=openapi.TYPE_STRING,
                required=True,
            )
        ],
    )
    def get(self, request):
        query = request.query_params.get("query", "")

        try:
            parsed_filters = interpret(query)
        except (Unparseable, ConflictingFilters) as exc:
            return error_response(exc, interpreted_query={
                "original": query,
                "parsed_filters": parse_query(query),
            })
        except StringAnalyserError as exc:
            return error_response(exc)

        matches, _ = apply_filters(self.get_store().list_all(), parsed_filters)

        return Response({
            "data": StringRecordSerializer(matches, many=True).data,
            "count": len(matches),
            "interpreted_query": {
                "original": query,
                "parsed_filters": parsed_filters,
            },
        }, status=status.HTTP_200_OK)
