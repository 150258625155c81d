# insurance/views.py
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

# OpenAPI/Swagger documentation
from drf_spectacular.utils import extend_schema, OpenApiResponse

from .serializers import (
    InsuranceProviderSerializer,
    PolicyEnrollmentSerializer,
    VerifyInsuranceSerializer,
)
from .services import enroll_patient, get_patient_enrollments, list_providers


class InsuranceProviderListView(APIView):
    """Insurance providers for the billing form's picker."""

    @extend_schema(
        summary="List Insurance Providers",
        responses={200: InsuranceProviderSerializer(many=True)},
        tags=['Insurance']
    )
    def get(self, request):
        serializer = InsuranceProviderSerializer(list_providers(), many=True)
        return Response({
            'success': True,
            'data': serializer.data
        })


class PatientInsuranceView(APIView):
    """A patient's enrollments with remaining coverage."""

    @extend_schema(
        summary="List Patient Insurances",
        responses={
            200: PolicyEnrollmentSerializer(many=True),
            404: OpenApiResponse(description="Patient not found")
        },
        tags=['Insurance']
    )
    def get(self, request, patient_id):
        serializer = PolicyEnrollmentSerializer(get_patient_enrollments(patient_id), many=True)
        return Response({
            'success': True,
            'data': serializer.data
        })


class VerifyInsuranceView(APIView):
    """Enroll a patient with an insurance provider."""

    @extend_schema(
        summary="Verify Insurance",
        description="Enroll the patient with the provider, registering the provider on first use",
        request=VerifyInsuranceSerializer,
        responses={
            201: PolicyEnrollmentSerializer,
            400: OpenApiResponse(description="Patient already has this insurance"),
            404: OpenApiResponse(description="Patient not found")
        },
        tags=['Insurance']
    )
    def post(self, request, patient_id):
        serializer = VerifyInsuranceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        enrollment = enroll_patient(patient_id=patient_id, **serializer.validated_data)
        return Response({
            'success': True,
            'message': 'Insurance verified',
            'data': PolicyEnrollmentSerializer(enrollment).data
        }, status=status.HTTP_201_CREATED)
