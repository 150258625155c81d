# billing/views.py
from rest_framework import viewsets, status, filters
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView
from django.http import Http404
from django_filters.rest_framework import DjangoFilterBackend

# OpenAPI/Swagger documentation
from drf_spectacular.utils import (
    extend_schema,
    extend_schema_view,
    OpenApiParameter,
    OpenApiResponse
)

from apps.clinical.serializers import BillableEventsSerializer

from common.exceptions import BillNotFound

from .composer import add_bill_item, compose_bill
from .ledger import record_payment
from .locator import find_billable_events
from .models import Bill
from .serializers import (
    BillSerializer,
    BillListSerializer,
    BillLineInputSerializer,
    ComposeBillSerializer,
    PaymentSerializer,
    RecordPaymentSerializer,
)


@extend_schema(
    summary="List Billable Events",
    description="Completed consultations, their reports, active prescriptions and room stays "
                "of a patient that are not on any bill yet",
    responses={
        200: BillableEventsSerializer,
        404: OpenApiResponse(description="Patient not found")
    },
    tags=['Billing']
)
class BillableEventsView(APIView):
    """Billable-event locator for one patient."""

    def get(self, request, patient_id):
        events = find_billable_events(patient_id)
        serializer = BillableEventsSerializer(events)
        return Response({
            'success': True,
            'data': serializer.data
        })


@extend_schema_view(
    list=extend_schema(
        summary="List Bills",
        description="Bills, newest first",
        parameters=[
            OpenApiParameter(name='patient', type=int, description='Filter by patient'),
            OpenApiParameter(name='payment_status', type=str, description='pending, partially_paid or paid'),
        ],
        tags=['Billing']
    ),
    retrieve=extend_schema(
        summary="Get Bill Details",
        description="Bill with its items and billed/paid/balance/status",
        tags=['Billing']
    )
)
class BillViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Bill Management

    Bills are composed through POST and only change afterwards through
    their payments and items endpoints.
    """
    queryset = Bill.objects.select_related(
        'patient', 'insurance_enrollment', 'insurance_enrollment__policy'
    ).prefetch_related('items')

    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['patient', 'payment_status']
    search_fields = ['bill_number', 'patient__full_name']
    ordering_fields = ['generation_date', 'total_amount', 'created_at']
    ordering = ['-generation_date', '-id']

    def get_serializer_class(self):
        if self.action == 'list':
            return BillListSerializer
        return BillSerializer

    def get_object(self):
        try:
            return super().get_object()
        except Http404:
            raise BillNotFound(f"Bill {self.kwargs.get('pk')} not found")

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        serializer = self.get_serializer(queryset, many=True)
        return Response({
            'success': True,
            'data': serializer.data
        })

    def retrieve(self, request, *args, **kwargs):
        serializer = self.get_serializer(self.get_object())
        return Response({
            'success': True,
            'data': serializer.data
        })

    @extend_schema(
        summary="Compose Bill",
        description="Create a bill from clinical events and manual lines, applying the patient's "
                    "insurance coverage when insurance_provider is given",
        request=ComposeBillSerializer,
        responses={
            201: BillSerializer,
            400: OpenApiResponse(description="Invalid items or totals"),
            404: OpenApiResponse(description="Patient or insurance not found"),
            409: OpenApiResponse(description="A clinical event is already billed")
        },
        tags=['Billing']
    )
    def create(self, request, *args, **kwargs):
        serializer = ComposeBillSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        bill = compose_bill(
            patient_id=data['patient_id'],
            items=[dict(line) for line in data['items']],
            insurance_provider=data.get('insurance_provider'),
            generation_date=data.get('generation_date')
        )

        bill = self.get_queryset().get(pk=bill.pk)
        return Response({
            'success': True,
            'message': f'Bill {bill.bill_number} created',
            'data': BillSerializer(bill).data
        }, status=status.HTTP_201_CREATED)

    @extend_schema(
        methods=['GET'],
        summary="List Bill Payments",
        responses={200: PaymentSerializer(many=True)},
        tags=['Billing']
    )
    @extend_schema(
        methods=['POST'],
        summary="Record Payment",
        description="Append a payment and recompute the bill's payment status",
        request=RecordPaymentSerializer,
        responses={
            201: PaymentSerializer,
            400: OpenApiResponse(description="Invalid amount, method or status"),
            404: OpenApiResponse(description="Bill not found"),
            409: OpenApiResponse(description="Duplicate transaction id")
        },
        tags=['Billing']
    )
    @action(detail=True, methods=['get', 'post'])
    def payments(self, request, pk=None):
        if request.method == 'GET':
            bill = self.get_object()
            serializer = PaymentSerializer(bill.payments.select_related('bill'), many=True)
            return Response({
                'success': True,
                'data': serializer.data
            })

        serializer = RecordPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        payment, summary = record_payment(
            bill_id=pk,
            amount=data['amount'],
            payment_method=data['payment_method'],
            payment_date=data.get('payment_date'),
            transaction_id=data.get('transaction_id'),
            status=data.get('status') or 'success'
        )
        return Response({
            'success': True,
            'message': 'Payment recorded',
            'data': {
                'payment': PaymentSerializer(payment).data,
                'bill': summary.as_dict()
            }
        }, status=status.HTTP_201_CREATED)

    @extend_schema(
        summary="Add Bill Item",
        description="Append one line to an existing bill; no further insurance is applied",
        request=BillLineInputSerializer,
        responses={
            201: BillSerializer,
            409: OpenApiResponse(description="The clinical event is already billed")
        },
        tags=['Billing']
    )
    @action(detail=True, methods=['post'])
    def items(self, request, pk=None):
        serializer = BillLineInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        bill_item = add_bill_item(pk, dict(serializer.validated_data))
        bill = self.get_queryset().get(pk=bill_item.bill_id)
        return Response({
            'success': True,
            'message': 'Item added',
            'data': BillSerializer(bill).data
        }, status=status.HTTP_201_CREATED)
