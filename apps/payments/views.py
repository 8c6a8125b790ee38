from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi
from django.db.models import Q
from .models import Transaction
from .serializers import TransactionSerializer


class TransactionListView(APIView):
    permission_classes = [IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Payment history for the authenticated user, as payer or payee.",
        manual_parameters=[
            openapi.Parameter(
                'status', openapi.IN_QUERY, type=openapi.TYPE_STRING,
                enum=['pending', 'completed', 'failed']
            ),
        ],
        responses={200: TransactionSerializer(many=True), 401: 'Unauthorized'}
    )
    def get(self, request):
        transactions = Transaction.objects.filter(
            Q(application__job__client=request.user) | Q(application__worker__user=request.user)
        ).select_related('application__job')
        status_filter = request.query_params.get('status')
        if status_filter:
            transactions = transactions.filter(status=status_filter)
        serializer = TransactionSerializer(transactions, many=True)
        return Response(serializer.data)
