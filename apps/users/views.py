from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework import status, permissions
from rest_framework.authtoken.models import Token
from drf_yasg.utils import swagger_auto_schema
from drf_yasg import openapi
from django.contrib.auth import get_user_model
from django.utils import timezone
from apps.jobs.serializers import ReviewSerializer
from .serializers import LoginSerializer, UserSerializer
import logging

User = get_user_model()
logger = logging.getLogger(__name__)

RECENT_REVIEWS_LIMIT = 5


class AuthLoginView(APIView):
    permission_classes = []

    @swagger_auto_schema(
        request_body=LoginSerializer,
        responses={
            200: openapi.Response(
                description='Login successful',
                schema=openapi.Schema(
                    type=openapi.TYPE_OBJECT,
                    properties={
                        'token': openapi.Schema(type=openapi.TYPE_STRING),
                        'user': openapi.Schema(type=openapi.TYPE_OBJECT),
                    }
                )
            ),
            400: 'Bad Request'
        }
    )
    def post(self, request):
        serializer = LoginSerializer(data=request.data)
        if serializer.is_valid():
            user = serializer.save()
            token, created = Token.objects.get_or_create(user=user)
            if hasattr(user, 'worker'):
                user.worker.last_activity = timezone.now()
                user.worker.save()
            return Response({
                "token": token.key,
                "user": UserSerializer(user).data
            }, status=status.HTTP_200_OK)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

class UserProfileView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(responses={200: UserSerializer, 401: 'Unauthorized'})
    def get(self, request):
        serializer = UserSerializer(request.user)
        return Response(serializer.data, status=status.HTTP_200_OK)

class UserRatingStatsView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    @swagger_auto_schema(
        operation_description="Get rating statistics for a user (worker or client).",
        responses={
            200: openapi.Response(
                description='Rating statistics',
                schema=openapi.Schema(
                    type=openapi.TYPE_OBJECT,
                    properties={
                        'average_rating': openapi.Schema(type=openapi.TYPE_NUMBER),
                        'total_ratings': openapi.Schema(type=openapi.TYPE_INTEGER),
                        'rating_breakdown': openapi.Schema(
                            type=openapi.TYPE_OBJECT,
                            properties={
                                '5_star': openapi.Schema(type=openapi.TYPE_NUMBER),
                                '4_star': openapi.Schema(type=openapi.TYPE_NUMBER),
                                '3_star': openapi.Schema(type=openapi.TYPE_NUMBER),
                                '2_star': openapi.Schema(type=openapi.TYPE_NUMBER),
                                '1_star': openapi.Schema(type=openapi.TYPE_NUMBER),
                            }
                        )
                    }
                )
            ),
            401: 'Unauthorized',
            404: 'Not Found'
        }
    )
    def get(self, request, user_id=None):
        try:
            # If no user_id provided, return stats for the authenticated user
            if user_id is None:
                user = request.user
            else:
                user = User.objects.get(id=user_id)
            return Response(user.get_rating_stats(), status=status.HTTP_200_OK)
        except User.DoesNotExist:
            return Response(
                {"error": "User not found"},
                status=status.HTTP_404_NOT_FOUND
            )

class UserReviewsView(APIView):
    permission_classes = [permissions.IsAuthenticated]
    recent_only = False

    @swagger_auto_schema(
        operation_description="Get the reviews a user has received.",
        responses={200: ReviewSerializer(many=True), 401: 'Unauthorized', 404: 'Not Found'}
    )
    def get(self, request, user_id=None):
        try:
            if user_id is None:
                user = request.user
            else:
                user = User.objects.get(id=user_id)
        except User.DoesNotExist:
            return Response(
                {"error": "User not found"},
                status=status.HTTP_404_NOT_FOUND
            )
        reviews = user.received_reviews.filter(is_visible=True).select_related('job', 'reviewer', 'reviewee')
        if self.recent_only:
            reviews = reviews[:RECENT_REVIEWS_LIMIT]
        serializer = ReviewSerializer(reviews, many=True)
        return Response(serializer.data, status=status.HTTP_200_OK)
