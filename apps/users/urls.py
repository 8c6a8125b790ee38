from django.urls import path
from .views import AuthLoginView, UserProfileView, UserRatingStatsView, UserReviewsView

urlpatterns = [
    # Authentication
    path('auth/login/', AuthLoginView.as_view(), name='auth_login'),

    # Profile
    path('users/profile/', UserProfileView.as_view(), name='user_profile'),

    # Rating Statistics
    path('users/ratings/', UserRatingStatsView.as_view(), name='user_ratings'),
    path('users/<int:user_id>/ratings/', UserRatingStatsView.as_view(), name='user_ratings_by_id'),

    # Reviews
    path('users/reviews/', UserReviewsView.as_view(), name='user_reviews'),
    path('users/<int:user_id>/reviews/', UserReviewsView.as_view(), name='user_reviews_by_id'),
    path('users/reviews/recent/', UserReviewsView.as_view(recent_only=True), name='user_recent_reviews'),
    path('users/<int:user_id>/reviews/recent/', UserReviewsView.as_view(recent_only=True), name='user_recent_reviews_by_id'),
]
