from django.db import models
from django.contrib.auth.models import AbstractUser


class User(AbstractUser):
    email = models.EmailField(blank=True, null=True, unique=True)
    phone_number = models.CharField(max_length=15, blank=True, null=True, unique=True)

    @property
    def is_client(self):
        return hasattr(self, 'client')

    @property
    def is_worker(self):
        return hasattr(self, 'worker')

    def get_rating_stats(self):
        """Rating statistics over the visible reviews this user has received."""
        stats = {
            'average_rating': 0.0,
            'total_ratings': 0,
            'rating_breakdown': {
                '5_star': 0,
                '4_star': 0,
                '3_star': 0,
                '2_star': 0,
                '1_star': 0
            }
        }

        all_ratings = list(
            self.received_reviews.filter(is_visible=True).values_list('rating', flat=True)
        )
        if all_ratings:
            stats['total_ratings'] = len(all_ratings)
            stats['average_rating'] = round(sum(all_ratings) / len(all_ratings), 1)

            for rating in all_ratings:
                stats['rating_breakdown'][f'{rating}_star'] += 1

            # Convert to percentages
            for key in stats['rating_breakdown']:
                stats['rating_breakdown'][key] = round(
                    (stats['rating_breakdown'][key] / stats['total_ratings']) * 100, 1
                )

        return stats

class Client(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='client')
    location = models.CharField(max_length=100, blank=True, null=True)

    def __str__(self):
        return f"Client: {self.user.username}"

class Worker(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='worker')
    location = models.CharField(max_length=100, blank=True, null=True)
    skills = models.CharField(max_length=500, blank=True, default='')
    has_experience = models.BooleanField(default=False)
    last_activity = models.DateTimeField(null=True, blank=True)

    def __str__(self):
        return f"Worker: {self.user.username}"
