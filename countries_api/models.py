from django.db import models
from django.utils import timezone


class Country(models.Model):
    """
    Country information cached from REST Countries, with the USD exchange rate
    of its first currency and a rough GDP estimate.
    """
    name = models.CharField(max_length=255, unique=True, db_index=True)
    capital = models.CharField(max_length=255, null=True, blank=True)
    region = models.CharField(max_length=100, null=True, blank=True, db_index=True)
    population = models.BigIntegerField(default=0)
    currency_code = models.CharField(max_length=10, default='USD', db_index=True)
    exchange_rate = models.DecimalField(max_digits=20, decimal_places=6, default=1)
    estimated_gdp = models.DecimalField(max_digits=30, decimal_places=2, default=0)
    flag_url = models.URLField(max_length=500, null=True, blank=True)
    last_refreshed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'countries'
        ordering = ['name']
        verbose_name = 'Country'
        verbose_name_plural = 'Countries'

    def __str__(self):
        return self.name
