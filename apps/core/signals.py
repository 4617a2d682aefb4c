# apps/core/signals.py

from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import Project


@receiver(post_save, sender=Project)
def create_default_columns(sender, instance, created, **kwargs):
    """
    Creates the default columns when a project is created
    ONLY if it has no columns yet (fixtures may bring their own)
    """
    if created and not instance.columns.exists():
        instance.create_default_columns()
