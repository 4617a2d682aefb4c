# apps/core/views.py

import logging

from django.core.cache import cache
from django.db import DatabaseError
from django.http import JsonResponse
from django.utils import timezone

from apps import __version__
from .models import Workspace

logger = logging.getLogger(__name__)


def health_check(request):
    """
    Health check for monitoring
    """
    try:
        # Database
        Workspace.objects.exists()

        # Cache (Redis in production)
        cache.set('health_check', 'ok', 60)
        cache.get('health_check')

        return JsonResponse({
            'status': 'healthy',
            'database': 'ok',
            'cache': 'ok',
            'timestamp': timezone.now().isoformat(),
            'version': __version__
        })

    except DatabaseError as e:
        logger.error(f"❌ Health check failed: {e}")
        return JsonResponse({
            'status': 'unhealthy',
            'error': str(e),
            'timestamp': timezone.now().isoformat(),
            'version': __version__
        }, status=500)
