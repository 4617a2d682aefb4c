# apps/core/middleware.py


class WorkspaceHeaderMiddleware:
    """
    Tags responses for workspace-scoped URLs

    Views resolve and authorize the workspace themselves; this only echoes
    the slug in ``X-Workspace`` so proxies and logs can group requests by
    tenant.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)

        slug = getattr(request, 'workspace_slug', None)
        if slug and hasattr(request, 'user') and request.user.is_authenticated:
            response['X-Workspace'] = slug

        return response

    def process_view(self, request, view_func, view_args, view_kwargs):
        if 'slug' in view_kwargs:
            request.workspace_slug = view_kwargs['slug']
        return None
