from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.http import JsonResponse
from django.urls import include, path
from django.views.generic import RedirectView
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView, SpectacularSwaggerView


# ---------- Health / Readiness probes -----------------------------------------

def health_check(request):
    """Liveness probe, 200 while the process is running."""
    return JsonResponse({"status": "ok"})


def readiness_check(request):
    """Readiness probe, checks database and cache connectivity."""
    from django.db import connection
    from django.core.cache import cache
    checks = {"db": "ok", "cache": "ok"}
    status_code = 200

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
    except Exception as exc:
        checks["db"] = str(exc)
        status_code = 503

    try:
        cache.set("_readiness_probe", "1", timeout=5)
        val = cache.get("_readiness_probe")
        if val != "1":
            checks["cache"] = "read-back failed"
            status_code = 503
    except Exception as exc:
        checks["cache"] = str(exc)
        status_code = 503

    overall = "ready" if status_code == 200 else "not_ready"
    return JsonResponse({"status": overall, **checks}, status=status_code)


def deep_health_check(request):
    """Component statuses and pending migrations for monitoring systems."""
    import time
    from io import StringIO

    from django.core.management import call_command
    from django.db import connection

    start = time.monotonic()
    components = {}

    try:
        with connection.cursor() as cursor:
            cursor.execute("SELECT 1")
        components["database"] = {"status": "up", "engine": connection.vendor}
    except Exception as exc:
        components["database"] = {"status": "down", "error": str(exc)}

    try:
        out = StringIO()
        call_command("showmigrations", "--plan", stdout=out, no_color=True)
        pending = [line for line in out.getvalue().splitlines() if line.strip().startswith("[ ]")]
        components["migrations"] = {
            "status": "ok" if not pending else "pending",
            "pending_count": len(pending),
        }
    except Exception:
        components["migrations"] = {"status": "unknown"}

    components["realtime"] = {"status": "up" if settings.CHANNEL_LAYERS else "disabled"}

    elapsed_ms = round((time.monotonic() - start) * 1000, 1)
    all_up = all(c.get("status") in ("up", "ok", "disabled") for c in components.values())

    return JsonResponse({
        "status": "healthy" if all_up else "degraded",
        "response_time_ms": elapsed_ms,
        "components": components,
    }, status=200 if all_up else 503)


urlpatterns = [
    path("", RedirectView.as_view(url="/admin/", permanent=False)),
    path("admin/", admin.site.urls),

    # Health probes (unauthenticated)
    path("api/v1/health/", health_check, name="health-check"),
    path("api/v1/readiness/", readiness_check, name="readiness-check"),
    path("api/v1/health/deep/", deep_health_check, name="deep-health-check"),

    path("api/v1/auth/", include("apps.authentication.urls")),
    path("api/v1/hierarchy/", include("apps.hierarchy.urls")),
    path("api/v1/approvals/", include("apps.approvals.urls")),
    path("api/v1/assignments/", include("apps.assignments.urls")),
    path("api/v1/notifications/", include("apps.notifications.urls")),
]

if getattr(settings, "ENABLE_API_DOCS", False):
    urlpatterns += [
        path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
        path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
        path("api/redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
    ]

if settings.DEBUG:
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
