from datetime import datetime, timezone

from django.conf import settings
from drf_yasg.utils import swagger_auto_schema
from rest_framework.response import Response
from rest_framework.views import APIView

from .utils import fetch_cat_fact


def get_profile():
    return {
        "email": settings.PROFILE_EMAIL,
        "name": settings.PROFILE_NAME,
        "stack": settings.PROFILE_STACK,
    }


class ProfileView(APIView):
    @swagger_auto_schema(operation_summary="Profile details with a random cat fact")
    def get(self, request):
        fact, upstream_status = fetch_cat_fact()

        data = {
            "status": "success" if upstream_status == 200 else "failed",
            "user": get_profile(),
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "fact": fact,
        }

        # 504 when the upstream timed out, 503 when it was unreachable.
        return Response(data, status=upstream_status)
