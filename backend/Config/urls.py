"""
URL configuration for Config project.

所有业务接口挂在 /api/ 下，按 app 拆分前缀；/health/ 供负载均衡探活
"""
from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView, SpectacularRedocView, SpectacularSwaggerView

from apps.common.health import HealthCheckView

# 后台标题取 settings.EVENT_BRAND，SystemConfig 覆盖在运行期读取，此处不访问数据库
_brand = getattr(settings, "EVENT_BRAND", "STARTUP SPARK")
admin.site.site_header = f"{_brand} 管理后台"
admin.site.site_title = _brand
admin.site.index_title = "管理控制台"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('health/', HealthCheckView.as_view()),
    path('api/accounts/', include('apps.accounts.urls')),
    path('api/auth/', include('apps.auth.urls')),
    path('api/teams/', include('apps.teams.urls')),
    path('api/submissions/', include('apps.submissions.urls')),
    path('api/scoring/', include('apps.scoring.urls')),
    path('api/notifications/', include('apps.notifications.urls')),
    path('api/system/', include('apps.system.urls')),
    # OpenAPI 文档：提供 schema JSON 及 UI，仅供内部/前端获取接口定义
    path('api/schema/', SpectacularAPIView.as_view(), name='schema'),
    path('api/schema/swagger-ui/', SpectacularSwaggerView.as_view(url_name='schema'), name='swagger-ui'),
    path('api/schema/redoc/', SpectacularRedocView.as_view(url_name='schema'), name='redoc'),
]

# 开发环境提供上传文件访问（演示文稿、商业计划书）
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
