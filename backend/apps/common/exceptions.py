"""
业务异常体系（BizError）

约定与作用：
- 所有“预期内的业务错误”都继承 BizError，避免直接抛框架异常
- 统一错误码/HTTP 状态/提示语，便于前后端对齐
- 系统级错误（代码 bug、数据库故障等）由全局异常处理器按 500 处理

错误码规范：
- 0                : 成功（只出现在正常响应里）
- 40000~40099      : 通用请求 / 参数错误（Validation、BadRequest）
- 40100~40199      : 认证错误（未登录、Token 无效等）
- 40300~40399      : 权限错误（非管理员访问后台接口等）
- 40400~40499      : 资源不存在（队伍、提交记录等）
- 40900~40999      : 前置条件 / 状态冲突（提交已锁定、截止已过、成绩未评完等）
- 50300~50399      : 基础设施/第三方依赖不可用（文件存储、邮件、数据源）

面向选手的提示语保持英文，与前台文案一致。
"""


class BizError(Exception):
    """
    所有业务异常的基类

    - 不耦合 DRF / Response，只是纯数据和语义；
    - 子类只需覆盖 default_code / default_message / http_status；
    - 也可以在 __init__ 时传入自定义 message / code / extra 做覆盖
    """

    #: 子类可覆盖的默认错误码
    default_code: int = 40000

    #: 子类可覆盖的默认提示信息
    default_message: str = "Request failed"

    #: 子类可覆盖的建议 HTTP 状态码（交给异常处理器用）
    http_status: int = 400

    def __init__(self, message: str | None = None, code: int | None = None, *, extra: dict | None = None):
        self.code = code if code is not None else self.default_code
        self.message = message if message is not None else self.default_message
        self.extra = extra or {}
        super().__init__(self.message)

    def __str__(self) -> str:  # 方便日志输出
        return f"[{self.code}] {self.message}"


# ======================
# 通用类错误
# ======================

class BadRequestError(BizError):
    """无法解析的请求 / 请求格式错误"""
    default_code = 40001
    default_message = "Bad request"
    http_status = 400


class ValidationError(BizError):
    """
    参数校验 / 请求数据不合法：
    - 缺少必要字段
    - 字段格式错误
    """
    default_code = 40002
    default_message = "Invalid request parameters"
    http_status = 400


class RequiredFieldsMissingError(ValidationError):
    """表单必填项缺失（阶段一提交表单）"""
    default_code = 40003
    default_message = "Please fill in all required fields"


class VideoLinkRequiredError(ValidationError):
    """视频链接为空：与必填项缺失区分，前台单独提示"""
    default_code = 40004
    default_message = "Please provide a YouTube video link"


class FileTypeError(ValidationError):
    """上传文件类型不符"""
    default_code = 40005
    default_message = "Unsupported file type"


class NotFoundError(BizError):
    """通用资源不存在"""
    default_code = 40400
    default_message = "Resource not found"
    http_status = 404


class TeamNotFoundError(NotFoundError):
    """当前账号尚未登记队伍"""
    default_code = 40401
    default_message = "Team not found"


# ======================
# 认证 / 授权相关
# ======================

class AuthError(BizError):
    """认证相关错误（登录、Token 等），统一归类为 401xx"""
    default_code = 40100
    default_message = "Authentication failed"
    http_status = 401


class InvalidCredentialsError(AuthError):
    """邮箱或密码错误"""
    default_code = 40101
    default_message = "Invalid email or password"


class TokenError(AuthError):
    """Token 无效 / 过期 / 被吊销"""
    default_code = 40102
    default_message = "Session expired, please sign in again"


class PermissionDeniedError(BizError):
    """
    权限不足：
    - 选手访问后台接口
    - 财务管理员执行评审操作等
    """
    default_code = 40300
    default_message = "You do not have permission to perform this action"
    http_status = 403


# ======================
# 前置条件 / 状态错误
# ======================

class ConflictError(BizError):
    """资源冲突：重复登记等"""
    default_code = 40900
    default_message = "Resource conflict"
    http_status = 409


class PreconditionError(BizError):
    """
    前置条件不满足：
    - 当前状态下不允许执行该操作，调用方可在条件满足后重试
    """
    default_code = 40910
    default_message = "Precondition failed"
    http_status = 409


class SubmissionLockedError(PreconditionError):
    """阶段一提交已锁定，仅允许更新视频链接"""
    default_code = 40911
    default_message = "You cannot modify your submission after initial submission"


class DeadlineClosedError(PreconditionError):
    """截止时间已过，拒绝一切修改"""
    default_code = 40912
    default_message = "Submission Closed"


class SubmissionNotFoundError(PreconditionError):
    """目标提交不存在（评分/改链接前需先有提交）"""
    default_code = 40913
    default_message = "Submission not found"
    http_status = 404


class ResultsNotFullyScoredError(PreconditionError):
    """仍有提交未评分，拒绝发布成绩"""
    default_code = 40914
    default_message = "All submissions must be scored before publishing results"


class NotSelectedForPhase2Error(PreconditionError):
    """队伍未入选阶段二"""
    default_code = 40915
    default_message = "Your team has not been selected for Phase 2"
    http_status = 403


# ======================
# 基础设施 / 第三方服务错误
# ======================

class InfrastructureError(BizError):
    """
    基础设施或第三方依赖不可用（可重试）：
    - 存储 / 邮件 / 数据源等依赖故障
    """
    default_code = 50300
    default_message = "Service temporarily unavailable, please retry later"
    http_status = 503


class DataSourceUnavailableError(InfrastructureError):
    """文档数据源读取失败"""
    default_code = 50301
    default_message = "Data source temporarily unavailable"


class StorageUnavailableError(InfrastructureError):
    """文件存储不可用（本地/对象存储）"""
    default_code = 50303
    default_message = "File storage temporarily unavailable, please retry later"


class EmailSendError(InfrastructureError):
    """邮件发送失败"""
    default_code = 50304
    default_message = "Failed to send email, please retry later"


# ======================
# 工具函数
# ======================

def require(condition: bool, error: BizError) -> None:
    """
    小工具：用于在业务代码中快速断言业务条件

    用法：
        require(team.phase2_selected, NotSelectedForPhase2Error())
    """
    if not condition:
        raise error
