"""配置常量模块 -- 可通过环境变量覆盖

包含后端 API 地址、访问令牌、Viewer 展示截断长度等可配置常量。
"""

import os


def get_api_base_url() -> str:
    """获取后端 API 基础 URL（事件接收端与事件查询端共用）"""
    return os.environ.get("CLINSIM_API_BASE_URL", "http://localhost:3000").rstrip("/")


def get_api_token() -> str | None:
    """获取 Bearer 访问令牌，未配置时返回 None"""
    return os.environ.get("CLINSIM_API_TOKEN") or None


# 事件批量投递路径
EVENT_BATCH_PATH: str = "/api/learning-events/batch"

# 单会话事件查询路径（{session_id} 占位）
SESSION_EVENTS_PATH: str = "/api/learning-events/session/{session_id}"

# 跨会话最近事件查询路径
RECENT_EVENTS_PATH: str = "/api/learning-events/all"

# 日志条目中的消息预览截断长度
MESSAGE_PREVIEW_LENGTH: int = 100

# 剪贴板摘要中的消息预览截断长度
CLIPBOARD_PREVIEW_LENGTH: int = 200

# 统计面板 Top Actions 数量
TOP_VERBS_LIMIT: int = int(os.environ.get("CLINSIM_TOP_VERBS_LIMIT", "5"))
