"""枚举定义 -- 学习事件分类体系

包含 Severity 严重级别（全序）、Category 分类、Verb 动作动词、
ObjectType 对象类型、Component 组件标签，以及严重级别比较工具。
"""

from enum import StrEnum


class Severity(StrEnum):
    """事件严重级别 -- DEBUG < INFO < ACTION < IMPORTANT < CRITICAL"""

    DEBUG = "DEBUG"  # 开发/调试信息
    INFO = "INFO"  # 被动、信息类事件
    ACTION = "ACTION"  # 用户主动操作
    IMPORTANT = "IMPORTANT"  # 重要的临床/学习操作
    CRITICAL = "CRITICAL"  # 需要关注的关键事件

    @property
    def rank(self) -> int:
        """在全序中的位置（DEBUG=0）"""
        return SEVERITY_ORDER.index(self)


# 严重级别全序，同时作为统计展示顺序
SEVERITY_ORDER: tuple[Severity, ...] = (
    Severity.DEBUG,
    Severity.INFO,
    Severity.ACTION,
    Severity.IMPORTANT,
    Severity.CRITICAL,
)


def severity_at_least(severity: Severity, minimum: Severity) -> bool:
    """判断 severity 是否不低于 minimum

    Args:
        severity: 待判断的级别
        minimum: 最低级别

    Returns:
        True 如果 severity >= minimum
    """
    return Severity(severity).rank >= Severity(minimum).rank


class Category(StrEnum):
    """事件分类 -- 用于分面分析"""

    SESSION = "SESSION"
    NAVIGATION = "NAVIGATION"
    CLINICAL = "CLINICAL"
    COMMUNICATION = "COMMUNICATION"
    MONITORING = "MONITORING"
    CONFIGURATION = "CONFIGURATION"
    ASSESSMENT = "ASSESSMENT"
    ERROR = "ERROR"


class Verb(StrEnum):
    """xAPI 风格动作动词"""

    # 会话生命周期
    STARTED_SESSION = "STARTED_SESSION"
    ENDED_SESSION = "ENDED_SESSION"
    RESUMED_SESSION = "RESUMED_SESSION"
    IDLE_TIMEOUT = "IDLE_TIMEOUT"

    # 导航/UI
    VIEWED = "VIEWED"
    OPENED = "OPENED"
    CLOSED = "CLOSED"
    NAVIGATED = "NAVIGATED"
    SWITCHED_TAB = "SWITCHED_TAB"
    SCROLLED = "SCROLLED"

    # 交互
    CLICKED = "CLICKED"
    SELECTED = "SELECTED"
    DESELECTED = "DESELECTED"
    TOGGLED = "TOGGLED"
    EXPANDED = "EXPANDED"
    COLLAPSED = "COLLAPSED"

    # 检验/检查
    ORDERED_LAB = "ORDERED_LAB"
    CANCELLED_LAB = "CANCELLED_LAB"
    VIEWED_LAB_RESULT = "VIEWED_LAB_RESULT"
    SEARCHED_LABS = "SEARCHED_LABS"
    FILTERED_LABS = "FILTERED_LABS"
    LAB_RESULT_READY = "LAB_RESULT_READY"

    # 治疗/用药
    ORDERED_MEDICATION = "ORDERED_MEDICATION"
    ADMINISTERED_MEDICATION = "ADMINISTERED_MEDICATION"
    CANCELLED_MEDICATION = "CANCELLED_MEDICATION"
    ORDERED_TREATMENT = "ORDERED_TREATMENT"
    PERFORMED_INTERVENTION = "PERFORMED_INTERVENTION"

    # 对话
    SENT_MESSAGE = "SENT_MESSAGE"
    RECEIVED_MESSAGE = "RECEIVED_MESSAGE"
    COPIED_MESSAGE = "COPIED_MESSAGE"
    EDITED_MESSAGE = "EDITED_MESSAGE"

    # 监护/生命体征
    ADJUSTED_VITAL = "ADJUSTED_VITAL"
    ACKNOWLEDGED_ALARM = "ACKNOWLEDGED_ALARM"
    SILENCED_ALARM = "SILENCED_ALARM"
    ALARM_TRIGGERED = "ALARM_TRIGGERED"
    VIEWED_TRENDS = "VIEWED_TRENDS"

    # 患者信息
    VIEWED_PATIENT_SUMMARY = "VIEWED_PATIENT_SUMMARY"
    VIEWED_HISTORY = "VIEWED_HISTORY"
    VIEWED_MEDICATIONS = "VIEWED_MEDICATIONS"
    VIEWED_ALLERGIES = "VIEWED_ALLERGIES"

    # 设置
    CHANGED_SETTING = "CHANGED_SETTING"
    SAVED_SETTING = "SAVED_SETTING"
    RESET_SETTING = "RESET_SETTING"

    # 病例
    LOADED_CASE = "LOADED_CASE"
    VIEWED_PATIENT_INFO = "VIEWED_PATIENT_INFO"
    VIEWED_RECORDS = "VIEWED_RECORDS"
    SAVED_CASE = "SAVED_CASE"
    EXPORTED_CASE = "EXPORTED_CASE"

    # 场景
    STARTED_SCENARIO = "STARTED_SCENARIO"
    PAUSED_SCENARIO = "PAUSED_SCENARIO"
    RESUMED_SCENARIO = "RESUMED_SCENARIO"
    COMPLETED_SCENARIO = "COMPLETED_SCENARIO"
    RESET_SCENARIO = "RESET_SCENARIO"

    # 评估
    SUBMITTED = "SUBMITTED"
    ANSWERED = "ANSWERED"
    ATTEMPTED = "ATTEMPTED"
    CORRECT_ANSWER = "CORRECT_ANSWER"
    INCORRECT_ANSWER = "INCORRECT_ANSWER"

    # 错误
    ERROR_OCCURRED = "ERROR_OCCURRED"
    API_ERROR = "API_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"


class ObjectType(StrEnum):
    """被操作对象类型"""

    SESSION = "session"
    CASE = "case"
    LAB_TEST = "lab_test"
    LAB_RESULT = "lab_result"
    CHAT_MESSAGE = "chat_message"
    VITAL_SIGN = "vital_sign"
    ALARM = "alarm"
    SETTING = "setting"
    BUTTON = "button"
    TAB = "tab"
    MODAL = "modal"
    DRAWER = "drawer"
    PANEL = "panel"
    SCENARIO = "scenario"
    COMPONENT = "component"


class Component(StrEnum):
    """UI 组件标签（事件来源）"""

    CHAT_INTERFACE = "ChatInterface"
    PATIENT_MONITOR = "PatientMonitor"
    PATIENT_VISUAL = "PatientVisual"
    ORDERS_DRAWER = "OrdersDrawer"
    LAB_RESULTS_MODAL = "LabResultsModal"
    CONFIG_PANEL = "ConfigPanel"
    CASE_EDITOR = "CaseEditor"
    SCENARIO_REPOSITORY = "ScenarioRepository"
    LOGIN_PAGE = "LoginPage"
    APP = "App"
    INVESTIGATION_PANEL = "InvestigationPanel"
    PATIENT_INFO_PANEL = "PatientInfoPanel"
    MEDICATION_PANEL = "MedicationPanel"
    TREATMENT_PANEL = "TreatmentPanel"
    SESSION_LOG_VIEWER = "SessionLogViewer"
    VITAL_TRENDS = "VitalTrends"
    GATEWAY = "Gateway"


class MessageRole(StrEnum):
    """对话消息角色"""

    USER = "user"
    ASSISTANT = "assistant"
