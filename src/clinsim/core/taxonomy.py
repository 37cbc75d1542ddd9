"""Verb 分类表 -- verb -> {severity, category}

静态只读映射，是"某个动作有多重要"的唯一来源。
EventLogger 在应用任何显式覆盖之前先查此表；未知 verb 返回默认值而非报错。
"""

from types import MappingProxyType

from pydantic import BaseModel, ConfigDict

from .models.enums import Category, Severity, Verb


class VerbMetadata(BaseModel):
    """单个 verb 的默认严重级别与分类"""

    model_config = ConfigDict(frozen=True)

    severity: Severity
    category: Category


def _meta(severity: Severity, category: Category) -> VerbMetadata:
    return VerbMetadata(severity=severity, category=category)


# 未知 verb 的默认元数据
DEFAULT_VERB_METADATA = _meta(Severity.INFO, Category.NAVIGATION)

VERB_METADATA: MappingProxyType[str, VerbMetadata] = MappingProxyType(
    {
        # 会话
        Verb.STARTED_SESSION: _meta(Severity.IMPORTANT, Category.SESSION),
        Verb.ENDED_SESSION: _meta(Severity.IMPORTANT, Category.SESSION),
        Verb.RESUMED_SESSION: _meta(Severity.INFO, Category.SESSION),
        Verb.IDLE_TIMEOUT: _meta(Severity.INFO, Category.SESSION),
        # 导航
        Verb.VIEWED: _meta(Severity.DEBUG, Category.NAVIGATION),
        Verb.OPENED: _meta(Severity.INFO, Category.NAVIGATION),
        Verb.CLOSED: _meta(Severity.DEBUG, Category.NAVIGATION),
        Verb.NAVIGATED: _meta(Severity.DEBUG, Category.NAVIGATION),
        Verb.SWITCHED_TAB: _meta(Severity.DEBUG, Category.NAVIGATION),
        Verb.SCROLLED: _meta(Severity.DEBUG, Category.NAVIGATION),
        Verb.CLICKED: _meta(Severity.DEBUG, Category.NAVIGATION),
        Verb.SELECTED: _meta(Severity.DEBUG, Category.NAVIGATION),
        Verb.DESELECTED: _meta(Severity.DEBUG, Category.NAVIGATION),
        Verb.TOGGLED: _meta(Severity.DEBUG, Category.NAVIGATION),
        Verb.EXPANDED: _meta(Severity.DEBUG, Category.NAVIGATION),
        Verb.COLLAPSED: _meta(Severity.DEBUG, Category.NAVIGATION),
        # 临床 -- 检验
        Verb.ORDERED_LAB: _meta(Severity.IMPORTANT, Category.CLINICAL),
        Verb.CANCELLED_LAB: _meta(Severity.ACTION, Category.CLINICAL),
        Verb.VIEWED_LAB_RESULT: _meta(Severity.ACTION, Category.CLINICAL),
        Verb.SEARCHED_LABS: _meta(Severity.DEBUG, Category.CLINICAL),
        Verb.FILTERED_LABS: _meta(Severity.DEBUG, Category.CLINICAL),
        Verb.LAB_RESULT_READY: _meta(Severity.INFO, Category.CLINICAL),
        # 临床 -- 治疗
        Verb.ORDERED_MEDICATION: _meta(Severity.CRITICAL, Category.CLINICAL),
        Verb.ADMINISTERED_MEDICATION: _meta(Severity.CRITICAL, Category.CLINICAL),
        Verb.CANCELLED_MEDICATION: _meta(Severity.IMPORTANT, Category.CLINICAL),
        Verb.ORDERED_TREATMENT: _meta(Severity.IMPORTANT, Category.CLINICAL),
        Verb.PERFORMED_INTERVENTION: _meta(Severity.IMPORTANT, Category.CLINICAL),
        # 对话
        Verb.SENT_MESSAGE: _meta(Severity.ACTION, Category.COMMUNICATION),
        Verb.RECEIVED_MESSAGE: _meta(Severity.INFO, Category.COMMUNICATION),
        Verb.COPIED_MESSAGE: _meta(Severity.DEBUG, Category.COMMUNICATION),
        Verb.EDITED_MESSAGE: _meta(Severity.ACTION, Category.COMMUNICATION),
        # 监护
        Verb.ADJUSTED_VITAL: _meta(Severity.ACTION, Category.MONITORING),
        Verb.ACKNOWLEDGED_ALARM: _meta(Severity.ACTION, Category.MONITORING),
        Verb.SILENCED_ALARM: _meta(Severity.ACTION, Category.MONITORING),
        Verb.ALARM_TRIGGERED: _meta(Severity.CRITICAL, Category.MONITORING),
        Verb.VIEWED_TRENDS: _meta(Severity.INFO, Category.MONITORING),
        # 患者信息
        Verb.VIEWED_PATIENT_SUMMARY: _meta(Severity.INFO, Category.CLINICAL),
        Verb.VIEWED_HISTORY: _meta(Severity.INFO, Category.CLINICAL),
        Verb.VIEWED_MEDICATIONS: _meta(Severity.INFO, Category.CLINICAL),
        Verb.VIEWED_ALLERGIES: _meta(Severity.INFO, Category.CLINICAL),
        # 设置
        Verb.CHANGED_SETTING: _meta(Severity.INFO, Category.CONFIGURATION),
        Verb.SAVED_SETTING: _meta(Severity.INFO, Category.CONFIGURATION),
        Verb.RESET_SETTING: _meta(Severity.INFO, Category.CONFIGURATION),
        # 病例/场景
        Verb.LOADED_CASE: _meta(Severity.IMPORTANT, Category.SESSION),
        Verb.VIEWED_PATIENT_INFO: _meta(Severity.INFO, Category.CLINICAL),
        Verb.VIEWED_RECORDS: _meta(Severity.INFO, Category.CLINICAL),
        Verb.SAVED_CASE: _meta(Severity.ACTION, Category.CONFIGURATION),
        Verb.EXPORTED_CASE: _meta(Severity.ACTION, Category.CONFIGURATION),
        Verb.STARTED_SCENARIO: _meta(Severity.IMPORTANT, Category.SESSION),
        Verb.PAUSED_SCENARIO: _meta(Severity.INFO, Category.SESSION),
        Verb.RESUMED_SCENARIO: _meta(Severity.INFO, Category.SESSION),
        Verb.COMPLETED_SCENARIO: _meta(Severity.IMPORTANT, Category.ASSESSMENT),
        Verb.RESET_SCENARIO: _meta(Severity.INFO, Category.SESSION),
        # 评估
        Verb.SUBMITTED: _meta(Severity.IMPORTANT, Category.ASSESSMENT),
        Verb.ANSWERED: _meta(Severity.ACTION, Category.ASSESSMENT),
        Verb.ATTEMPTED: _meta(Severity.INFO, Category.ASSESSMENT),
        Verb.CORRECT_ANSWER: _meta(Severity.IMPORTANT, Category.ASSESSMENT),
        Verb.INCORRECT_ANSWER: _meta(Severity.INFO, Category.ASSESSMENT),
        # 错误
        Verb.ERROR_OCCURRED: _meta(Severity.CRITICAL, Category.ERROR),
        Verb.API_ERROR: _meta(Severity.CRITICAL, Category.ERROR),
        Verb.VALIDATION_ERROR: _meta(Severity.ACTION, Category.ERROR),
    }
)


def get_verb_metadata(verb: str) -> VerbMetadata:
    """查询 verb 的默认元数据

    Args:
        verb: 动作动词（Verb 成员或任意字符串）

    Returns:
        VerbMetadata；未知 verb 返回 DEFAULT_VERB_METADATA（INFO / NAVIGATION）
    """
    return VERB_METADATA.get(verb, DEFAULT_VERB_METADATA)
