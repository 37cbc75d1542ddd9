"""领域动作便捷方法 -- 对 EventLogger.log() 的参数整形

每个方法固定 verb / object_type，把调用方的标识字段转入 LogOptions，
不持有任何独立状态；severity/category 解析规则与 log() 完全一致。
错误类方法（error_occurred / api_error / alarm_triggered）强制 CRITICAL。
"""

from typing import Any

from clinsim.core.models.enums import Component, MessageRole, ObjectType, Severity, Verb

# 检验面板计时标记
LAB_PANEL_TIMING_MARK = "labPanel"


def drawer_timing_mark(drawer_name: str) -> str:
    """抽屉打开/关闭计时标记名"""
    return f"drawer:{drawer_name}"


def _id(value: Any) -> str | None:
    return None if value is None else str(value)


class LearningActionsMixin:
    """学习动作便捷方法

    由 EventLogger 混入；依赖宿主类提供 log / set_context / clear_context /
    start_timing / flush_on_unload。
    """

    # ============================================================
    # 会话
    # ============================================================

    def session_started(
        self, session_id: int | str, case_id: int | str | None = None, case_name: str | None = None
    ):
        self.set_context(session_id=session_id, case_id=case_id)
        return self.log(
            Verb.STARTED_SESSION,
            ObjectType.SESSION,
            object_id=_id(session_id),
            object_name=case_name,
            component=Component.APP,
        )

    def session_ended(self, duration_ms: int | None = None):
        """记录会话结束，随后 beacon 刷新并清除 session/case 上下文"""
        event = self.log(
            Verb.ENDED_SESSION,
            ObjectType.SESSION,
            object_id=_id(self._context.session_id),
            duration_ms=duration_ms,
            component=Component.APP,
        )
        self.flush_on_unload()
        self.clear_context()
        return event

    def session_resumed(
        self, session_id: int | str, case_id: int | str | None = None, case_name: str | None = None
    ):
        self.set_context(session_id=session_id, case_id=case_id)
        return self.log(
            Verb.RESUMED_SESSION,
            ObjectType.SESSION,
            object_id=_id(session_id),
            object_name=case_name,
            component=Component.APP,
        )

    def idle_timeout(self, idle_ms: int | None = None):
        return self.log(
            Verb.IDLE_TIMEOUT,
            ObjectType.SESSION,
            object_id=_id(self._context.session_id),
            duration_ms=idle_ms,
            component=Component.APP,
        )

    def case_loaded(self, case_id: int | str, case_name: str | None = None):
        return self.log(
            Verb.LOADED_CASE,
            ObjectType.CASE,
            object_id=_id(case_id),
            object_name=case_name,
            component=Component.CONFIG_PANEL,
        )

    # ============================================================
    # UI
    # ============================================================

    def component_opened(self, component_name: str, object_name: str | None = None):
        return self.log(
            Verb.OPENED,
            ObjectType.COMPONENT,
            object_id=component_name,
            object_name=object_name or component_name,
            component=component_name,
        )

    def component_closed(self, component_name: str, object_name: str | None = None):
        return self.log(
            Verb.CLOSED,
            ObjectType.COMPONENT,
            object_id=component_name,
            object_name=object_name or component_name,
            component=component_name,
        )

    def tab_switched(self, tab_name: str, component_name: str | None = None):
        return self.log(
            Verb.SWITCHED_TAB,
            ObjectType.TAB,
            object_id=tab_name,
            object_name=tab_name,
            component=component_name,
        )

    def button_clicked(
        self,
        button_name: str,
        component_name: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        return self.log(
            Verb.CLICKED,
            ObjectType.BUTTON,
            object_id=button_name,
            object_name=button_name,
            component=component_name,
            context=context,
        )

    def modal_opened(self, modal_name: str, component_name: str | None = None):
        return self.log(
            Verb.OPENED,
            ObjectType.MODAL,
            object_id=modal_name,
            object_name=modal_name,
            component=component_name,
        )

    def modal_closed(self, modal_name: str, component_name: str | None = None):
        return self.log(
            Verb.CLOSED,
            ObjectType.MODAL,
            object_id=modal_name,
            object_name=modal_name,
            component=component_name,
        )

    def drawer_opened(self, drawer_name: str):
        self.start_timing(drawer_timing_mark(drawer_name))
        return self.log(
            Verb.OPENED,
            ObjectType.DRAWER,
            object_id=drawer_name,
            object_name=drawer_name,
        )

    def drawer_closed(self, drawer_name: str):
        """抽屉关闭，duration_ms 为本次打开时长"""
        return self.log(
            Verb.CLOSED,
            ObjectType.DRAWER,
            object_id=drawer_name,
            object_name=drawer_name,
            timing_mark=drawer_timing_mark(drawer_name),
        )

    def view_mode_changed(self, old_mode: str, new_mode: str, component_name: str | None = None):
        return self.log(
            Verb.SWITCHED_TAB,
            ObjectType.COMPONENT,
            object_id=new_mode,
            object_name=f"View Mode: {new_mode}",
            component=component_name,
            context={"oldMode": old_mode, "newMode": new_mode},
        )

    def group_expanded(self, group_name: str, component_name: str | None = None):
        return self.log(
            Verb.EXPANDED,
            ObjectType.COMPONENT,
            object_id=group_name,
            object_name=group_name,
            component=component_name,
        )

    def group_collapsed(self, group_name: str, component_name: str | None = None):
        return self.log(
            Verb.COLLAPSED,
            ObjectType.COMPONENT,
            object_id=group_name,
            object_name=group_name,
            component=component_name,
        )

    # ============================================================
    # 检验
    # ============================================================

    def lab_panel_opened(self, component_name: str | None = None):
        self.start_timing(LAB_PANEL_TIMING_MARK)
        return self.log(
            Verb.OPENED,
            ObjectType.PANEL,
            object_id="investigation_panel",
            object_name="Investigation Panel",
            component=component_name,
        )

    def lab_panel_closed(self, component_name: str | None = None):
        return self.log(
            Verb.CLOSED,
            ObjectType.PANEL,
            object_id="investigation_panel",
            object_name="Investigation Panel",
            component=component_name,
            timing_mark=LAB_PANEL_TIMING_MARK,
        )

    def lab_ordered(self, lab_id: int | str, lab_name: str, component_name: str | None = None):
        return self.log(
            Verb.ORDERED_LAB,
            ObjectType.LAB_TEST,
            object_id=_id(lab_id),
            object_name=lab_name,
            component=component_name,
        )

    def lab_result_viewed(
        self,
        lab_id: int | str,
        lab_name: str,
        result: str | None = None,
        component_name: str | None = None,
    ):
        return self.log(
            Verb.VIEWED_LAB_RESULT,
            ObjectType.LAB_RESULT,
            object_id=_id(lab_id),
            object_name=lab_name,
            result=result,
            component=component_name,
        )

    def lab_searched(self, search_term: str, results_count: int, component_name: str | None = None):
        return self.log(
            Verb.SEARCHED_LABS,
            ObjectType.LAB_TEST,
            object_name=search_term,
            result=f"{results_count} results",
            component=component_name,
        )

    def lab_filtered(self, filter_type: str, filter_value: str, component_name: str | None = None):
        return self.log(
            Verb.FILTERED_LABS,
            ObjectType.LAB_TEST,
            object_id=filter_type,
            object_name=filter_value,
            component=component_name,
        )

    def lab_result_ready(
        self,
        lab_id: int | str,
        lab_name: str,
        component_name: str | None = None,
        is_abnormal: bool = False,
    ):
        """检验结果可用；异常结果提升为 IMPORTANT"""
        return self.log(
            Verb.LAB_RESULT_READY,
            ObjectType.LAB_RESULT,
            object_id=_id(lab_id),
            object_name=lab_name,
            component=component_name,
            context={"isAbnormal": bool(is_abnormal)},
            severity=Severity.IMPORTANT if is_abnormal else Severity.INFO,
        )

    # ============================================================
    # 对话
    # ============================================================

    def message_sent(self, content: str, component_name: str | None = None):
        return self.log(
            Verb.SENT_MESSAGE,
            ObjectType.CHAT_MESSAGE,
            component=component_name,
            message_content=content,
            message_role=MessageRole.USER,
        )

    def message_received(self, content: str, component_name: str | None = None):
        return self.log(
            Verb.RECEIVED_MESSAGE,
            ObjectType.CHAT_MESSAGE,
            component=component_name,
            message_content=content,
            message_role=MessageRole.ASSISTANT,
        )

    def message_copied(self, component_name: str | None = None):
        return self.log(Verb.COPIED_MESSAGE, ObjectType.CHAT_MESSAGE, component=component_name)

    # ============================================================
    # 监护
    # ============================================================

    def vital_adjusted(
        self, vital_sign: str, old_value: Any, new_value: Any, component_name: str | None = None
    ):
        return self.log(
            Verb.ADJUSTED_VITAL,
            ObjectType.VITAL_SIGN,
            object_id=vital_sign,
            object_name=vital_sign,
            component=component_name,
            context={"oldValue": old_value, "newValue": new_value},
        )

    def alarm_acknowledged(self, alarm_type: str, component_name: str | None = None):
        return self.log(
            Verb.ACKNOWLEDGED_ALARM,
            ObjectType.ALARM,
            object_id=alarm_type,
            object_name=alarm_type,
            component=component_name,
        )

    def alarm_silenced(self, alarm_type: str, component_name: str | None = None):
        return self.log(
            Verb.SILENCED_ALARM,
            ObjectType.ALARM,
            object_id=alarm_type,
            object_name=alarm_type,
            component=component_name,
        )

    def alarm_triggered(
        self,
        alarm_type: str,
        vital_sign: str,
        value: float,
        threshold: float,
        component_name: str | None = None,
    ):
        return self.log(
            Verb.ALARM_TRIGGERED,
            ObjectType.ALARM,
            object_id=alarm_type,
            object_name=f"{vital_sign} Alarm",
            component=component_name,
            context={"vitalSign": vital_sign, "value": value, "threshold": threshold},
            severity=Severity.CRITICAL,
        )

    # ============================================================
    # 设置 / 场景
    # ============================================================

    def setting_changed(
        self, setting_name: str, old_value: Any, new_value: Any, component_name: str | None = None
    ):
        return self.log(
            Verb.CHANGED_SETTING,
            ObjectType.SETTING,
            object_id=setting_name,
            object_name=setting_name,
            component=component_name,
            context={"oldValue": old_value, "newValue": new_value},
        )

    def scenario_started(self, scenario_name: str, component_name: str | None = None):
        return self.log(
            Verb.STARTED_SCENARIO,
            ObjectType.SCENARIO,
            object_name=scenario_name,
            component=component_name,
        )

    def scenario_paused(self, scenario_name: str, component_name: str | None = None):
        return self.log(
            Verb.PAUSED_SCENARIO,
            ObjectType.SCENARIO,
            object_name=scenario_name,
            component=component_name,
        )

    def scenario_resumed(self, scenario_name: str, component_name: str | None = None):
        return self.log(
            Verb.RESUMED_SCENARIO,
            ObjectType.SCENARIO,
            object_name=scenario_name,
            component=component_name,
        )

    def scenario_completed(
        self, scenario_name: str, component_name: str | None = None, duration_ms: int | None = None
    ):
        return self.log(
            Verb.COMPLETED_SCENARIO,
            ObjectType.SCENARIO,
            object_name=scenario_name,
            component=component_name,
            duration_ms=duration_ms,
        )

    # ============================================================
    # 治疗
    # ============================================================

    def medication_ordered(
        self,
        medication_id: int | str,
        medication_name: str,
        dose: str | None,
        route: str | None,
        component_name: str | None = None,
    ):
        return self.log(
            Verb.ORDERED_MEDICATION,
            ObjectType.COMPONENT,
            object_id=_id(medication_id),
            object_name=medication_name,
            component=component_name,
            context={"dose": dose, "route": route},
        )

    def treatment_ordered(
        self,
        treatment_id: int | str,
        treatment_name: str,
        component_name: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        return self.log(
            Verb.ORDERED_TREATMENT,
            ObjectType.COMPONENT,
            object_id=_id(treatment_id),
            object_name=treatment_name,
            component=component_name,
            context=context,
        )

    def intervention_performed(
        self, intervention_name: str, component_name: str | None = None, result: str | None = None
    ):
        return self.log(
            Verb.PERFORMED_INTERVENTION,
            ObjectType.COMPONENT,
            object_name=intervention_name,
            component=component_name,
            result=result,
        )

    # ============================================================
    # 患者信息
    # ============================================================

    def patient_summary_viewed(self, component_name: str | None = None):
        return self.log(
            Verb.VIEWED_PATIENT_SUMMARY,
            ObjectType.COMPONENT,
            object_name="Patient Summary",
            component=component_name,
        )

    def patient_history_viewed(self, component_name: str | None = None):
        return self.log(
            Verb.VIEWED_HISTORY,
            ObjectType.COMPONENT,
            object_name="Patient History",
            component=component_name,
        )

    def patient_medications_viewed(self, component_name: str | None = None):
        return self.log(
            Verb.VIEWED_MEDICATIONS,
            ObjectType.COMPONENT,
            object_name="Patient Medications",
            component=component_name,
        )

    def patient_allergies_viewed(self, component_name: str | None = None):
        return self.log(
            Verb.VIEWED_ALLERGIES,
            ObjectType.COMPONENT,
            object_name="Patient Allergies",
            component=component_name,
        )

    # ============================================================
    # 错误（进入同一条管线）
    # ============================================================

    def validation_error(
        self,
        field_name: str,
        error_message: str,
        component_name: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        return self.log(
            Verb.VALIDATION_ERROR,
            ObjectType.COMPONENT,
            object_id=field_name,
            object_name=field_name,
            result=error_message,
            component=component_name,
            context=context,
        )

    def error_occurred(
        self,
        error_type: str,
        error_message: str,
        component_name: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        """应用错误；强制 CRITICAL，不会被最低级别过滤"""
        return self.log(
            Verb.ERROR_OCCURRED,
            ObjectType.COMPONENT,
            object_id=error_type,
            object_name=error_type,
            result=error_message,
            component=component_name,
            context=context,
            severity=Severity.CRITICAL,
        )

    def api_error(
        self,
        endpoint: str,
        status_code: int,
        error_message: str | None = None,
        component_name: str | None = None,
    ):
        """API 调用失败；强制 CRITICAL"""
        return self.log(
            Verb.API_ERROR,
            ObjectType.COMPONENT,
            object_id=endpoint,
            object_name=f"{status_code}: {endpoint}",
            result=error_message,
            component=component_name,
            context={"endpoint": endpoint, "statusCode": status_code},
            severity=Severity.CRITICAL,
        )
