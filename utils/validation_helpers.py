"""
Pydantic 验证错误处理工具

提供错误消息格式化（API 与页面共用）和 Dash Alert 组件生成功能。
"""
from typing import List, Dict, Any, Optional, Tuple
from pydantic import ValidationError
import dash_bootstrap_components as dbc
from dash import html


def format_validation_error(error: ValidationError) -> List[Dict[str, Any]]:
    """
    格式化 Pydantic 验证错误为用户友好的消息列表

    Args:
        error: Pydantic ValidationError 对象

    Returns:
        格式化的错误消息列表，每个错误包含 field / message / type

    Example:
        >>> from database.schemas import StrategyCreate
        >>> try:
        ...     StrategyCreate(title="", status="Archived")
        ... except ValidationError as e:
        ...     errors = format_validation_error(e)
        ...     # [{'field': 'title', 'message': '字段不能为空', ...},
        ...     #  {'field': 'status', 'message': '新建战略只能处于工作中状态...', ...}]
    """
    formatted_errors = []

    for err in error.errors():
        field_path = ".".join(str(loc) for loc in err['loc'])
        error_type = err['type']
        error_msg = err['msg']
        ctx = err.get('ctx', {})

        if error_type == 'string_too_short':
            message = "字段不能为空"
        elif error_type == 'string_too_long':
            message = f"字段长度不能超过 {ctx.get('max_length', '未知')} 个字符"
        elif error_type == 'greater_than_equal':
            message = f"值必须大于或等于 {ctx.get('ge', '未知')}"
        elif error_type == 'less_than_equal':
            message = f"值必须小于或等于 {ctx.get('le', '未知')}"
        elif error_type == 'string_pattern_mismatch':
            message = f"格式不正确，应匹配 {ctx.get('pattern', '')}"
        elif error_type == 'value_error':
            # 自定义验证错误（状态、类型标签等）
            message = error_msg.replace('Value error, ', '')
        elif error_type == 'missing':
            message = "此字段为必填项"
        else:
            message = error_msg

        formatted_errors.append({
            'field': field_path,
            'message': message,
            'type': error_type
        })

    return formatted_errors


def create_validation_alert(
    errors: List[Dict[str, Any]],
    color: str = "danger",
    dismissible: bool = True
) -> dbc.Alert:
    """
    创建 Dash Bootstrap Alert 组件显示验证错误

    Args:
        errors: 格式化的错误消息列表（来自 format_validation_error）
        color: Alert 颜色
        dismissible: 是否可关闭
    """
    error_items = [
        html.Li([html.Strong(f"{err['field']}: "), html.Span(err['message'])])
        for err in errors
    ]

    return dbc.Alert(
        [
            html.H5("❌ 数据验证失败", className="alert-heading"),
            html.P("请检查以下字段："),
            html.Ul(error_items, className="mb-0")
        ],
        color=color,
        dismissible=dismissible,
        className="mb-3"
    )


def create_success_alert(message: str = "✅ 数据保存成功！") -> dbc.Alert:
    return dbc.Alert(
        message,
        color="success",
        dismissible=True,
        duration=3000,  # 3秒后自动消失
        className="mb-3"
    )


def validate_and_create_alert(
    schema_class,
    data: Dict[str, Any]
) -> Tuple[Optional[Any], Optional[dbc.Alert]]:
    """
    验证数据，供 Dash 回调使用

    Returns:
        (schema_instance, None) 验证成功
        (None, 错误Alert)     验证失败
    """
    try:
        return schema_class.model_validate(data), None
    except ValidationError as e:
        return None, create_validation_alert(format_validation_error(e))
