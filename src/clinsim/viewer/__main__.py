"""CLI 入口模块 -- python -m clinsim.viewer <command> [session_id]

支持的命令：
  stats        打印统计摘要
  summary      打印剪贴板格式的事件摘要
  log          打印日志条目
  export-json  导出 JSON 文档到当前目录
  export-csv   导出 CSV 到当前目录
"""

import asyncio
import sys
from pathlib import Path

from clinsim.core.config import get_api_token

from .client import LearningEventsClient
from .config import load_viewer_config
from .service import SessionLogViewer

COMMANDS = ("stats", "summary", "log", "export-json", "export-csv")


def main() -> None:
    """CLI 主入口"""
    if len(sys.argv) < 2:
        print("用法: python -m clinsim.viewer <command> [session_id]")
        print("命令:")
        print("  stats        打印统计摘要")
        print("  summary      打印剪贴板格式的事件摘要")
        print("  log          打印日志条目")
        print("  export-json  导出 JSON 文档到当前目录")
        print("  export-csv   导出 CSV 到当前目录")
        sys.exit(1)

    command = sys.argv[1]
    session_id = sys.argv[2] if len(sys.argv) > 2 else None

    if command not in COMMANDS:
        print(f"未知命令: {command}")
        print(f"可用命令: {', '.join(COMMANDS)}")
        sys.exit(1)

    sys.exit(asyncio.run(run(command, session_id)))


async def run(command: str, session_id: str | None) -> int:
    """加载事件并执行命令，返回进程退出码"""
    config = load_viewer_config()
    client = LearningEventsClient(config.api_base_url, token_provider=get_api_token)
    # 单次命令，不开启自动刷新
    async with SessionLogViewer.from_config(
        config, client, session_id=session_id, auto_refresh=False
    ) as viewer:
        if not await viewer.refresh():
            print(f"查询失败: {viewer.error}")
            return 1

        if command == "stats":
            print_statistics(viewer)
        elif command == "summary":
            print(viewer.clipboard_summary())
        elif command == "log":
            print(viewer.render())
        elif command == "export-json":
            write_export(viewer.export_filename("json"), viewer.export_json())
        elif command == "export-csv":
            write_export(viewer.export_filename("csv"), viewer.export_csv())
    return 0


def print_statistics(viewer: SessionLogViewer) -> None:
    stats = viewer.statistics()
    print(f"事件总数: {stats.total}")
    print("按严重级别:")
    for severity, count in stats.severity_counts.items():
        print(f"  {severity:<10} {count}")
    print("按分类:")
    for category, count in stats.category_counts.items():
        print(f"  {category:<14} {count}")
    print("Top Actions:")
    for item in stats.top_verbs:
        print(f"  {item.verb.replace('_', ' '):<24} {item.count}")
    print(f"平均耗时: {stats.avg_duration_ms}ms（{stats.events_with_duration} 条带耗时）")


def write_export(filename: str, content: str) -> None:
    path = Path.cwd() / filename
    path.write_text(content, encoding="utf-8")
    print(f"已导出: {path}")


if __name__ == "__main__":
    main()
