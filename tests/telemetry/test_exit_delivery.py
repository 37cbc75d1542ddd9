"""进程退出时的事件投递

在子进程中注册退出刷新，接收端故意慢速响应，
验证解释器退出前 beacon 请求已经送达。
"""

import os
import subprocess
import sys
import textwrap
from pathlib import Path

SRC_DIR = Path(__file__).resolve().parents[2] / "src"

EXIT_SCRIPT = textwrap.dedent(
    """
    import sys
    import time
    from pathlib import Path

    import httpx
    from clinsim.telemetry import EventLogger, HttpEventSink

    out_path = Path(sys.argv[1])

    def handler(request: httpx.Request) -> httpx.Response:
        time.sleep(0.5)
        out_path.write_bytes(request.content)
        return httpx.Response(200, json={"received": 1})

    sink = HttpEventSink(
        "http://sink.test/api/learning-events/batch",
        transport=httpx.MockTransport(handler),
    )
    logger = EventLogger(sink, batch_size=100, flush_interval_s=60)
    logger.install_unload_hooks()
    logger.log("CLICKED", "button", object_id="exit-1")
    """
)


def _run_exit_script(out_path: Path) -> subprocess.CompletedProcess:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(
        p for p in (str(SRC_DIR), env.get("PYTHONPATH", "")) if p
    )
    return subprocess.run(
        [sys.executable, "-c", EXIT_SCRIPT, str(out_path)],
        env=env,
        capture_output=True,
        text=True,
        timeout=30,
    )


def test_pending_events_delivered_before_exit(tmp_path):
    out_path = tmp_path / "delivered.json"
    result = _run_exit_script(out_path)
    assert result.returncode == 0, result.stderr
    assert out_path.exists()
    assert "exit-1" in out_path.read_text(encoding="utf-8")
