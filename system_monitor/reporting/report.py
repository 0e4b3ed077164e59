"""HTML e-mail report built from a single snapshot."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from html import escape

from system_monitor.models import SystemSnapshot

REPORT_SUBJECT = "System Monitor Report"
_GIB = 1024 ** 3

_STYLE = """
      body { font-family: Arial, sans-serif; line-height: 1.6; color: #333; }
      .container { max-width: 600px; margin: 0 auto; padding: 20px; }
      h1 { color: #4f46e5; }
      h2 { color: #6366f1; margin-top: 20px; }
      table { width: 100%; border-collapse: collapse; margin-bottom: 20px; }
      th, td { padding: 10px; text-align: left; border-bottom: 1px solid #ddd; }
      th { background-color: #f8f9fa; }
      .warning { color: #b45309; }
      .footer { margin-top: 30px; font-size: 12px; color: #666; }
"""


@dataclass(frozen=True, slots=True)
class Report:
    subject: str
    body: str


def format_gb(value: int) -> str:
    return f"{value / _GIB:.2f} GB"


def format_percent(value: float) -> str:
    return f"{value:.2f}%"


def _row(label: str, value: object) -> str:
    return f"<tr><th>{escape(label)}</th><td>{escape(str(value))}</td></tr>"


def _table(rows: list[str]) -> str:
    return "<table>\n" + "\n".join(rows) + "\n</table>"


def _generated_on(snapshot: SystemSnapshot) -> str:
    moment = dt.datetime.fromtimestamp(snapshot.captured_at_epoch_ms / 1000, tz=dt.timezone.utc)
    return moment.strftime("%Y-%m-%d %H:%M:%S UTC")


def _cpu_section(snapshot: SystemSnapshot) -> str:
    cpu = snapshot.cpu
    load = ", ".join(f"{value:.2f}" for value in cpu.load_average)
    return _table([
        _row("Model", cpu.model),
        _row("Cores", cpu.core_count),
        _row("Architecture", cpu.architecture),
        _row("Speed", f"{cpu.clock_speed_mhz} MHz"),
        _row("Usage", format_percent(cpu.usage_percent)),
        _row("Load Average (1m, 5m, 15m)", load),
    ])


def _memory_section(snapshot: SystemSnapshot) -> str:
    memory = snapshot.memory
    return _table([
        _row("Total Memory", format_gb(memory.total_bytes)),
        _row("Free Memory", format_gb(memory.free_bytes)),
        _row("Used Memory", format_gb(memory.used_bytes)),
        _row("Usage", format_percent(memory.usage_percent)),
    ])


def _os_section(snapshot: SystemSnapshot) -> str:
    os_info = snapshot.os
    return _table([
        _row("Platform", os_info.platform.value),
        _row("OS", f"{os_info.kernel_type} {os_info.release_version}"),
        _row("Architecture", snapshot.cpu.architecture),
        _row("Hostname", os_info.hostname),
        _row("Uptime", f"{os_info.uptime_seconds / 3600:.2f} hours"),
    ])


def _network_section(snapshot: SystemSnapshot) -> str:
    rows = ["<tr><th>Interface</th><th>IP Address</th><th>MAC Address</th></tr>"]
    for interface in snapshot.network.interfaces:
        address = interface.primary_external_ipv4()
        if address is None:
            continue
        rows.append(
            f"<tr><td>{escape(interface.name)}</td>"
            f"<td>{escape(address.ip)}</td>"
            f"<td>{escape(address.mac)}</td></tr>"
        )
    return _table(rows)


def render_report(snapshot: SystemSnapshot) -> Report:
    """Render ``snapshot`` as a self-contained HTML report.

    The generation time is taken from the snapshot itself, so rendering the
    same snapshot twice yields identical output.
    """

    warning = ""
    if snapshot.error:
        warning = (
            f'<p class="warning">Some metrics could not be collected: '
            f"{escape(snapshot.error)}</p>"
        )

    body = f"""<html>
<head>
  <style>{_STYLE}  </style>
</head>
<body>
  <div class="container">
    <h1>{REPORT_SUBJECT}</h1>
    <p>Generated on: {_generated_on(snapshot)}</p>
    {warning}
    <h2>CPU Information</h2>
{_cpu_section(snapshot)}
    <h2>Memory Information</h2>
{_memory_section(snapshot)}
    <h2>Operating System</h2>
{_os_section(snapshot)}
    <h2>Network Information</h2>
{_network_section(snapshot)}
    <div class="footer">
      <p>This is an automated report from System Monitor. Please do not reply to this email.</p>
    </div>
  </div>
</body>
</html>
"""
    return Report(subject=REPORT_SUBJECT, body=body)
